"""DupSeeker file-level modules: alignment IO, metrics output and the marking runner."""

from dupseeker.modules.base import ModuleBase, ModuleResult
from dupseeker.modules.mark_duplicates import MarkDuplicatesModule

__all__ = ["ModuleBase", "ModuleResult", "MarkDuplicatesModule"]
