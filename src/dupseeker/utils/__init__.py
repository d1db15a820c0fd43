"""Utility functions (DupSeeker)."""

from dupseeker.utils.logging import get_logger, setup_logging
from dupseeker.utils.progress import iter_progress

__all__ = ["get_logger", "setup_logging", "iter_progress"]
