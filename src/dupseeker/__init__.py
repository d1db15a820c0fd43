"""DupSeeker: duplicate marking for aligned sequencing reads.

This package groups aligned reads and read pairs by their unclipped 5'
positions, marks all but one member of each group as duplicate, classifies
optical duplicates from the tile/x/y coordinates encoded in read names, and
reports duplication metrics with a library size estimate.
"""

from dupseeker.__version__ import (
    __version__,
    __author__,
    __email__,
    __license__,
    __description__,
)
from dupseeker.config import Config
from dupseeker.core.engine import DuplicateMarker, MarkDuplicatesResult, mark_duplicates
from dupseeker.exceptions import DupSeekerError

__all__ = [
    "__version__",
    "__author__",
    "__email__",
    "__license__",
    "__description__",
    "Config",
    "DuplicateMarker",
    "MarkDuplicatesResult",
    "mark_duplicates",
    "DupSeekerError",
]
