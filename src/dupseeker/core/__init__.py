"""Core duplicate marking functionality (DupSeeker)."""

from dupseeker.core.engine import DuplicateMarker, MarkDuplicatesResult, mark_duplicates
from dupseeker.core.histogram import SetSizeHistogram, SetSizeHistogramAccumulator
from dupseeker.core.metrics import DuplicationMetrics, estimate_library_size
from dupseeker.core.records import AlignmentRecord, MarkedRecord, PhysicalLocation

__all__ = [
    "AlignmentRecord",
    "DuplicateMarker",
    "DuplicationMetrics",
    "MarkDuplicatesResult",
    "MarkedRecord",
    "PhysicalLocation",
    "SetSizeHistogram",
    "SetSizeHistogramAccumulator",
    "estimate_library_size",
    "mark_duplicates",
]
