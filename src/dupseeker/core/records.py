"""Alignment record model consumed and returned by the duplicate marker.

Records are immutable. The engine never flips bits on an input record; its
result yields a ``MarkedRecord`` per record, carrying a copy with the
duplicate bit rewritten together with the duplicate/optical decisions.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from dupseeker.constants import (
    FLAG_DUPLICATE,
    FLAG_MATE_REVERSE,
    FLAG_MATE_UNMAPPED,
    FLAG_PAIRED,
    FLAG_QCFAIL,
    FLAG_READ1,
    FLAG_READ2,
    FLAG_REVERSE,
    FLAG_SECONDARY,
    FLAG_SUPPLEMENTARY,
    FLAG_UNMAPPED,
    UNKNOWN_LIBRARY,
)


@dataclass(frozen=True)
class PhysicalLocation:
    """Position of a cluster on the flowcell."""

    read_group: Optional[str]
    tile: int
    x: int
    y: int

    @property
    def tile_key(self) -> Tuple[Optional[str], int]:
        """Clusters are only comparable within one read group and tile."""
        return (self.read_group, self.tile)


@dataclass(frozen=True)
class AlignmentRecord:
    """A decoded alignment, already mapped.

    Coordinates are 1-based and inclusive. ``leading_clip``/``trailing_clip``
    hold the soft+hard clipped bases at the left/right ends of the alignment
    so that the unclipped 5' end can be recovered.
    """

    name: str
    flag: int = 0
    reference_index: int = -1
    alignment_start: int = 0
    alignment_end: Optional[int] = None
    leading_clip: int = 0
    trailing_clip: int = 0
    mate_reference_index: int = -1
    mate_alignment_start: int = 0
    read_group: Optional[str] = None
    library: str = UNKNOWN_LIBRARY
    base_qualities: Tuple[int, ...] = field(default=(), repr=False)

    # ---- flag accessors (pysam naming) ----
    @property
    def is_paired(self) -> bool:
        return bool(self.flag & FLAG_PAIRED)

    @property
    def is_unmapped(self) -> bool:
        return bool(self.flag & FLAG_UNMAPPED)

    @property
    def mate_is_unmapped(self) -> bool:
        return bool(self.flag & FLAG_MATE_UNMAPPED)

    @property
    def is_reverse(self) -> bool:
        return bool(self.flag & FLAG_REVERSE)

    @property
    def mate_is_reverse(self) -> bool:
        return bool(self.flag & FLAG_MATE_REVERSE)

    @property
    def is_read1(self) -> bool:
        return bool(self.flag & FLAG_READ1)

    @property
    def is_read2(self) -> bool:
        return bool(self.flag & FLAG_READ2)

    @property
    def is_secondary(self) -> bool:
        return bool(self.flag & FLAG_SECONDARY)

    @property
    def is_qcfail(self) -> bool:
        return bool(self.flag & FLAG_QCFAIL)

    @property
    def is_duplicate(self) -> bool:
        return bool(self.flag & FLAG_DUPLICATE)

    @property
    def is_supplementary(self) -> bool:
        return bool(self.flag & FLAG_SUPPLEMENTARY)

    # ---- coordinates ----
    @property
    def reference_end(self) -> int:
        """Last aligned reference base (falls back to the start for point records)."""
        if self.alignment_end is None:
            return self.alignment_start
        return self.alignment_end

    @property
    def unclipped_start(self) -> int:
        return self.alignment_start - self.leading_clip

    @property
    def unclipped_end(self) -> int:
        return self.reference_end + self.trailing_clip

    @property
    def five_prime_position(self) -> int:
        """Unclipped 5' coordinate: the right end for reverse-strand reads."""
        if self.is_reverse:
            return self.unclipped_end
        return self.unclipped_start

    @property
    def mapped_reference_length(self) -> int:
        return self.reference_end - self.alignment_start + 1

    def with_duplicate_flag(self, duplicate: bool) -> "AlignmentRecord":
        """Return a copy with the duplicate bit set or cleared."""
        if duplicate:
            flag = self.flag | FLAG_DUPLICATE
        else:
            flag = self.flag & ~FLAG_DUPLICATE
        if flag == self.flag:
            return self
        return replace(self, flag=flag)


@dataclass(frozen=True)
class MarkedRecord:
    """Per-record outcome of a marking pass."""

    record: AlignmentRecord
    duplicate: bool = False
    optical_duplicate: bool = False

    @property
    def name(self) -> str:
        return self.record.name
