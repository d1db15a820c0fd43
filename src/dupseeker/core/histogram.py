"""Duplicate-set size histograms."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterator, Mapping, Tuple

import pandas as pd

from dupseeker.constants import (
    ALL_SETS_LABEL,
    HISTOGRAM_BIN_LABEL,
    NON_OPTICAL_SETS_LABEL,
    OPTICAL_SETS_LABEL,
)


class SetSizeHistogram:
    """Counts of duplicate sets keyed by (float) set size."""

    def __init__(self, value_label: str, bin_label: str = HISTOGRAM_BIN_LABEL) -> None:
        self.value_label = value_label
        self.bin_label = bin_label
        self._bins: Counter = Counter()

    def increment(self, size: float, count: float = 1.0) -> None:
        self._bins[float(size)] += count

    def get(self, size: float, default: float = 0.0) -> float:
        return self._bins.get(float(size), default)

    def __getitem__(self, size: float) -> float:
        return self._bins[float(size)]

    def __contains__(self, size: object) -> bool:
        return isinstance(size, (int, float)) and float(size) in self._bins

    def __iter__(self) -> Iterator[float]:
        return iter(sorted(self._bins))

    def __len__(self) -> int:
        return len(self._bins)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SetSizeHistogram):
            return NotImplemented
        return self.value_label == other.value_label and dict(self._bins) == dict(other._bins)

    def __repr__(self) -> str:
        return f"SetSizeHistogram({self.value_label!r}, {self.as_dict()!r})"

    def items(self) -> Iterator[Tuple[float, float]]:
        for size in self:
            yield size, self._bins[size]

    def as_dict(self) -> Dict[float, float]:
        return dict(self.items())

    @property
    def is_empty(self) -> bool:
        return not self._bins

    def total_units(self) -> float:
        """Sum of size x count over every bin."""
        return sum(size * count for size, count in self._bins.items())

    def merge(self, other: "SetSizeHistogram") -> "SetSizeHistogram":
        merged = SetSizeHistogram(self.value_label, self.bin_label)
        merged._bins = self._bins + other._bins
        return merged


class SetSizeHistogramAccumulator:
    """Tracks the all / non-optical / optical set-size histograms of a run."""

    LABELS = (ALL_SETS_LABEL, NON_OPTICAL_SETS_LABEL, OPTICAL_SETS_LABEL)

    def __init__(self) -> None:
        self.histograms: Dict[str, SetSizeHistogram] = {
            label: SetSizeHistogram(label) for label in self.LABELS
        }

    @property
    def all_sets(self) -> SetSizeHistogram:
        return self.histograms[ALL_SETS_LABEL]

    @property
    def non_optical_sets(self) -> SetSizeHistogram:
        return self.histograms[NON_OPTICAL_SETS_LABEL]

    @property
    def optical_sets(self) -> SetSizeHistogram:
        return self.histograms[OPTICAL_SETS_LABEL]

    def record(self, set_size: int, optical_count: int = 0) -> None:
        """Record one duplicate set; singletons are not duplicate sets."""
        if set_size < 2:
            return
        self.all_sets.increment(set_size)
        self.non_optical_sets.increment(set_size - optical_count)
        if optical_count > 0:
            self.optical_sets.increment(optical_count + 1)

    def merge(self, other: "SetSizeHistogramAccumulator") -> "SetSizeHistogramAccumulator":
        merged = SetSizeHistogramAccumulator()
        merged.histograms = {
            label: self.histograms[label].merge(other.histograms[label]) for label in self.LABELS
        }
        return merged

    def to_dataframe(self) -> pd.DataFrame:
        """One row per bin, one column per histogram (missing bins are 0)."""
        return histograms_to_dataframe(self.histograms)


def histograms_to_dataframe(histograms: Mapping[str, SetSizeHistogram]) -> pd.DataFrame:
    bins = sorted({size for hist in histograms.values() for size in hist})
    frame = pd.DataFrame({HISTOGRAM_BIN_LABEL: bins})
    for label, hist in histograms.items():
        frame[label] = [hist.get(size) for size in bins]
    return frame
