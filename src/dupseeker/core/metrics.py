"""Duplication metrics and the Lander-Waterman library size estimate."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Iterable, Optional

import pandas as pd

from dupseeker.constants import LIBRARY_SIZE_BISECTION_STEPS

COUNTER_FIELDS = (
    "unpaired_reads_examined",
    "read_pairs_examined",
    "secondary_or_supplementary_rds",
    "unmapped_reads",
    "unpaired_read_duplicates",
    "read_pair_duplicates",
    "read_pair_optical_duplicates",
)


def _lander_waterman(x: float, c: float, n: float) -> float:
    """f(x) = c/x - 1 + exp(-n/x), zero at the library size ``x``.

    ``c`` is the number of distinct molecules observed and ``n`` the number
    of molecules sequenced.
    """
    return c / x - 1 + math.exp(-n / x)


def estimate_library_size(read_pairs: int, unique_read_pairs: int) -> Optional[int]:
    """Estimate the number of distinct molecules in the library.

    Solves ``unique = N * (1 - exp(-read_pairs / N))`` for ``N`` by bisection
    on the ratio ``N / unique``.

    Returns:
        The estimate, or ``None`` when no duplication was observed or the
        inputs admit no solution.
    """
    read_pair_duplicates = read_pairs - unique_read_pairs
    if read_pairs <= 0 or read_pair_duplicates <= 0 or unique_read_pairs <= 0:
        return None

    lower = 1.0
    upper = 100.0
    if _lander_waterman(lower * unique_read_pairs, unique_read_pairs, read_pairs) < 0:
        return None

    while _lander_waterman(upper * unique_read_pairs, unique_read_pairs, read_pairs) > 0:
        upper *= 10.0

    for _ in range(LIBRARY_SIZE_BISECTION_STEPS):
        ratio = (lower + upper) / 2.0
        value = _lander_waterman(ratio * unique_read_pairs, unique_read_pairs, read_pairs)
        if value == 0:
            break
        elif value > 0:
            lower = ratio
        else:
            upper = ratio

    return int(unique_read_pairs * (lower + upper) / 2.0)


@dataclass
class DuplicationMetrics:
    """Counters and derived statistics for one library, or for a whole run."""

    library: Optional[str] = None
    unpaired_reads_examined: int = 0
    read_pairs_examined: int = 0
    secondary_or_supplementary_rds: int = 0
    unmapped_reads: int = 0
    unpaired_read_duplicates: int = 0
    read_pair_duplicates: int = 0
    read_pair_optical_duplicates: int = 0
    percent_duplication: Optional[float] = None
    estimated_library_size: Optional[int] = None

    def calculate_derived_fields(self) -> "DuplicationMetrics":
        """Fill percent duplication and estimated library size in place."""
        examined = self.unpaired_reads_examined + 2 * self.read_pairs_examined
        if examined > 0:
            duplicates = self.unpaired_read_duplicates + 2 * self.read_pair_duplicates
            self.percent_duplication = duplicates / examined
        else:
            self.percent_duplication = None

        # Optical duplicates say nothing about library complexity
        self.estimated_library_size = estimate_library_size(
            self.read_pairs_examined - self.read_pair_optical_duplicates,
            self.read_pairs_examined - self.read_pair_duplicates,
        )
        return self

    def merge(
        self, other: "DuplicationMetrics", library: Optional[str] = None
    ) -> "DuplicationMetrics":
        """Return a new object with counters summed and derived fields recomputed."""
        merged = DuplicationMetrics(library=library if library is not None else self.library)
        for name in COUNTER_FIELDS:
            setattr(merged, name, getattr(self, name) + getattr(other, name))
        return merged.calculate_derived_fields()

    @classmethod
    def combine(
        cls, metrics: Iterable["DuplicationMetrics"], library: Optional[str] = None
    ) -> "DuplicationMetrics":
        total = cls(library=library)
        for item in metrics:
            total = total.merge(item, library=library)
        return total.calculate_derived_fields()

    def counters(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in COUNTER_FIELDS}

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def column_names(cls) -> list[str]:
        return [f.name.upper() for f in fields(cls)]


def metrics_to_dataframe(metrics: Iterable[DuplicationMetrics]) -> pd.DataFrame:
    """Tabulate metrics with upper-case column names, one row per object."""
    rows = [{key.upper(): value for key, value in m.to_dict().items()} for m in metrics]
    return pd.DataFrame(rows, columns=DuplicationMetrics.column_names())
