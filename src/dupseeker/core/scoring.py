"""Scoring strategies used to rank members of a duplicate set.

The member with the highest score is kept as the representative. Strategies
are plain callables taking a sequence of records. Each read is scored once,
when it is keyed, and a pair scores the sum of its two reads, so callers can
plug in their own strategy without touching grouping or optical
classification.
"""

from __future__ import annotations

import hashlib
from typing import Callable, Dict, Sequence

import numpy as np

from dupseeker.constants import MAX_READ_SCORE, MIN_BASE_QUALITY_FOR_SCORE
from dupseeker.core.records import AlignmentRecord
from dupseeker.exceptions import ConfigurationError

Scorer = Callable[[Sequence[AlignmentRecord]], float]


def sum_of_base_qualities(
    records: Sequence[AlignmentRecord],
    min_base_quality: int = MIN_BASE_QUALITY_FOR_SCORE,
) -> float:
    """Sum qualities >= ``min_base_quality``, capped per read, across mates."""
    total = 0
    for record in records:
        quals = np.asarray(record.base_qualities, dtype=np.int64)
        read_score = int(quals[quals >= min_base_quality].sum()) if quals.size else 0
        total += min(read_score, MAX_READ_SCORE)
    return float(total)


def total_mapped_reference_length(records: Sequence[AlignmentRecord]) -> float:
    return float(sum(record.mapped_reference_length for record in records))


def random_score(records: Sequence[AlignmentRecord]) -> float:
    """Pseudo-random but reproducible score derived from the read name."""
    digest = hashlib.md5(records[0].name.encode("utf-8")).hexdigest()
    return float(int(digest[:8], 16))


def make_scorer(strategy: str, min_base_quality: int = MIN_BASE_QUALITY_FOR_SCORE) -> Scorer:
    """Return the scorer registered under ``strategy``."""
    scorers: Dict[str, Scorer] = {
        "SUM_OF_BASE_QUALITIES": lambda recs: sum_of_base_qualities(recs, min_base_quality),
        "TOTAL_MAPPED_REFERENCE_LENGTH": total_mapped_reference_length,
        "RANDOM": random_score,
    }
    try:
        return scorers[strategy.upper()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown scoring strategy '{strategy}'. Choose from: {', '.join(scorers)}"
        ) from None
