"""Representative selection within a duplicate set."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, List, Optional, Tuple

from dupseeker.core.grouping import DuplicateSet
from dupseeker.core.keys import FragmentKey, ReadEnds


def rank_key(unit: ReadEnds) -> Tuple[float, str, int]:
    """Sort key putting the best representative first.

    Highest score first, then the lexically smallest read name, then input
    order.
    """
    return (-unit.score, unit.name, unit.first_ordinal)


@dataclass
class Selection:
    """Outcome of ranking one set.

    ``ranked`` lists every member best-first. ``representative`` is ``None``
    only when the whole set was marked (fragments shadowed by pairs).
    """

    ranked: List[ReadEnds]
    representative: Optional[ReadEnds]
    duplicates: List[ReadEnds] = field(default_factory=list)


class DuplicateSelector:
    """Keep the best-scoring member of a set and mark the others."""

    def __init__(self, pair_end_keys: AbstractSet[FragmentKey] = frozenset()) -> None:
        self.pair_end_keys = pair_end_keys

    def select(self, dup_set: DuplicateSet) -> Selection:
        ranked = sorted(dup_set.members, key=rank_key)

        # Fragments sharing a 5' end with any pair are all marked
        if not dup_set.is_pair_set and dup_set.key in self.pair_end_keys:
            return Selection(ranked=ranked, representative=None, duplicates=list(ranked))

        if dup_set.size == 1:
            return Selection(ranked=ranked, representative=ranked[0])
        return Selection(ranked=ranked, representative=ranked[0], duplicates=ranked[1:])
