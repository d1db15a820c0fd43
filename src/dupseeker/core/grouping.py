"""Partition keyed units into duplicate sets and genomic windows."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from dupseeker.core.keys import FragmentKey, ReadEnds, RecordKey


@dataclass
class DuplicateSet:
    """Units sharing one key, in input order."""

    key: RecordKey
    members: List[ReadEnds] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def is_pair_set(self) -> bool:
        return not isinstance(self.key, FragmentKey)

    @property
    def window(self) -> int:
        """Reference index of the key's first end."""
        return self.key[1]


class PairGrouper:
    """Bucket units by exact key equality.

    Sets are returned in the order their first member was seen, which keeps
    downstream processing deterministic.
    """

    def group(self, units: Iterable[ReadEnds]) -> List[DuplicateSet]:
        buckets: "OrderedDict[RecordKey, DuplicateSet]" = OrderedDict()
        for unit in units:
            dup_set = buckets.get(unit.key)
            if dup_set is None:
                dup_set = buckets[unit.key] = DuplicateSet(key=unit.key)
            dup_set.members.append(unit)
        return list(buckets.values())

    @staticmethod
    def windows(sets: Iterable[DuplicateSet]) -> Dict[int, List[DuplicateSet]]:
        """Split sets by window; a set never straddles two windows."""
        by_window: Dict[int, List[DuplicateSet]] = {}
        for dup_set in sets:
            by_window.setdefault(dup_set.window, []).append(dup_set)
        return dict(sorted(by_window.items()))
