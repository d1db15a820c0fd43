"""Duplicate keys and mate resolution.

Every primary mapped read becomes part of exactly one ``ReadEnds`` unit: a
fragment (one record) or a pair (both mates). Units with equal keys are
candidate duplicates of one another.

Records are consumed once. Each keyable read is reduced to a ``KeyedRead``
holding its key inputs and its score; base qualities and the rest of the
record are dropped as soon as the read is converted.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple, Union

from dupseeker.constants import (
    FLAG_MATE_UNMAPPED,
    FLAG_PAIRED,
    FLAG_READ1,
    FLAG_READ2,
    FLAG_REVERSE,
)
from dupseeker.core.records import AlignmentRecord
from dupseeker.core.scoring import Scorer, make_scorer
from dupseeker.utils.logging import LogTemplates, get_logger


class FragmentKey(NamedTuple):
    library: str
    reference_index: int
    five_prime: int
    reverse: bool


class PairKey(NamedTuple):
    library: str
    reference_index1: int
    five_prime1: int
    reverse1: bool
    reference_index2: int
    five_prime2: int
    reverse2: bool


RecordKey = Union[FragmentKey, PairKey]


class KeyedRead(NamedTuple):
    """What the marker keeps of one primary mapped read."""

    ordinal: int
    name: str
    flag: int
    reference_index: int
    five_prime_position: int
    mate_reference_index: int
    library: str
    read_group: Optional[str]
    score: float

    @classmethod
    def from_record(cls, ordinal: int, record: AlignmentRecord, score: float) -> "KeyedRead":
        return cls(
            ordinal=ordinal,
            name=record.name,
            flag=record.flag,
            reference_index=record.reference_index,
            five_prime_position=record.five_prime_position,
            mate_reference_index=record.mate_reference_index,
            library=record.library,
            read_group=record.read_group,
            score=score,
        )

    @property
    def is_paired(self) -> bool:
        return bool(self.flag & FLAG_PAIRED)

    @property
    def mate_is_unmapped(self) -> bool:
        return bool(self.flag & FLAG_MATE_UNMAPPED)

    @property
    def is_reverse(self) -> bool:
        return bool(self.flag & FLAG_REVERSE)

    @property
    def is_read1(self) -> bool:
        return bool(self.flag & FLAG_READ1)

    @property
    def is_read2(self) -> bool:
        return bool(self.flag & FLAG_READ2)


Keyable = Union[AlignmentRecord, KeyedRead]


def _end_of(read: Keyable) -> Tuple[int, int, bool]:
    return (read.reference_index, read.five_prime_position, read.is_reverse)


def fragment_key(read: Keyable) -> FragmentKey:
    """Key a single read on its own unclipped 5' end."""
    ref, pos, reverse = _end_of(read)
    return FragmentKey(read.library, ref, pos, reverse)


def pair_key(first: Keyable, second: Keyable) -> PairKey:
    """Key a pair with its two ends in (reference, position, strand) order.

    Sorting the ends makes the key independent of which mate is read 1, so a
    pair and its mate-swapped copy collide.
    """
    end_a, end_b = sorted((_end_of(first), _end_of(second)))
    return PairKey(first.library, *end_a, *end_b)


@dataclass
class ReadEnds:
    """A keyed unit: one fragment read or the two reads of a pair."""

    key: RecordKey
    ordinals: Tuple[int, ...]
    name: str
    library: str
    read_group: Optional[str]
    score: float = 0.0

    @property
    def is_pair(self) -> bool:
        return isinstance(self.key, PairKey)

    @property
    def first_ordinal(self) -> int:
        return self.ordinals[0]


@dataclass
class KeyingStats:
    """Per-library tallies collected while keying."""

    records: int = 0
    unmapped_reads: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    secondary_or_supplementary: Dict[str, int] = field(default_factory=lambda: defaultdict(int))
    orphaned_mates: int = 0

    @property
    def total_unmapped(self) -> int:
        return sum(self.unmapped_reads.values())

    @property
    def total_secondary_or_supplementary(self) -> int:
        return sum(self.secondary_or_supplementary.values())


class RecordKeyBuilder:
    """Resolve mates and derive one ``ReadEnds`` per keyable read or pair."""

    def __init__(
        self, scorer: Optional[Scorer] = None, logger: Optional[logging.Logger] = None
    ) -> None:
        self.scorer = scorer or make_scorer("SUM_OF_BASE_QUALITIES")
        self.logger = logger or get_logger(self.__class__.__name__)

    @staticmethod
    def wants_mate(read: Keyable) -> bool:
        return read.is_paired and not read.mate_is_unmapped

    def build(self, records: Iterable[AlignmentRecord]) -> Tuple[List[ReadEnds], KeyingStats]:
        """Key every primary mapped record in ``records``.

        ``records`` is iterated exactly once. Units are returned ordered by
        the input position of their first record; unkeyable records only
        contribute to the stats.
        """
        stats = KeyingStats()
        awaiting_mate: Dict[str, List[int]] = defaultdict(list)
        keyed: List[KeyedRead] = []

        for ordinal, record in enumerate(records):
            stats.records += 1
            if record.is_unmapped:
                stats.unmapped_reads[record.library] += 1
            elif record.is_secondary or record.is_supplementary:
                stats.secondary_or_supplementary[record.library] += 1
            else:
                read = KeyedRead.from_record(ordinal, record, self.scorer((record,)))
                if self.wants_mate(read):
                    awaiting_mate[read.name].append(len(keyed))
                keyed.append(read)

        units: List[ReadEnds] = []
        consumed: set[int] = set()
        for index, read in enumerate(keyed):
            if index in consumed:
                continue
            wants_mate = self.wants_mate(read)
            mate_index = self._find_mate(index, keyed, awaiting_mate) if wants_mate else None

            if mate_index is None:
                if wants_mate:
                    awaiting_mate[read.name].remove(index)
                    stats.orphaned_mates += 1
                    self.logger.debug(LogTemplates.ORPHANED_MATE.format(name=read.name))
                units.append(self._fragment_unit(read))
                continue

            consumed.add(mate_index)
            units.append(self._pair_unit(read, keyed[mate_index]))

        return units, stats

    @staticmethod
    def _find_mate(
        index: int,
        keyed: List[KeyedRead],
        awaiting_mate: Dict[str, List[int]],
    ) -> Optional[int]:
        read = keyed[index]
        for candidate in awaiting_mate.get(read.name, ()):
            if candidate == index:
                continue
            mate = keyed[candidate]
            # Two read1 (or two read2) records of one name are not mates
            if (mate.is_read1, mate.is_read2) == (read.is_read1, read.is_read2) and (
                read.is_read1 or read.is_read2
            ):
                continue
            if (mate.reference_index, read.reference_index) != (
                read.mate_reference_index,
                mate.mate_reference_index,
            ):
                continue
            awaiting_mate[read.name] = [
                i for i in awaiting_mate[read.name] if i not in (index, candidate)
            ]
            return candidate
        return None

    @staticmethod
    def _fragment_unit(read: KeyedRead) -> ReadEnds:
        return ReadEnds(
            key=fragment_key(read),
            ordinals=(read.ordinal,),
            name=read.name,
            library=read.library,
            read_group=read.read_group,
            score=read.score,
        )

    @staticmethod
    def _pair_unit(read: KeyedRead, mate: KeyedRead) -> ReadEnds:
        return ReadEnds(
            key=pair_key(read, mate),
            ordinals=(read.ordinal, mate.ordinal),
            name=read.name,
            library=read.library,
            read_group=read.read_group,
            score=read.score + mate.score,
        )


def iter_pair_end_keys(units: Iterable[ReadEnds]) -> Iterable[FragmentKey]:
    """Fragment-shaped keys for both ends of every pair unit."""
    for unit in units:
        if not unit.is_pair:
            continue
        key = unit.key
        yield FragmentKey(key.library, key.reference_index1, key.five_prime1, key.reverse1)
        yield FragmentKey(key.library, key.reference_index2, key.five_prime2, key.reverse2)
