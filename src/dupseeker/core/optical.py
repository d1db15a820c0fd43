"""Optical duplicate detection.

Duplicates whose clusters sit close together on the same tile are most
likely one cluster read twice by the optics rather than separate PCR copies.
Members of a duplicate set are linked when their (x, y) coordinates are within
the pixel distance, and every connected component of k members contributes
k - 1 optical duplicates.
"""

from __future__ import annotations

import logging
import math
import re
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

import networkx as nx

from dupseeker.constants import MAX_OPTICAL_DUPLICATE_SET_SIZE, OPTICAL_DUPLICATE_PIXEL_DISTANCE
from dupseeker.core.keys import KeyedRead, ReadEnds
from dupseeker.core.records import AlignmentRecord, PhysicalLocation
from dupseeker.exceptions import ConfigurationError, PhysicalLocationError
from dupseeker.utils.logging import LogTemplates, get_logger

_MATE_SUFFIX = re.compile(r"/[12]$")


class PhysicalLocationExtractor(ABC):
    """Turns a read into a flowcell location, or ``None`` when unavailable."""

    @abstractmethod
    def parse(self, read_name: str) -> Optional[Tuple[int, int, int]]:
        """Return (tile, x, y) parsed from ``read_name``.

        Returns ``None`` when the name does not follow the expected layout.

        Raises:
            PhysicalLocationError: The layout matches but a field is not an integer.
        """

    def locate(
        self, read: Union[AlignmentRecord, KeyedRead, ReadEnds]
    ) -> Optional[PhysicalLocation]:
        coords = self.parse(read.name)
        if coords is None:
            return None
        return PhysicalLocation(read.read_group, *coords)

    @staticmethod
    def _to_ints(read_name: str, fields: Sequence[str]) -> Tuple[int, int, int]:
        try:
            tile, x, y = (int(value) for value in fields)
        except ValueError as exc:
            raise PhysicalLocationError(str(exc), read_name=read_name) from exc
        return tile, x, y


class ReadNameLocationExtractor(PhysicalLocationExtractor):
    """Illumina-style names: tile, x and y are the last three ':' fields.

    Names with 5 fields (``machine:lane:tile:x:y``) or 7 fields
    (``machine:run:flowcell:lane:tile:x:y``) are recognised.
    """

    FIELD_COUNTS = (5, 7)

    def parse(self, read_name: str) -> Optional[Tuple[int, int, int]]:
        fields = _MATE_SUFFIX.sub("", read_name).split(":")
        if len(fields) not in self.FIELD_COUNTS:
            return None
        return self._to_ints(read_name, fields[-3:])


class RegexLocationExtractor(PhysicalLocationExtractor):
    """Names matched in full by a pattern with three groups: tile, x, y."""

    def __init__(self, pattern: str) -> None:
        try:
            self.pattern = re.compile(pattern)
        except re.error as exc:
            raise ConfigurationError(f"Invalid read name regex '{pattern}': {exc}") from exc
        if self.pattern.groups != 3:
            raise ConfigurationError(
                f"Read name regex must have exactly 3 capture groups (tile, x, y), "
                f"found {self.pattern.groups}"
            )

    def parse(self, read_name: str) -> Optional[Tuple[int, int, int]]:
        match = self.pattern.fullmatch(read_name)
        if match is None:
            return None
        return self._to_ints(read_name, match.groups())


def make_location_extractor(read_name_regex: Optional[str] = None) -> PhysicalLocationExtractor:
    if read_name_regex:
        return RegexLocationExtractor(read_name_regex)
    return ReadNameLocationExtractor()


@dataclass
class OpticalClassification:
    optical: List[ReadEnds] = field(default_factory=list)
    malformed_names: int = 0
    skipped_oversized: bool = False

    @property
    def count(self) -> int:
        return len(self.optical)


class OpticalDuplicateFinder:
    """Cluster the members of one duplicate set by tile and pixel distance."""

    def __init__(
        self,
        extractor: Optional[PhysicalLocationExtractor] = None,
        pixel_distance: int = OPTICAL_DUPLICATE_PIXEL_DISTANCE,
        max_set_size: int = MAX_OPTICAL_DUPLICATE_SET_SIZE,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.extractor = extractor or ReadNameLocationExtractor()
        self.pixel_distance = pixel_distance
        self.max_set_size = max_set_size
        self.logger = logger or get_logger(self.__class__.__name__)

    def classify(self, ranked: Sequence[ReadEnds]) -> OpticalClassification:
        """Flag optical duplicates among ``ranked`` (representative first).

        The representative takes part in clustering but is never flagged; in
        a cluster without it the best-ranked member is the one left unflagged.
        """
        result = OpticalClassification()
        if len(ranked) < 2:
            return result
        if len(ranked) > self.max_set_size:
            self.logger.warning(
                LogTemplates.OPTICAL_SET_TOO_LARGE.format(size=len(ranked), limit=self.max_set_size)
            )
            result.skipped_oversized = True
            return result

        by_tile: Dict[Tuple[Optional[str], int], List[Tuple[int, PhysicalLocation]]]
        by_tile = defaultdict(list)
        for rank, unit in enumerate(ranked):
            try:
                location = self.extractor.locate(unit)
            except PhysicalLocationError as exc:
                result.malformed_names += 1
                self.logger.debug(LogTemplates.MALFORMED_NAME.format(name=unit.name, error=exc))
                continue
            if location is not None:
                by_tile[location.tile_key].append((rank, location))

        flagged: List[int] = []
        for members in by_tile.values():
            if len(members) < 2:
                continue
            for component in nx.connected_components(self._proximity_graph(members)):
                if len(component) < 2:
                    continue
                keeper = min(component)
                flagged.extend(rank for rank in component if rank != keeper)

        result.optical = [ranked[rank] for rank in sorted(flagged)]
        return result

    def _proximity_graph(self, members: List[Tuple[int, PhysicalLocation]]) -> nx.Graph:
        """Link members whose Euclidean distance is within the pixel distance."""
        graph = nx.Graph()
        graph.add_nodes_from(rank for rank, _ in members)

        ordered = sorted(members, key=lambda item: (item[1].x, item[1].y))
        for i, (rank_i, loc_i) in enumerate(ordered):
            for rank_j, loc_j in ordered[i + 1:]:
                if loc_j.x - loc_i.x > self.pixel_distance:
                    break
                if math.hypot(loc_j.x - loc_i.x, loc_j.y - loc_i.y) <= self.pixel_distance:
                    graph.add_edge(rank_i, rank_j)
        return graph
