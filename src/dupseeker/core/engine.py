"""Duplicate marking engine.

One pass over a run's records:

1. key every primary mapped read or pair (``RecordKeyBuilder``), keeping
   only the key inputs and score of each read,
2. group units with equal keys (``PairGrouper``) and split the sets into
   per-reference windows,
3. per window, select a representative (``DuplicateSelector``), classify
   optical duplicates (``OpticalDuplicateFinder``) and accumulate set-size
   histograms,
4. merge the window outcomes into ``DuplicationMetrics``.

Windows share no mutable state, so step 3 may run on a thread pool. The
outcome of every window is an immutable summary merged in window order.
The result records decisions by input position; records are never retained,
and callers apply the decisions on a second pass over the same input.
"""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence

from dupseeker.config import DuplicateConfig
from dupseeker.core.grouping import DuplicateSet, PairGrouper
from dupseeker.core.histogram import SetSizeHistogram, SetSizeHistogramAccumulator
from dupseeker.core.keys import KeyingStats, ReadEnds, RecordKeyBuilder, iter_pair_end_keys
from dupseeker.core.metrics import DuplicationMetrics
from dupseeker.core.optical import (
    OpticalDuplicateFinder,
    PhysicalLocationExtractor,
    make_location_extractor,
)
from dupseeker.core.records import AlignmentRecord, MarkedRecord
from dupseeker.core.scoring import Scorer, make_scorer
from dupseeker.core.selection import DuplicateSelector
from dupseeker.exceptions import PipelineError
from dupseeker.utils.logging import LogTemplates, get_logger


@dataclass
class LibraryTally:
    unpaired_read_duplicates: int = 0
    read_pair_duplicates: int = 0
    read_pair_optical_duplicates: int = 0


@dataclass
class WindowOutcome:
    """What one window contributes to the run."""

    window: int
    duplicate_ordinals: FrozenSet[int]
    optical_ordinals: FrozenSet[int]
    tallies: Dict[str, LibraryTally]
    histograms: SetSizeHistogramAccumulator
    duplicate_sets: int = 0
    malformed_names: int = 0
    oversized_optical_sets: int = 0


@dataclass
class RunStats:
    """Data-quality and bookkeeping counters for a run."""

    records: int = 0
    windows: int = 0
    duplicate_sets: int = 0
    orphaned_mates: int = 0
    malformed_names: int = 0
    oversized_optical_sets: int = 0
    elapsed_seconds: float = 0.0


@dataclass
class MarkDuplicatesResult:
    """Everything a marking pass produces.

    Decisions are keyed by the 0-based input position (ordinal) of each
    record.
    """

    duplicate_ordinals: FrozenSet[int]
    optical_ordinals: FrozenSet[int]
    metrics: DuplicationMetrics
    library_metrics: Dict[str, DuplicationMetrics]
    histograms: Dict[str, SetSizeHistogram]
    stats: RunStats = field(default_factory=RunStats)

    def is_duplicate(self, ordinal: int) -> bool:
        return ordinal in self.duplicate_ordinals

    def marked(self, records: Iterable[AlignmentRecord]) -> Iterator[MarkedRecord]:
        """Apply the decisions to ``records``, which must repeat the marked input.

        Raises:
            PipelineError: ``records`` holds a different number of records.
        """
        count = 0
        for ordinal, record in enumerate(records):
            duplicate = ordinal in self.duplicate_ordinals
            count += 1
            yield MarkedRecord(
                record=record.with_duplicate_flag(duplicate),
                duplicate=duplicate,
                optical_duplicate=ordinal in self.optical_ordinals,
            )
        if count != self.stats.records:
            raise PipelineError(
                f"Expected {self.stats.records} records to apply decisions to, got {count}"
            )

    def output_records(
        self, records: Iterable[AlignmentRecord], remove_duplicates: bool = False
    ) -> Iterator[AlignmentRecord]:
        """Flagged records in input order, optionally without duplicates."""
        for marked in self.marked(records):
            if remove_duplicates and marked.duplicate:
                continue
            yield marked.record

    @property
    def duplicate_count(self) -> int:
        return len(self.duplicate_ordinals)


class DuplicateMarker:
    """Mark PCR and optical duplicates in a collection of alignment records."""

    def __init__(
        self,
        config: Optional[DuplicateConfig] = None,
        threads: int = 1,
        scorer: Optional[Scorer] = None,
        extractor: Optional[PhysicalLocationExtractor] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config or DuplicateConfig()
        self.config.validate()
        self.threads = max(1, int(threads))
        self.logger = logger or get_logger(self.__class__.__name__)

        self.scorer = scorer or make_scorer(
            self.config.scoring_strategy, self.config.min_base_quality
        )
        self.key_builder = RecordKeyBuilder(scorer=self.scorer, logger=self.logger)
        self.grouper = PairGrouper()
        self.optical_finder: Optional[OpticalDuplicateFinder] = None
        if self.config.detect_optical:
            self.optical_finder = OpticalDuplicateFinder(
                extractor=extractor or make_location_extractor(self.config.read_name_regex),
                pixel_distance=self.config.optical_pixel_distance,
                max_set_size=self.config.max_optical_set_size,
                logger=self.logger,
            )

    # ------------------------------------------------------------------ #
    def run(self, records: Iterable[AlignmentRecord]) -> MarkDuplicatesResult:
        """Mark duplicates in ``records`` and compute the run's metrics.

        ``records`` is consumed once and may be a lazy stream.
        """
        start = time.time()
        units, keying = self.key_builder.build(records)
        stats = RunStats(records=keying.records, orphaned_mates=keying.orphaned_mates)
        pair_units = sum(1 for unit in units if unit.is_pair)
        self.logger.info(
            LogTemplates.KEYING_STATS.format(
                pairs=pair_units,
                fragments=len(units) - pair_units,
                unmapped=keying.total_unmapped,
                secondary=keying.total_secondary_or_supplementary,
            )
        )

        sets = self.grouper.group(units)
        windows = self.grouper.windows(sets)
        stats.windows = len(windows)
        self.logger.info(LogTemplates.GROUPING_STATS.format(sets=len(sets), windows=len(windows)))

        pair_end_keys: FrozenSet = frozenset()
        if self.config.fragments_yield_to_pairs:
            pair_end_keys = frozenset(iter_pair_end_keys(units))
        selector = DuplicateSelector(pair_end_keys=pair_end_keys)

        outcomes = self._process_windows(windows, selector)

        duplicates: set[int] = set()
        optical: set[int] = set()
        histograms = SetSizeHistogramAccumulator()
        for outcome in outcomes:
            duplicates |= outcome.duplicate_ordinals
            optical |= outcome.optical_ordinals
            histograms = histograms.merge(outcome.histograms)
            stats.duplicate_sets += outcome.duplicate_sets
            stats.malformed_names += outcome.malformed_names
            stats.oversized_optical_sets += outcome.oversized_optical_sets

        library_metrics = self._library_metrics(units, keying, outcomes)
        libraries = list(library_metrics)
        metrics = DuplicationMetrics.combine(
            library_metrics.values(), library=libraries[0] if len(libraries) == 1 else None
        )

        stats.elapsed_seconds = time.time() - start
        self.logger.info(
            LogTemplates.RUN_SUCCESS.format(
                duplicates=metrics.unpaired_read_duplicates + metrics.read_pair_duplicates,
                examined=metrics.unpaired_reads_examined + metrics.read_pairs_examined,
                duration=stats.elapsed_seconds,
            )
        )
        return MarkDuplicatesResult(
            duplicate_ordinals=frozenset(duplicates),
            optical_ordinals=frozenset(optical),
            metrics=metrics,
            library_metrics=library_metrics,
            histograms=dict(histograms.histograms),
            stats=stats,
        )

    # ------------------------------------------------------------------ #
    def _process_windows(
        self, windows: Dict[int, List[DuplicateSet]], selector: DuplicateSelector
    ) -> List[WindowOutcome]:
        if self.threads == 1 or len(windows) < 2:
            return [self.process_window(w, sets, selector) for w, sets in windows.items()]

        self.logger.info(f"Processing {len(windows)} windows with {self.threads} threads")
        outcomes: Dict[int, WindowOutcome] = {}
        with ThreadPoolExecutor(max_workers=self.threads) as executor:
            futures = {
                executor.submit(self.process_window, window, sets, selector): window
                for window, sets in windows.items()
            }
            for future in as_completed(futures):
                window = futures[future]
                try:
                    outcomes[window] = future.result()
                except Exception as e:
                    raise PipelineError(f"Failed to process window {window}: {e}") from e

        # Merge order is fixed so results do not depend on scheduling
        return [outcomes[window] for window in windows]

    def process_window(
        self, window: int, sets: Sequence[DuplicateSet], selector: DuplicateSelector
    ) -> WindowOutcome:
        """Select representatives and classify optical duplicates in one window."""
        duplicate_ordinals: List[int] = []
        optical_ordinals: List[int] = []
        tallies: Dict[str, LibraryTally] = defaultdict(LibraryTally)
        histograms = SetSizeHistogramAccumulator()
        malformed = 0
        oversized = 0
        duplicate_sets = 0

        for dup_set in sets:
            selection = selector.select(dup_set)
            if not selection.duplicates:
                continue
            duplicate_sets += 1

            optical_count = 0
            if dup_set.is_pair_set and self.optical_finder is not None:
                classification = self.optical_finder.classify(selection.ranked)
                malformed += classification.malformed_names
                oversized += int(classification.skipped_oversized)
                optical_count = classification.count
                for unit in classification.optical:
                    optical_ordinals.extend(unit.ordinals)
                    tallies[unit.library].read_pair_optical_duplicates += 1

            for unit in selection.duplicates:
                duplicate_ordinals.extend(unit.ordinals)
                if unit.is_pair:
                    tallies[unit.library].read_pair_duplicates += 1
                else:
                    tallies[unit.library].unpaired_read_duplicates += 1

            histograms.record(dup_set.size, optical_count)

        return WindowOutcome(
            window=window,
            duplicate_ordinals=frozenset(duplicate_ordinals),
            optical_ordinals=frozenset(optical_ordinals),
            tallies=dict(tallies),
            histograms=histograms,
            duplicate_sets=duplicate_sets,
            malformed_names=malformed,
            oversized_optical_sets=oversized,
        )

    @staticmethod
    def _library_metrics(
        units: Sequence[ReadEnds],
        keying: KeyingStats,
        outcomes: Sequence[WindowOutcome],
    ) -> Dict[str, DuplicationMetrics]:
        by_library: Dict[str, DuplicationMetrics] = {}

        def metrics_for(library: str) -> DuplicationMetrics:
            if library not in by_library:
                by_library[library] = DuplicationMetrics(library=library)
            return by_library[library]

        for unit in units:
            if unit.is_pair:
                metrics_for(unit.library).read_pairs_examined += 1
            else:
                metrics_for(unit.library).unpaired_reads_examined += 1
        for library, count in keying.unmapped_reads.items():
            metrics_for(library).unmapped_reads += count
        for library, count in keying.secondary_or_supplementary.items():
            metrics_for(library).secondary_or_supplementary_rds += count
        for outcome in outcomes:
            for library, tally in outcome.tallies.items():
                m = metrics_for(library)
                m.unpaired_read_duplicates += tally.unpaired_read_duplicates
                m.read_pair_duplicates += tally.read_pair_duplicates
                m.read_pair_optical_duplicates += tally.read_pair_optical_duplicates

        return {
            library: m.calculate_derived_fields() for library, m in sorted(by_library.items())
        }


def mark_duplicates(
    records: Iterable[AlignmentRecord],
    config: Optional[DuplicateConfig] = None,
    threads: int = 1,
) -> MarkDuplicatesResult:
    """Convenience wrapper: ``DuplicateMarker(config, threads).run(records)``."""
    return DuplicateMarker(config=config, threads=threads).run(records)
