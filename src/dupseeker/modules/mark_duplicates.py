"""
Mark Duplicates - file-level duplicate marking runner

Reads a SAM/BAM/CRAM file, runs the duplicate marker over every record and
writes the flagged alignments plus the metrics/histogram table.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from dupseeker.config import Config
from dupseeker.core.engine import DuplicateMarker
from dupseeker.modules.alignment_io import read_alignments, write_alignments
from dupseeker.modules.base import ModuleBase, ModuleResult
from dupseeker.modules.metrics_writer import write_metrics
from dupseeker.utils.logging import LogTemplates
from dupseeker.utils.progress import iter_progress


class MarkDuplicatesModule(ModuleBase):
    """Mark duplicates from ``input_file`` into ``output_file``."""

    def __init__(self, config: Optional[Config] = None, logger: Optional[logging.Logger] = None):
        super().__init__(name="mark_duplicates", logger=logger)
        self.config = config or Config()

    def validate_inputs(self, **kwargs: Any) -> bool:
        input_path = self.validate_alignment_input(kwargs["input_file"]).resolve()
        if input_path == Path(kwargs["output_file"]).resolve():
            raise ValueError("Output file must differ from the input file")
        self.config.validate_parameters()
        return True

    def execute(self, **kwargs: Any) -> ModuleResult:
        input_file = Path(kwargs["input_file"])
        output_file = self.validate_output_path(kwargs["output_file"])
        metrics_file = self.validate_output_path(kwargs["metrics_file"])
        dup_cfg = self.config.duplicates

        self.logger.info(LogTemplates.RUN_START.format(source=input_file))
        marker = DuplicateMarker(config=dup_cfg, threads=self.config.threads, logger=self.logger)
        records = iter_progress(
            read_alignments(input_file, logger=self.logger),
            desc="reading",
            enabled=self.config.runtime.enable_progress,
        )
        outcome = marker.run(records)

        written = write_alignments(
            input_file,
            output_file,
            outcome.duplicate_ordinals,
            outcome.stats.records,
            remove_duplicates=dup_cfg.remove_duplicates,
            logger=self.logger,
        )
        write_metrics(metrics_file, outcome.metrics, outcome.histograms, logger=self.logger)

        result = ModuleResult(success=True, module_name=self.name)
        result.add_output("alignments", output_file)
        result.add_output("metrics", metrics_file)
        result.add_metric("records_in", outcome.stats.records)
        result.add_metric("records_out", written)
        result.add_metric("duplication", outcome.metrics.to_dict())
        if outcome.stats.orphaned_mates:
            result.add_warning(
                f"{outcome.stats.orphaned_mates} paired reads had no mapped mate "
                "and were treated as unpaired"
            )
        if outcome.stats.malformed_names:
            result.add_warning(
                f"{outcome.stats.malformed_names} read names had unparseable tile/x/y fields"
            )
        return result
