"""Run helpers for the CLI: merge config sources and drive the marking module."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dupseeker.config import Config, load_config
from dupseeker.exceptions import PipelineError
from dupseeker.modules.mark_duplicates import MarkDuplicatesModule
from dupseeker.utils.logging import level_from_name, setup_logging


@dataclass
class RunOptions:
    """Container for CLI-supplied run options; ``None`` defers to config."""

    input_file: Optional[Path]
    output_file: Optional[Path]
    metrics_file: Optional[Path]
    config_path: Optional[Path] = None
    threads: Optional[int] = None
    remove_duplicates: bool = False
    optical_pixel_distance: Optional[int] = None
    read_name_regex: Optional[str] = None
    no_optical: bool = False
    scoring_strategy: Optional[str] = None
    verbose: int = 0
    log_file: Optional[Path] = None


def build_config(opts: RunOptions) -> Config:
    """Defaults -> config file -> CLI flags."""
    cfg = load_config(opts.config_path) if opts.config_path else Config()

    if opts.input_file is not None:
        cfg.input_file = opts.input_file
    if opts.output_file is not None:
        cfg.output_file = opts.output_file
    if opts.metrics_file is not None:
        cfg.metrics_file = opts.metrics_file
    if opts.threads is not None:
        cfg.threads = opts.threads
    if opts.log_file is not None:
        cfg.runtime.log_file = opts.log_file

    dup = cfg.duplicates
    if opts.remove_duplicates:
        dup.remove_duplicates = True
    if opts.optical_pixel_distance is not None:
        dup.optical_pixel_distance = opts.optical_pixel_distance
    if opts.read_name_regex is not None:
        dup.read_name_regex = opts.read_name_regex
    if opts.no_optical:
        dup.detect_optical = False
    if opts.scoring_strategy is not None:
        dup.scoring_strategy = opts.scoring_strategy.upper()
    return cfg


def execute_run(opts: RunOptions, logger: logging.Logger) -> Config:
    """Build the configuration, reconfigure logging and mark duplicates.

    Raises:
        ConfigurationError: Missing or invalid options.
        PipelineError: The marking run failed.
    """
    cfg = build_config(opts)

    # CLI verbosity wins over the config file
    if opts.verbose == 0:
        setup_logging(level=level_from_name(cfg.runtime.log_level), log_file=cfg.runtime.log_file)
    elif cfg.runtime.log_file and opts.log_file is None:
        setup_logging(level=logger.getEffectiveLevel(), log_file=cfg.runtime.log_file)

    cfg.validate()
    logger.debug(f"Configuration: {cfg.to_dict()}")

    result = MarkDuplicatesModule(config=cfg).run(
        input_file=cfg.input_file,
        output_file=cfg.output_file,
        metrics_file=cfg.metrics_file,
    )
    if not result.success:
        raise PipelineError(result.summary())
    return cfg

