"""Shared Click options for DupSeeker CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, TypeVar

import click

from dupseeker.constants import SCORING_STRATEGIES

F = TypeVar("F", bound=Callable[..., None])


def input_option(func: F) -> F:
    """Input alignment file option."""
    return click.option(
        "-i",
        "--input",
        "input_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        required=False,
        help="Input SAM/BAM/CRAM file",
    )(func)


def output_option(func: F) -> F:
    """Output alignment file option."""
    return click.option(
        "-o",
        "--output",
        "output_file",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Output BAM (or .sam) with duplicates flagged",
    )(func)


def metrics_option(func: F) -> F:
    """Metrics output option."""
    return click.option(
        "-m",
        "--metrics",
        "metrics_file",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Duplication metrics and set-size histogram output (TSV)",
    )(func)


def config_option(func: F) -> F:
    """Configuration file option."""
    return click.option(
        "-c",
        "--config",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Configuration file (YAML)",
    )(func)


def threads_option(func: F) -> F:
    """Thread count option."""
    return click.option(
        "-t",
        "--threads",
        type=click.IntRange(min=1),
        default=None,
        help="Worker threads for per-window processing [default: 1]",
    )(func)


def duplicate_options(func: F) -> F:
    """Duplicate-marking parameter overrides."""
    options = [
        click.option(
            "--remove-duplicates",
            is_flag=True,
            default=False,
            help="Drop duplicates from the output instead of flagging them",
        ),
        click.option(
            "--optical-pixel-distance",
            type=click.IntRange(min=0),
            default=None,
            help="Max pixel distance between optical duplicates [default: 100]",
        ),
        click.option(
            "--read-name-regex",
            default=None,
            help="Regex with 3 groups (tile, x, y) for parsing read names",
        ),
        click.option(
            "--no-optical",
            is_flag=True,
            default=False,
            help="Disable optical duplicate detection",
        ),
        click.option(
            "--scoring-strategy",
            type=click.Choice(SCORING_STRATEGIES, case_sensitive=False),
            default=None,
            help="How the representative of a duplicate set is chosen",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func
