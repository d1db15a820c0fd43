"""Click application entrypoint for DupSeeker."""

from __future__ import annotations

import logging
import signal
import sys
from pathlib import Path
from types import FrameType
from typing import Optional

import click

from dupseeker import __version__
from dupseeker.cli.exit_codes import (
    EXIT_SUCCESS,
    EXIT_ERROR,
    EXIT_USAGE,
    EXIT_SIGINT,
    signal_exit_code,
)
from dupseeker.exceptions import ConfigurationError, DupSeekerError
from dupseeker.utils.logging import get_logger, setup_logging

from .commands.config import init_config
from .commands.validate import validate
from .common_options import (
    config_option,
    duplicate_options,
    input_option,
    metrics_option,
    output_option,
    threads_option,
)
from .runner import RunOptions, execute_run


class RunInterrupted(KeyboardInterrupt):
    """Raised from a signal handler; remembers which signal stopped the run."""

    def __init__(self, signum: int):
        super().__init__(f"{signal.Signals(signum).name} received")
        self.signum = signum


def _interrupt_exit_code(exc: KeyboardInterrupt) -> int:
    if isinstance(exc, RunInterrupted):
        return signal_exit_code(exc.signum)
    return EXIT_SIGINT


def _handle_signal(signum: int, frame: Optional[FrameType]) -> None:
    """Handle interrupt signals for graceful shutdown."""
    click.echo(
        f"\n{signal.Signals(signum).name} received, stopping without writing metrics...",
        err=True,
    )
    raise RunInterrupted(signum)


def _print_version(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if value and not ctx.resilient_parsing:
        click.echo(f"DupSeeker {__version__}")
        ctx.exit()


@click.group(
    context_settings=dict(help_option_names=["-h", "--help"]),
    invoke_without_command=True,
)
@click.option(
    "-V",
    "--version",
    is_flag=True,
    is_eager=True,
    expose_value=False,
    callback=_print_version,
    help="Show the version and exit.",
)
@input_option
@output_option
@metrics_option
@config_option
@threads_option
@duplicate_options
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase log verbosity (-v for INFO, -vv for DEBUG)",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path for log file output",
)
@click.pass_context
def cli(
    ctx: click.Context,
    input_file: Optional[Path],
    output_file: Optional[Path],
    metrics_file: Optional[Path],
    config: Optional[Path],
    threads: Optional[int],
    remove_duplicates: bool,
    optical_pixel_distance: Optional[int],
    read_name_regex: Optional[str],
    no_optical: bool,
    scoring_strategy: Optional[str],
    verbose: int,
    log_file: Optional[Path],
) -> None:
    """DupSeeker: mark PCR and optical duplicates in aligned reads.

    Run directly as: dupseeker -i <in.bam> -o <out.bam> -m <metrics.txt> [options]
    """
    if ctx.invoked_subcommand:
        return

    if verbose >= 2:
        log_level = logging.DEBUG
    elif verbose == 1:
        log_level = logging.INFO
    else:
        log_level = logging.WARNING

    setup_logging(level=log_level, log_file=log_file)
    logger = get_logger("cli")

    opts = RunOptions(
        input_file=input_file,
        output_file=output_file,
        metrics_file=metrics_file,
        config_path=config,
        threads=threads,
        remove_duplicates=remove_duplicates,
        optical_pixel_distance=optical_pixel_distance,
        read_name_regex=read_name_regex,
        no_optical=no_optical,
        scoring_strategy=scoring_strategy,
        verbose=verbose,
        log_file=log_file,
    )

    try:
        execute_run(opts, logger)
    except KeyboardInterrupt as exc:
        logger.info("Run interrupted; no metrics written")
        sys.exit(_interrupt_exit_code(exc))
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        click.echo(ctx.get_help(), err=True)
        sys.exit(EXIT_USAGE)
    except DupSeekerError as exc:
        logger.error(f"Duplicate marking error: {exc}")
        sys.exit(EXIT_ERROR)
    except Exception as exc:
        logger.exception(f"Unexpected error: {exc}")
        sys.exit(EXIT_ERROR)


cli.add_command(init_config)
cli.add_command(validate)


def main(argv: list[str] | None = None) -> int:
    """Main entry point with signal handling."""
    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        cli(argv)
        return EXIT_SUCCESS
    except KeyboardInterrupt as exc:
        return _interrupt_exit_code(exc)
    except SystemExit as exc:
        # Preserve explicit exit codes from cli()
        if exc.code is None:
            return EXIT_SUCCESS
        return exc.code if isinstance(exc.code, int) else EXIT_ERROR
    except Exception as exc:
        click.echo(f"Error: {exc}", err=True)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
