"""Installation validation command."""

from __future__ import annotations

import sys

import click

from dupseeker import __version__
from dupseeker.cli.exit_codes import EXIT_ERROR


@click.command()
@click.option("--full", is_flag=True, help="Also run the engine on a tiny in-memory input")
def validate(full: bool) -> None:
    """Validate DupSeeker installation and dependencies."""
    from dupseeker.utils.validators import validate_installation

    click.echo("Validating DupSeeker installation...")
    issues = validate_installation(full_check=full)

    if not issues:
        click.echo("✓ All checks passed!")
        click.echo(f"  DupSeeker version: {__version__}")
    else:
        click.echo("✗ Issues found:")
        for issue in issues:
            click.echo(f"  - {issue}")
        sys.exit(EXIT_ERROR)
