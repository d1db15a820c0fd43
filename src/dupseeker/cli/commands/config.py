"""``init-config``: write the annotated configuration template."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from dupseeker.cli.exit_codes import EXIT_USAGE


@click.command(name="init-config")
@click.option(
    "--output-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("dupseeker.yaml"),
    help="Where to write the template",
)
@click.option(
    "--stdout",
    is_flag=True,
    help="Print the template instead of writing a file",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_config(output_file: Path, stdout: bool, force: bool) -> None:
    """Generate a template configuration file with every duplicate-marking option."""
    from dupseeker.resources import get_default_config

    config_text = get_default_config()
    if stdout:
        click.echo(config_text, nl=False)
        return

    if output_file.exists() and not force:
        click.echo(f"Error: {output_file} already exists (use --force to overwrite)", err=True)
        sys.exit(EXIT_USAGE)

    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(config_text, encoding="utf-8")
    click.echo(f"Configuration template saved to: {output_file}")
    click.echo(f"Run with: dupseeker -c {output_file} -i <in.bam> -o <out.bam> -m <metrics.txt>")
