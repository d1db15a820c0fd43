"""Command line interface for DupSeeker."""

from dupseeker.cli.main import cli, main

__all__ = ["cli", "main"]
