"""CLI entry point for prcheck.

Commands:
  analyze  — check a pull request against its linked issues and comment the result
"""

from __future__ import annotations

import importlib.metadata
import logging

import click

from prcheck_cli.commands.analyze import analyze_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("prcheck"),
    prog_name="prcheck",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """Check whether a pull request implements the issues it links."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


main.add_command(analyze_cmd)
