"""
Command-line interface for the content hub migration tool.

Importing the command modules registers their subcommands on the shared
``cli`` group.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from content_migrator.cli import import_cmd, revert_cmd, tree_cmd  # noqa: F401
from content_migrator.cli.common import cli, common_options, handle_exception
from content_migrator.core.config import create_default_config
from content_migrator.utils.logging import setup_logger

__all__ = ["cli", "common_options", "handle_exception", "main"]


@cli.command("init-config")
@click.option(
    "--output",
    "-o",
    default="config.yaml",
    show_default=True,
    help="Where to write the configuration file",
)
def init_config(output: str) -> None:
    """Write a configuration file with the default settings."""
    setup_logger()
    if not create_default_config(Path(output)):
        sys.exit(1)


def main() -> None:
    """Entry point for the ``content-migrator`` console script."""
    cli()


if __name__ == "__main__":
    main()
