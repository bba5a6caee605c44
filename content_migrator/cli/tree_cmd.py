"""CLI command handler for printing the dependency tree of an export."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from content_migrator.cli.common import cli, handle_exception
from content_migrator.core.tree_printer import build_tree_graph, render_graph
from content_migrator.utils.logging import setup_logger


@cli.command()
@click.argument("export_dir", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose console logging (shows DEBUG level messages)",
)
def tree(export_dir: str, verbose: bool) -> None:
    """Print the dependency levels of an export without contacting a hub.

    Items in a cycle are listed after the levels, with the repeated item
    marked ``***`` and bracketed to the line it refers back to.
    """
    setup_logger(verbose)

    try:
        graph = build_tree_graph(Path(export_dir))
    except Exception as e:
        handle_exception(e)
        sys.exit(1)

    for line in render_graph(graph):
        click.echo(line)
