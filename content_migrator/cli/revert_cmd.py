"""CLI command handler for reverting an import."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from content_migrator.cli.common import cli, common_options, handle_exception
from content_migrator.core.action_log import ActionLog
from content_migrator.core.config import load_config
from content_migrator.core.revert import revert_import
from content_migrator.services.hub_adapter import HubAdapter
from content_migrator.utils.logging import log_with_context, setup_logger
from content_migrator.utils.prompts import make_confirm

# ---------------------------------------------------------------------------
# revert subcommand
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("log_file", type=click.Path(exists=True, dir_okay=False))
@common_options
@click.option(
    "--force",
    "-f",
    is_flag=True,
    default=False,
    help="Revert items even if they were changed after the import",
)
def revert(
    log_file: str,
    hub_id: str,
    client_id: str | None,
    client_secret: str | None,
    pat_token: str | None,
    config: str,
    verbose: bool,
    debug_api: bool,
    force: bool,
) -> None:
    """Undo the import recorded in LOG_FILE.

    Created items are archived and updated items are restored to the
    version they had before the import.
    """
    setup_logger(verbose, debug_api)

    try:
        cfg = load_config(Path(config))
        log = ActionLog.load(Path(log_file))
        log_with_context(logging.INFO, f"Reverting: {log.title or log_file}")
        if not log.success:
            log_with_context(
                logging.WARNING,
                "The import did not finish successfully; reverting what it managed to write",
            )

        hub = HubAdapter(
            hub_id,
            client_id=client_id,
            client_secret=client_secret,
            pat_token=pat_token,
            retry_config=cfg.retry_config,
            timeout=cfg.request_timeout,
        )
        reverted = asyncio.run(revert_import(hub, log, make_confirm(force or cfg.force)))
    except (Exception, KeyboardInterrupt) as e:
        handle_exception(e)
        sys.exit(1)

    if not reverted:
        log_with_context(logging.INFO, "Revert cancelled.")
        sys.exit(1)
