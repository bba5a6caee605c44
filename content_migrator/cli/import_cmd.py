"""CLI command handler for the import workflow."""

from __future__ import annotations

import asyncio
import logging
import sys
from dataclasses import replace
from functools import partial
from pathlib import Path

import click

from content_migrator.cli.common import cli, common_options, handle_exception
from content_migrator.core.action_log import default_action_log_path
from content_migrator.core.config import load_config
from content_migrator.core.context import MigrationContext
from content_migrator.core.mapping import default_mapping_path
from content_migrator.core.migrator import ContentMigrator
from content_migrator.services.dry_run_service import DryRunHubService
from content_migrator.services.hub_adapter import HubAdapter
from content_migrator.services.schema_validator import SchemaValidator
from content_migrator.utils.logging import log_with_context, setup_logger
from content_migrator.utils.prompts import make_confirm

# ---------------------------------------------------------------------------
# import subcommand
# ---------------------------------------------------------------------------


@cli.command("import")
@click.argument("import_dir", type=click.Path(exists=True, file_okay=False))
@common_options
@click.option("--base_repo", help="Import every item into this content repository")
@click.option(
    "--base_folder",
    help="Import every item into this folder; takes precedence over --base_repo",
)
@click.option(
    "--map_file",
    help="Mapping file from a previous import; defaults to one named after the destination",
)
@click.option(
    "--force",
    "-f",
    is_flag=True,
    default=False,
    help="Answer yes to every question, overwriting items already in the mapping",
)
@click.option(
    "--validate",
    is_flag=True,
    default=False,
    help="Check the import against the hub without writing any content",
)
@click.option(
    "--skip_incomplete",
    is_flag=True,
    default=False,
    help="Skip items with missing references instead of removing the references",
)
@click.option(
    "--publish",
    is_flag=True,
    default=False,
    help="Publish imported items that were published in the export",
)
@click.option(
    "--republish",
    is_flag=True,
    default=False,
    help="Publish those items even when the import did not change them",
)
@click.option(
    "--exclude_keys",
    is_flag=True,
    default=False,
    help="Do not import delivery keys",
)
@click.option(
    "--dry_run",
    is_flag=True,
    default=False,
    help="Report what would change without writing to the hub",
)
@click.option(
    "--log_file",
    type=click.Path(dir_okay=False),
    help="Where to write the action log used by 'revert'",
)
def import_content(
    import_dir: str,
    hub_id: str,
    client_id: str | None,
    client_secret: str | None,
    pat_token: str | None,
    config: str,
    verbose: bool,
    debug_api: bool,
    base_repo: str | None,
    base_folder: str | None,
    map_file: str | None,
    force: bool,
    validate: bool,
    skip_incomplete: bool,
    publish: bool,
    republish: bool,
    exclude_keys: bool,
    dry_run: bool,
    log_file: str | None,
) -> None:
    """Import an exported content tree into a hub.

    IMPORT_DIR holds one JSON file per content item. Without --base_repo or
    --base_folder, each subdirectory is imported into the repository with the
    same label.
    """
    log_path = Path(log_file) if log_file else default_action_log_path()
    setup_logger(verbose, debug_api, output_dir=str(log_path.parent))

    try:
        cfg = load_config(Path(config)).with_overrides(
            force=force,
            skip_incomplete=skip_incomplete,
            publish=publish,
            republish=republish,
            exclude_keys=exclude_keys,
        )
        context = MigrationContext(
            import_dir=Path(import_dir),
            mapping_path=None,
            action_log_path=log_path,
            hub_id=hub_id,
            base_repo=base_repo,
            base_folder=base_folder,
            dry_run=dry_run,
            validate_only=validate,
            verbose=verbose,
            debug_api=debug_api,
            config=cfg,
        )
        mapping_path = (
            Path(map_file)
            if map_file
            else default_mapping_path(cfg.mapping_dir, context.import_title)
        )
        context = replace(context, mapping_path=mapping_path)

        log_startup_info(context)

        adapter = HubAdapter(
            hub_id,
            client_id=client_id,
            client_secret=client_secret,
            pat_token=pat_token,
            retry_config=cfg.retry_config,
            timeout=cfg.request_timeout,
        )
        hub = DryRunHubService(adapter) if dry_run else adapter

        migrator = ContentMigrator(
            context,
            hub,
            make_confirm(cfg.force),
            publisher=hub,
            validator_factory=partial(SchemaValidator, hub),
        )
        succeeded = asyncio.run(migrator.run())
    except (Exception, KeyboardInterrupt) as e:
        handle_exception(e)
        sys.exit(1)

    if not succeeded:
        sys.exit(1)


def log_startup_info(context: MigrationContext) -> None:
    """Log startup information."""
    log_with_context(logging.INFO, "Starting import with the following parameters:")
    log_with_context(logging.INFO, f"- Import directory: {context.import_dir}")
    log_with_context(logging.INFO, f"- Hub: {context.hub_id}")
    if context.base_folder:
        log_with_context(logging.INFO, f"- Base folder: {context.base_folder}")
    elif context.base_repo:
        log_with_context(logging.INFO, f"- Base repository: {context.base_repo}")
    log_with_context(logging.INFO, f"- Mapping file: {context.mapping_path}")
    log_with_context(logging.INFO, f"- Action log: {context.action_log_path}")
    log_with_context(logging.INFO, f"- Dry run: {context.dry_run}")
    log_with_context(logging.INFO, f"- Validate only: {context.validate_only}")
    log_with_context(logging.INFO, f"- Publish: {context.config.should_publish}")
