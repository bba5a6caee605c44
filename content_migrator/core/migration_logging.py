"""
Migration success/failure logging for the content hub migration tool.

Extracted from ``migrator.py`` to keep the orchestrator focused on control flow.
Each function takes a ``migrator`` instance as its first argument.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from content_migrator.utils.logging import log_with_context

if TYPE_CHECKING:
    from content_migrator.core.migrator import ContentMigrator


def _collect_statistics(migrator: ContentMigrator) -> dict[str, Any]:
    """Gather migration statistics from migrator state into a flat dict."""
    state = migrator.state
    summary = state.summary
    return {
        **summary,
        "levels_completed": state.progress.levels_completed,
        "circular_items": state.progress.circular_items,
        "publishes_completed": len(state.publish.completed_jobs),
        "publishes_failed": len(state.publish.failed_jobs),
        "folder_failures": len(state.errors.folder_failures),
    }


def log_migration_success(migrator: ContentMigrator, duration: float) -> None:
    """Log the final success status with a summary of what was written.

    Args:
        migrator: The migrator instance whose state contains run statistics.
        duration: Migration duration in seconds.
    """
    stats = _collect_statistics(migrator)
    prefix = migrator.context.log_prefix

    if migrator.context.validate_only:
        log_with_context(
            logging.INFO,
            "VALIDATION COMPLETED, NO CONTENT WAS IMPORTED",
            outcome="validated",
        )
    else:
        log_with_context(
            logging.INFO,
            f"{prefix}CONTENT IMPORT COMPLETED SUCCESSFULLY",
            outcome="success",
        )

    log_with_context(
        logging.INFO, f"Duration: {duration:.1f} seconds", duration_seconds=duration
    )
    _log_statistics(stats)


def log_migration_failure(
    migrator: ContentMigrator, exception: BaseException, duration: float
) -> None:
    """Log the failure of a run, with the statistics gathered up to that point.

    Args:
        migrator: The migrator instance whose state contains run statistics.
        exception: The error that stopped the run.
        duration: Time spent before the failure, in seconds.
    """
    stats = _collect_statistics(migrator)
    log_with_context(
        logging.ERROR,
        f"CONTENT IMPORT FAILED: {exception}",
        outcome="failure",
        error_type=type(exception).__name__,
    )
    log_with_context(
        logging.INFO, f"Duration: {duration:.1f} seconds", duration_seconds=duration
    )
    _log_statistics(stats)

    for error in migrator.state.errors.migration_errors:
        log_with_context(logging.ERROR, f"  {error}")

    if stats["items_created"] or stats["items_updated"]:
        log_with_context(
            logging.WARNING,
            "Some content was written before the failure. Re-run the import with "
            "the same mapping file to continue, or revert it with its action log.",
        )


def _log_statistics(stats: dict[str, Any]) -> None:
    for key, label in (
        ("items_loaded", "Content items loaded"),
        ("items_created", "Content items created"),
        ("items_updated", "Content items updated"),
        ("items_skipped", "Content items skipped"),
        ("folders_created", "Folders created"),
        ("circular_items", "Items in circular dependencies"),
        ("publishes_started", "Publishes started"),
    ):
        log_with_context(logging.INFO, f"{label}: {stats[key]}", stat=key, count=stats[key])

    if stats["publishes_failed"]:
        log_with_context(
            logging.WARNING,
            f"Failed publishes: {stats['publishes_failed']}",
            stat="publishes_failed",
            count=stats["publishes_failed"],
        )
    if stats["folder_failures"]:
        log_with_context(
            logging.WARNING,
            f"Items placed at the import root after folder errors: {stats['folder_failures']}",
        )
