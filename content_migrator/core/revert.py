"""Undo an import using its action log.

Created items are archived; updated items are updated back to the body of
the version they had before the import.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from content_migrator.constants import ACTION_CREATE, ACTION_UPDATE
from content_migrator.core.action_log import ActionLog
from content_migrator.services.protocols import HubService
from content_migrator.types import ContentRecord
from content_migrator.utils.api import REMOTE_ERRORS
from content_migrator.utils.logging import log_with_context
from content_migrator.utils.prompts import ConfirmCallback


@dataclass
class RevertEntry:
    record: ContentRecord
    old_version: int
    new_version: int

    @property
    def modified_since_import(self) -> bool:
        return self.record.version != self.new_version


async def _collect_entries(hub: HubService, log: ActionLog) -> list[RevertEntry]:
    entries: list[RevertEntry] = []

    for content_id in log.get_data(ACTION_CREATE):
        try:
            record = await hub.get_content_item(content_id)
        except REMOTE_ERRORS:
            log_with_context(logging.WARNING, f"Could not find item with id {content_id}, skipping")
            continue
        entries.append(RevertEntry(record, old_version=0, new_version=1))

    unchanged = 0
    for data in log.get_data(ACTION_UPDATE):
        parts = data.split(" ")
        if len(parts) != 3:
            continue
        content_id = parts[0]
        try:
            old_version, new_version = int(parts[1]), int(parts[2])
        except ValueError:
            log_with_context(logging.WARNING, f"Malformed update entry '{data}', skipping")
            continue

        if old_version == new_version:
            unchanged += 1
            continue

        try:
            record = await hub.get_content_item(content_id)
        except REMOTE_ERRORS:
            log_with_context(logging.WARNING, f"Could not find item with id {content_id}, skipping")
            continue
        entries.append(RevertEntry(record, old_version, new_version))

    if unchanged:
        log_with_context(
            logging.INFO,
            f"{unchanged} content items were imported but not changed, nothing to revert for them",
        )
    return entries


async def revert_import(hub: HubService, log: ActionLog, confirm: ConfirmCallback) -> bool:
    """Revert the actions recorded in ``log``.

    Returns False when the operator declines to overwrite items that were
    modified after the import. Failures on individual items are logged and
    the revert carries on with the next one.
    """
    entries = await _collect_entries(hub, log)

    changed = [entry for entry in entries if entry.modified_since_import]
    if changed:
        log_with_context(
            logging.WARNING,
            f"{len(changed)} content items have been changed since they were imported:",
        )
        for entry in changed:
            archived = ", has been archived" if entry.record.archived else ""
            times = (entry.record.version or 0) - entry.new_version
            log_with_context(
                logging.WARNING,
                f"  {entry.record.label} (modified {times} times since import{archived})",
            )
        if not confirm(
            "Do you want to continue with the revert, losing any changes made since the import?"
        ):
            return False

    if not entries:
        log_with_context(logging.INFO, "No actions found to revert")
        return True

    for entry in entries:
        record = entry.record
        if entry.old_version == 0:
            if record.archived:
                continue
            log_with_context(logging.INFO, f"Archiving {record.label}")
            try:
                await hub.archive_content_item(record)
            except REMOTE_ERRORS as e:
                log_with_context(logging.ERROR, f"Could not archive {record.label}: {e}")
            continue

        try:
            old = await hub.get_content_item_version(record.id or "", entry.old_version)
        except REMOTE_ERRORS as e:
            log_with_context(
                logging.ERROR, f"Could not get old version for {record.label}: {e}"
            )
            continue

        log_with_context(logging.INFO, f"Reverting {record.label} to version {entry.old_version}")
        old.version = record.version
        try:
            await hub.update_content_item(record, old)
        except REMOTE_ERRORS as e:
            log_with_context(logging.ERROR, f"Could not revert {record.label}: {e}")

    log_with_context(logging.INFO, "Revert finished")
    return True
