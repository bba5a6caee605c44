"""Reads exported content items from disk.

An export is a directory tree holding one JSON file per content item; the
directory a file sits in is the folder path it is imported into.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from content_migrator.exceptions import ExportError
from content_migrator.types import ContentRecord
from content_migrator.utils.logging import log_with_context


@dataclass
class LoadedItem:
    """A record read from the export, with the folder path it belongs in."""

    path: Path
    folder_path: str
    record: ContentRecord


@dataclass
class ExportContents:
    items: list[LoadedItem] = field(default_factory=list)
    failures: list[tuple[Path, str]] = field(default_factory=list)

    @property
    def records(self) -> list[ContentRecord]:
        return [item.record for item in self.items]


def filter_exported_item(data: dict[str, Any], exclude_keys: bool = False) -> ContentRecord:
    """Keep only the fields that are meaningful on the destination hub.

    Status, version and the source repository are dropped. The delivery id
    is dropped when it just mirrors the item id, or when delivery keys are
    excluded. ``publish`` records whether the export had been published.
    """
    body = copy.deepcopy(data.get("body") or {})
    delivery_id = data.get("deliveryId")
    if exclude_keys or delivery_id == data.get("id"):
        delivery_id = None

    if exclude_keys:
        meta = body.get("_meta")
        if isinstance(meta, dict):
            meta.pop("deliveryKey", None)

    return ContentRecord(
        label=data.get("label") or "",
        body=body,
        id=data.get("id"),
        locale=data.get("locale"),
        delivery_id=delivery_id,
        publish=data.get("lastPublishedVersion") is not None,
    )


def list_export_files(base_dir: Path) -> list[Path]:
    """All ``.json`` files below ``base_dir``, in a stable order."""
    return sorted(path for path in base_dir.rglob("*.json") if path.is_file())


def load_export(base_dir: Path, exclude_keys: bool = False) -> ExportContents:
    """Load every content item below ``base_dir``.

    Files that cannot be read or do not hold a content item are skipped and
    listed in ``failures``.

    Raises:
        ExportError: If ``base_dir`` is not a directory.
    """
    if not base_dir.is_dir():
        raise ExportError(f"Export directory not found: {base_dir}")

    contents = ExportContents()
    for path in list_export_files(base_dir):
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            log_with_context(logging.WARNING, f"Couldn't read content item at '{path}': {e}")
            contents.failures.append((path, str(e)))
            continue

        if not isinstance(data, dict) or not isinstance(data.get("body"), dict):
            log_with_context(
                logging.WARNING, f"Skipping '{path}': not a content item export"
            )
            contents.failures.append((path, "not a content item"))
            continue

        folder_path = path.parent.relative_to(base_dir).as_posix()
        contents.items.append(
            LoadedItem(
                path=path,
                folder_path=folder_path,
                record=filter_exported_item(data, exclude_keys),
            )
        )

    log_with_context(
        logging.INFO,
        f"Loaded {len(contents.items)} content items from '{base_dir}'",
        skipped=len(contents.failures) or None,
    )
    return contents
