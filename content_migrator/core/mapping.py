"""Persistent old-id to new-id mapping for resumable, repeatable imports."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from content_migrator.types import SerializedMapping
from content_migrator.utils.logging import log_with_context


class ContentMapping:
    """Two append-only id tables: content items and content types.

    Content types are keyed by schema URI. Once an id is registered, lookups
    for it are stable for the rest of the process.
    """

    def __init__(self) -> None:
        self.content_items: dict[str, str] = {}
        self.content_types: dict[str, str] = {}

    def get_content_item(self, old_id: str | None) -> str | None:
        if old_id is None:
            return None
        return self.content_items.get(old_id)

    def register_content_item(self, old_id: str, new_id: str) -> None:
        self.content_items[old_id] = new_id

    def get_content_type(self, schema_id: str | None) -> str | None:
        if schema_id is None:
            return None
        return self.content_types.get(schema_id)

    def register_content_type(self, schema_id: str, type_id: str) -> None:
        self.content_types[schema_id] = type_id

    def resolved_ids(self) -> set[str]:
        """Old ids that already have a counterpart on the destination hub."""
        return set(self.content_items)

    def to_dict(self) -> SerializedMapping:
        return {
            "contentItems": [[old, new] for old, new in self.content_items.items()],
            "contentTypes": [[old, new] for old, new in self.content_types.items()],
        }

    def save(self, path: Path) -> None:
        """Atomically save the mapping (write .tmp + rename)."""
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")
        os.replace(tmp, path)

    def load(self, path: Path) -> bool:
        """Load the mapping from disk.

        A missing or corrupt file leaves the mapping empty and returns False.
        """
        if not path.exists():
            return False
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                log_with_context(
                    logging.WARNING,
                    f"Mapping file {path} has invalid format, ignoring",
                )
                return False
            content_items = {
                str(old): str(new) for old, new in raw.get("contentItems") or []
            }
            content_types = {
                str(old): str(new) for old, new in raw.get("contentTypes") or []
            }
        except (json.JSONDecodeError, OSError, TypeError, ValueError) as e:
            log_with_context(logging.WARNING, f"Failed to read mapping {path}: {e}")
            return False

        self.content_items = content_items
        self.content_types = content_types
        return True


def try_save_mapping(path: Path | None, mapping: ContentMapping) -> bool:
    """Save the mapping, logging instead of raising on failure."""
    if path is None:
        return False
    try:
        mapping.save(path)
    except OSError as e:
        log_with_context(logging.ERROR, f"Failed to save the mapping to {path}: {e}")
        return False
    log_with_context(logging.INFO, f"Mapping saved to {path}")
    return True


def default_mapping_path(mapping_dir: str, import_title: str) -> Path:
    """Return ``<mapping_dir>/<import_title>.json`` with ``~`` expanded."""
    return Path(mapping_dir).expanduser() / f"{import_title}.json"
