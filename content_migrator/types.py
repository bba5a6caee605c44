"""Shared type definitions for the content hub migration tool.

Provides TypedDicts for the JSON shapes written to disk, and dataclasses
for the hub resources that flow through the migration pipeline.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypedDict

from content_migrator.constants import STATUS_ACTIVE

# ---------------------------------------------------------------------------
# Persisted JSON shapes
# ---------------------------------------------------------------------------


class SerializedMapping(TypedDict, total=False):
    """On-disk format of the id mapping file."""

    contentItems: list[list[str]]
    contentTypes: list[list[str]]


class MigrationSummary(TypedDict):
    """Aggregate migration counters."""

    items_loaded: int
    items_created: int
    items_updated: int
    items_skipped: int
    folders_created: int
    publishes_started: int


# ---------------------------------------------------------------------------
# Hub resources
# ---------------------------------------------------------------------------


class PublishJobState(str, Enum):
    """State of an asynchronous publish job."""

    PREPARING = "PREPARING"
    PUBLISHING = "PUBLISHING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def terminal(self) -> bool:
        """True once the job will not change state any more."""
        return self in (PublishJobState.COMPLETED, PublishJobState.FAILED)


@dataclass
class ContentRecord:
    """A single content item, either read from an export or returned by the hub.

    The body is kept as a plain JSON value tree and is mutated in place when
    references are rewritten during a migration.
    """

    label: str
    body: dict[str, Any]
    id: str | None = None
    locale: str | None = None
    repository_id: str | None = None
    folder_id: str | None = None
    version: int | None = None
    status: str = STATUS_ACTIVE
    delivery_id: str | None = None
    # Set at load time when the export declared a published version.
    publish: bool = False
    links: dict[str, str] = field(default_factory=dict)

    @property
    def schema(self) -> str | None:
        """Schema URI of the body, or None for malformed bodies."""
        meta = self.body.get("_meta") if isinstance(self.body, dict) else None
        if isinstance(meta, dict) and isinstance(meta.get("schema"), str):
            return meta["schema"]
        return None

    @property
    def archived(self) -> bool:
        return self.status != STATUS_ACTIVE

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContentRecord:
        """Create a record from a hub/export JSON object."""
        links = {
            name: link["href"]
            for name, link in (data.get("_links") or {}).items()
            if isinstance(link, dict) and "href" in link
        }
        return cls(
            label=data.get("label", ""),
            body=data.get("body") or {},
            id=data.get("id"),
            locale=data.get("locale"),
            repository_id=data.get("contentRepositoryId"),
            folder_id=data.get("folderId"),
            version=data.get("version"),
            status=data.get("status", STATUS_ACTIVE),
            delivery_id=data.get("deliveryId"),
            links=links,
        )

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON payload sent to the hub for create/update calls."""
        payload: dict[str, Any] = {
            "label": self.label,
            "body": copy.deepcopy(self.body),
        }
        if self.folder_id is not None:
            payload["folderId"] = self.folder_id
        if self.locale is not None:
            payload["locale"] = self.locale
        if self.version is not None:
            payload["version"] = self.version
        if self.delivery_id is not None:
            payload["deliveryId"] = self.delivery_id
        return payload


@dataclass
class Folder:
    """A folder inside a content repository."""

    id: str
    name: str
    repository_id: str | None = None
    parent_id: str | None = None


@dataclass
class ContentRepository:
    """A content repository on the hub, with its assigned content type ids."""

    id: str
    label: str
    content_type_ids: list[str] = field(default_factory=list)


@dataclass
class ContentType:
    """A content type registered on the hub, bound to a schema URI."""

    id: str
    content_type_uri: str
    label: str | None = None


@dataclass
class ContentTypeSchema:
    """A content type schema registered on the hub."""

    id: str
    schema_id: str
    body: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Service result types
# ---------------------------------------------------------------------------


@dataclass
class ImportTarget:
    """A repository (optionally a base folder in it) bound to an export directory."""

    repository: ContentRepository
    base_path: str
    base_folder: Folder | None = None


@dataclass
class ImportResult:
    """Outcome of creating or updating one record on the hub.

    ``old_version`` is 0 when the record was newly created.
    """

    record: ContentRecord
    old_version: int = 0

    @property
    def updated(self) -> bool:
        return self.old_version > 0

    @property
    def changed(self) -> bool:
        """True when the hub version differs from the version before import."""
        return (self.record.version or 0) != self.old_version


@dataclass
class PublishJob:
    """A publish request for a record, tracked until it reaches a terminal state."""

    record: ContentRecord
    location: str
    state: PublishJobState | None = None
    attempts: int = 0
    error: str | None = None
