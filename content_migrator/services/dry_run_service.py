"""No-op hub service for dry-run mode.

Reads are passed through to the real hub so that folder lookups, mappings
and content type checks behave as they would in a real run. Writes are
logged and answered with fabricated resources whose ids start with
``dry-run-``.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import replace

from content_migrator.constants import STATUS_ACTIVE, STATUS_ARCHIVED
from content_migrator.services.protocols import HubService
from content_migrator.types import (
    ContentRecord,
    ContentRepository,
    ContentType,
    ContentTypeSchema,
    Folder,
    PublishJobState,
)
from content_migrator.utils.logging import log_with_context


class DryRunHubService:
    """Hub and publish service that never writes.

    Args:
        hub: Real hub service used for every read.
    """

    def __init__(self, hub: HubService) -> None:
        self._hub = hub
        self._counter = 0

    def _next_id(self, kind: str) -> str:
        self._counter += 1
        return f"dry-run-{kind}-{self._counter}"

    # -- Reads ---------------------------------------------------------------

    async def get_repository(self, repository_id: str) -> ContentRepository:
        return await self._hub.get_repository(repository_id)

    async def list_repositories(self) -> list[ContentRepository]:
        return await self._hub.list_repositories()

    async def get_folder(self, folder_id: str) -> Folder:
        return await self._hub.get_folder(folder_id)

    async def list_folders(self, repository: ContentRepository) -> list[Folder]:
        return await self._hub.list_folders(repository)

    async def get_folder_parent(self, folder: Folder) -> Folder | None:
        return await self._hub.get_folder_parent(folder)

    async def list_subfolders(self, folder: Folder) -> list[Folder]:
        if folder.id.startswith("dry-run-"):
            return []
        return await self._hub.list_subfolders(folder)

    async def get_content_item(self, content_id: str) -> ContentRecord:
        return await self._hub.get_content_item(content_id)

    async def get_content_item_version(
        self, content_id: str, version: int
    ) -> ContentRecord:
        return await self._hub.get_content_item_version(content_id, version)

    async def list_content_types(self) -> list[ContentType]:
        return await self._hub.list_content_types()

    async def list_content_type_schemas(self) -> list[ContentTypeSchema]:
        return await self._hub.list_content_type_schemas()

    # -- Writes --------------------------------------------------------------

    async def create_folder(
        self, repository: ContentRepository, name: str, parent: Folder | None
    ) -> Folder:
        where = parent.name if parent is not None else repository.label
        log_with_context(logging.DEBUG, f"[DRY RUN] Would create folder '{name}' in {where}")
        return Folder(
            id=self._next_id("folder"),
            name=name,
            repository_id=repository.id,
            parent_id=parent.id if parent is not None else None,
        )

    async def create_content_item(
        self, repository: ContentRepository, record: ContentRecord
    ) -> ContentRecord:
        log_with_context(
            logging.DEBUG,
            f"[DRY RUN] Would create content item '{record.label}' in {repository.label}",
        )
        return replace(
            record,
            id=self._next_id("item"),
            body=copy.deepcopy(record.body),
            repository_id=repository.id,
            version=1,
            status=STATUS_ACTIVE,
            links={},
        )

    async def update_content_item(
        self, existing: ContentRecord, record: ContentRecord
    ) -> ContentRecord:
        log_with_context(
            logging.DEBUG, f"[DRY RUN] Would update content item {existing.id}"
        )
        return replace(
            record,
            id=existing.id,
            body=copy.deepcopy(record.body),
            repository_id=existing.repository_id,
            version=(existing.version or 0) + 1,
            status=existing.status,
            links={},
        )

    async def archive_content_item(self, record: ContentRecord) -> ContentRecord:
        log_with_context(logging.DEBUG, f"[DRY RUN] Would archive content item {record.id}")
        return replace(record, status=STATUS_ARCHIVED)

    async def unarchive_content_item(self, record: ContentRecord) -> ContentRecord:
        log_with_context(
            logging.DEBUG, f"[DRY RUN] Would unarchive content item {record.id}"
        )
        return replace(record, status=STATUS_ACTIVE)

    async def set_locale(self, record: ContentRecord, locale: str) -> ContentRecord:
        log_with_context(
            logging.DEBUG, f"[DRY RUN] Would set locale of {record.id} to {locale}"
        )
        return replace(record, locale=locale)

    async def register_content_type(self, schema_uri: str, label: str) -> ContentType:
        log_with_context(logging.DEBUG, f"[DRY RUN] Would register content type {schema_uri}")
        return ContentType(id=self._next_id("type"), content_type_uri=schema_uri, label=label)

    async def assign_content_type(
        self, repository: ContentRepository, content_type: ContentType
    ) -> ContentRepository:
        log_with_context(
            logging.DEBUG,
            f"[DRY RUN] Would assign content type {content_type.content_type_uri} "
            f"to {repository.label}",
        )
        return replace(
            repository,
            content_type_ids=[*repository.content_type_ids, content_type.id],
        )

    # -- Publishing ----------------------------------------------------------

    async def start_publish(self, record: ContentRecord) -> str | None:
        log_with_context(logging.DEBUG, f"[DRY RUN] Would publish {record.label}")
        return self._next_id("publish-job")

    async def get_publish_job(self, location: str) -> PublishJobState:
        return PublishJobState.COMPLETED
