"""Collaborator contracts used by the migration core.

The orchestrator, publish queue and revert logic only talk to the remote hub
through these protocols, so tests can swap in an in-memory fake and dry-run
mode can swap in a service that fabricates write results.
"""

from __future__ import annotations

from typing import Any, Protocol

from content_migrator.types import (
    ContentRecord,
    ContentRepository,
    ContentType,
    ContentTypeSchema,
    Folder,
    PublishJobState,
)


class HubService(Protocol):
    """Content, folder and type operations on a hub."""

    # -- Repositories and folders ----------------------------------------------

    async def get_repository(self, repository_id: str) -> ContentRepository: ...

    async def list_repositories(self) -> list[ContentRepository]: ...

    async def get_folder(self, folder_id: str) -> Folder: ...

    async def list_folders(self, repository: ContentRepository) -> list[Folder]: ...

    async def get_folder_parent(self, folder: Folder) -> Folder | None: ...

    async def list_subfolders(self, folder: Folder) -> list[Folder]: ...

    async def create_folder(
        self, repository: ContentRepository, name: str, parent: Folder | None
    ) -> Folder: ...

    # -- Content items -----------------------------------------------------------

    async def get_content_item(self, content_id: str) -> ContentRecord: ...

    async def get_content_item_version(
        self, content_id: str, version: int
    ) -> ContentRecord: ...

    async def create_content_item(
        self, repository: ContentRepository, record: ContentRecord
    ) -> ContentRecord: ...

    async def update_content_item(
        self, existing: ContentRecord, record: ContentRecord
    ) -> ContentRecord: ...

    async def archive_content_item(self, record: ContentRecord) -> ContentRecord: ...

    async def unarchive_content_item(self, record: ContentRecord) -> ContentRecord: ...

    async def set_locale(self, record: ContentRecord, locale: str) -> ContentRecord: ...

    # -- Content types -----------------------------------------------------------

    async def list_content_types(self) -> list[ContentType]: ...

    async def list_content_type_schemas(self) -> list[ContentTypeSchema]: ...

    async def register_content_type(self, schema_uri: str, label: str) -> ContentType: ...

    async def assign_content_type(
        self, repository: ContentRepository, content_type: ContentType
    ) -> ContentRepository: ...


class PublishService(Protocol):
    """Starts publish jobs and reports their state."""

    async def start_publish(self, record: ContentRecord) -> str | None: ...

    async def get_publish_job(self, location: str) -> PublishJobState: ...


class Validator(Protocol):
    """Validates a content body against its schema, returning error messages."""

    async def validate(self, body: dict[str, Any]) -> list[str]: ...
