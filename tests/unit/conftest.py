"""Unit test configuration and shared fixtures."""

from __future__ import annotations

import copy
from dataclasses import replace
from pathlib import Path
from typing import Any

import pytest

from content_migrator.constants import STATUS_ACTIVE, STATUS_ARCHIVED
from content_migrator.core.config import MigrationConfig
from content_migrator.core.context import MigrationContext
from content_migrator.exceptions import APIError
from content_migrator.types import (
    ContentRecord,
    ContentRepository,
    ContentType,
    ContentTypeSchema,
    Folder,
    PublishJobState,
)
from tests.conftest import ARTICLE_SCHEMA

# ---------------------------------------------------------------------------
# In-memory hub
# ---------------------------------------------------------------------------


class FakeHubService:
    """In-memory hub and publish service.

    Every call is appended to ``calls`` as ``(method name, first argument)``.
    Setting ``fail_on[method]`` to an exception makes that method raise it.
    """

    def __init__(self) -> None:
        self.repositories: dict[str, ContentRepository] = {}
        self.folders: dict[str, Folder] = {}
        self.items: dict[str, ContentRecord] = {}
        self.versions: dict[tuple[str, int], ContentRecord] = {}
        self.content_types: list[ContentType] = []
        self.schemas: list[ContentTypeSchema] = []
        self.published: list[str] = []
        self.job_states: dict[str, list[PublishJobState]] = {}
        self.calls: list[tuple[str, Any]] = []
        self.fail_on: dict[str, Exception] = {}
        self._counter = 0

    def _record(self, method: str, arg: Any = None) -> None:
        self.calls.append((method, arg))
        error = self.fail_on.get(method)
        if error is not None:
            raise error

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"

    def _store(self, record: ContentRecord) -> ContentRecord:
        stored = copy.deepcopy(record)
        self.items[stored.id] = stored
        self.versions[(stored.id, stored.version)] = copy.deepcopy(stored)
        return copy.deepcopy(stored)

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    # -- Setup helpers --------------------------------------------------------

    def add_repository(self, repo_id: str, label: str, type_ids=()) -> ContentRepository:
        repository = ContentRepository(repo_id, label, list(type_ids))
        self.repositories[repo_id] = repository
        return repository

    def add_folder(self, folder_id: str, name: str, repo_id: str, parent_id=None) -> Folder:
        folder = Folder(folder_id, name, repo_id, parent_id)
        self.folders[folder_id] = folder
        return folder

    def add_item(self, record: ContentRecord) -> ContentRecord:
        return self._store(record)

    # -- Repositories and folders ---------------------------------------------

    async def get_repository(self, repository_id: str) -> ContentRepository:
        self._record("get_repository", repository_id)
        if repository_id not in self.repositories:
            raise APIError(f"No repository {repository_id}", status_code=404)
        return self.repositories[repository_id]

    async def list_repositories(self) -> list[ContentRepository]:
        self._record("list_repositories")
        return list(self.repositories.values())

    async def get_folder(self, folder_id: str) -> Folder:
        self._record("get_folder", folder_id)
        if folder_id not in self.folders:
            raise APIError(f"No folder {folder_id}", status_code=404)
        return self.folders[folder_id]

    async def list_folders(self, repository: ContentRepository) -> list[Folder]:
        self._record("list_folders", repository.id)
        return [f for f in self.folders.values() if f.repository_id == repository.id]

    async def get_folder_parent(self, folder: Folder) -> Folder | None:
        self._record("get_folder_parent", folder.id)
        return self.folders.get(folder.parent_id) if folder.parent_id else None

    async def list_subfolders(self, folder: Folder) -> list[Folder]:
        self._record("list_subfolders", folder.id)
        return [f for f in self.folders.values() if f.parent_id == folder.id]

    async def create_folder(
        self, repository: ContentRepository, name: str, parent: Folder | None
    ) -> Folder:
        self._record("create_folder", name)
        folder = Folder(
            self._next_id("folder"),
            name,
            repository.id,
            parent.id if parent is not None else None,
        )
        self.folders[folder.id] = folder
        return folder

    # -- Content items ----------------------------------------------------------

    async def get_content_item(self, content_id: str) -> ContentRecord:
        self._record("get_content_item", content_id)
        if content_id not in self.items:
            raise APIError(f"No content item {content_id}", status_code=404)
        return copy.deepcopy(self.items[content_id])

    async def get_content_item_version(self, content_id: str, version: int) -> ContentRecord:
        self._record("get_content_item_version", (content_id, version))
        if (content_id, version) not in self.versions:
            raise APIError(f"No version {version} of {content_id}", status_code=404)
        return copy.deepcopy(self.versions[(content_id, version)])

    async def create_content_item(
        self, repository: ContentRepository, record: ContentRecord
    ) -> ContentRecord:
        self._record("create_content_item", record.label)
        return self._store(
            replace(
                record,
                id=self._next_id("new"),
                repository_id=repository.id,
                version=1,
                status=STATUS_ACTIVE,
                publish=False,
            )
        )

    async def update_content_item(
        self, existing: ContentRecord, record: ContentRecord
    ) -> ContentRecord:
        self._record("update_content_item", existing.id)
        current = self.items[existing.id]
        return self._store(
            replace(
                record,
                id=existing.id,
                repository_id=current.repository_id,
                version=(current.version or 0) + 1,
                status=current.status,
                publish=False,
            )
        )

    async def archive_content_item(self, record: ContentRecord) -> ContentRecord:
        self._record("archive_content_item", record.id)
        current = self.items[record.id]
        return self._store(
            replace(current, status=STATUS_ARCHIVED, version=(current.version or 0) + 1)
        )

    async def unarchive_content_item(self, record: ContentRecord) -> ContentRecord:
        self._record("unarchive_content_item", record.id)
        current = self.items[record.id]
        return self._store(
            replace(current, status=STATUS_ACTIVE, version=(current.version or 0) + 1)
        )

    async def set_locale(self, record: ContentRecord, locale: str) -> ContentRecord:
        self._record("set_locale", record.id)
        current = self.items[record.id]
        return self._store(replace(current, locale=locale))

    # -- Content types ----------------------------------------------------------

    async def list_content_types(self) -> list[ContentType]:
        self._record("list_content_types")
        return list(self.content_types)

    async def list_content_type_schemas(self) -> list[ContentTypeSchema]:
        self._record("list_content_type_schemas")
        return list(self.schemas)

    async def register_content_type(self, schema_uri: str, label: str) -> ContentType:
        self._record("register_content_type", schema_uri)
        content_type = ContentType(self._next_id("type"), schema_uri, label)
        self.content_types.append(content_type)
        return content_type

    async def assign_content_type(
        self, repository: ContentRepository, content_type: ContentType
    ) -> ContentRepository:
        self._record("assign_content_type", (repository.id, content_type.id))
        stored = self.repositories[repository.id]
        if content_type.id not in stored.content_type_ids:
            stored.content_type_ids.append(content_type.id)
        return stored

    # -- Publishing -------------------------------------------------------------

    async def start_publish(self, record: ContentRecord) -> str | None:
        self._record("start_publish", record.id)
        self.published.append(record.id)
        return f"publishing-jobs/{record.id}"

    async def get_publish_job(self, location: str) -> PublishJobState:
        self._record("get_publish_job", location)
        states = self.job_states.get(location)
        if states:
            return states.pop(0) if len(states) > 1 else states[0]
        return PublishJobState.COMPLETED


class FakeValidator:
    """Validator returning fixed errors for chosen labels."""

    def __init__(self, errors: dict[str, list[str]] | None = None) -> None:
        self.errors = errors or {}
        self.validated: list[dict[str, Any]] = []

    async def validate(self, body: dict[str, Any]) -> list[str]:
        self.validated.append(body)
        return self.errors.get(body.get("_meta", {}).get("name"), [])


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def hub():
    """A hub with one repository that already has the article type assigned."""
    fake = FakeHubService()
    fake.content_types.append(ContentType("type-article", ARTICLE_SCHEMA, "article"))
    fake.schemas.append(
        ContentTypeSchema("schema-article", ARTICLE_SCHEMA, {"type": "object"})
    )
    fake.add_repository("repo-1", "Content", ["type-article"])
    return fake


def make_context(
    import_dir: Path,
    work_dir: Path,
    base_repo: str | None = "repo-1",
    base_folder: str | None = None,
    dry_run: bool = False,
    validate_only: bool = False,
    **config: Any,
) -> MigrationContext:
    """Build a context writing its mapping and action log under ``work_dir``."""
    return MigrationContext(
        import_dir=import_dir,
        mapping_path=work_dir / "mapping.json",
        action_log_path=work_dir / "logs" / "import.log",
        hub_id="hub-1",
        base_repo=base_repo,
        base_folder=base_folder,
        dry_run=dry_run,
        validate_only=validate_only,
        verbose=False,
        debug_api=False,
        config=MigrationConfig(**config),
    )
