"""Replicates the export's directory structure as folders on the hub.

Each record's directory, relative to its repository base directory, maps to
a folder path. Paths are resolved through a per-path cache of tasks so that
concurrent lookups of the same path share one request, and a folder is
created at most once per path.
"""

from __future__ import annotations

import asyncio
import logging
import posixpath

from content_migrator.services.protocols import HubService
from content_migrator.types import ContentRepository, Folder
from content_migrator.utils.api import REMOTE_ERRORS
from content_migrator.utils.logging import log_with_context

ROOT_PATH = "."


def normalize_folder_path(path: str) -> str:
    """Return a posix relative path with ``"."`` for the base directory."""
    normalized = posixpath.normpath(path.replace("\\", "/")) if path else ROOT_PATH
    return normalized.strip("/") or ROOT_PATH


class FolderResolver:
    """Gets or creates the folder for each relative path in one repository.

    Args:
        hub: Hub service used for folder lookups and creation.
        repository: Repository the folders live in.
        base_folder: Folder the base directory maps to; ``None`` means the
            repository root.
    """

    def __init__(
        self,
        hub: HubService,
        repository: ContentRepository,
        base_folder: Folder | None = None,
    ) -> None:
        self.hub = hub
        self.repository = repository
        self.base_folder = base_folder
        self.root_folders: list[Folder] = []
        self.folders_created = 0
        self._paths: dict[str, asyncio.Future[Folder | None]] = {}
        self._subfolders: dict[str, asyncio.Future[list[Folder]]] = {}

    async def load_root_folders(self) -> None:
        """Find the folders at the top of the repository.

        A folder is a root folder when its parent lookup returns nothing or
        fails. Failing to list the repository's folders propagates.
        """
        if self.base_folder is not None:
            return

        folders = await self.hub.list_folders(self.repository)
        for folder in folders:
            try:
                parent = await self.hub.get_folder_parent(folder)
            except REMOTE_ERRORS:
                parent = None
            if parent is None:
                self.root_folders.append(folder)

        log_with_context(
            logging.DEBUG,
            f"Found {len(self.root_folders)} root folders in repository '{self.repository.label}'",
            repository=self.repository.id,
        )

    async def resolve(self, path: str) -> Folder | None:
        """Return the folder for ``path``, creating it and its parents if needed."""
        rel = normalize_folder_path(path)
        if rel == ROOT_PATH:
            return self.base_folder

        pending = self._paths.get(rel)
        if pending is None:
            pending = asyncio.ensure_future(self._get_or_create(rel))
            self._paths[rel] = pending
        return await pending

    async def _subfolders_of(self, folder: Folder) -> list[Folder]:
        pending = self._subfolders.get(folder.id)
        if pending is None:
            pending = asyncio.ensure_future(self.hub.list_subfolders(folder))
            self._subfolders[folder.id] = pending
        return await pending

    async def _get_or_create(self, rel: str) -> Folder:
        parent_rel = posixpath.dirname(rel) or ROOT_PATH
        name = posixpath.basename(rel)
        try:
            parent = await self.resolve(parent_rel)
            container = (
                self.root_folders if parent is None else await self._subfolders_of(parent)
            )
            container_name = self.repository.label if parent is None else parent.name

            existing = next((f for f in container if f.name == name), None)
            if existing is not None:
                log_with_context(
                    logging.DEBUG,
                    f"Found existing subfolder in {container_name}: '{rel}'",
                )
                return existing

            created = await self.hub.create_folder(self.repository, name, parent)
            self.folders_created += 1
            log_with_context(
                logging.INFO,
                f"Created folder in {container_name}: '{rel}'",
                folder_id=created.id,
            )
            return created
        except REMOTE_ERRORS as e:
            log_with_context(logging.ERROR, f"Couldn't get or create folder {rel}: {e}")
            raise
