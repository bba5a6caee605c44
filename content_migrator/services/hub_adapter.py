"""REST adapter for the content hub management API.

Wraps a ``requests.Session`` with bearer authentication (OAuth client
credentials or a personal access token), HAL pagination and retries for
transient failures. Calls are blocking and are run in worker threads so the
adapter can be awaited from the migration event loop.
"""

from __future__ import annotations

import asyncio
import json
import threading
import time
from typing import Any

import requests

from content_migrator.constants import (
    DEFAULT_API_URL,
    DEFAULT_AUTH_URL,
    DEFAULT_PAGE_SIZE,
    HTTP_NO_CONTENT,
    HTTP_NOT_FOUND,
)
from content_migrator.exceptions import APIError, ConfigError
from content_migrator.types import (
    ContentRecord,
    ContentRepository,
    ContentType,
    ContentTypeSchema,
    Folder,
    PublishJobState,
)
from content_migrator.utils.api import with_retry
from content_migrator.utils.logging import log_api_request, log_api_response

# Refresh OAuth tokens slightly before they expire
TOKEN_EXPIRY_MARGIN = 30


def _last_segment(href: str | None) -> str | None:
    if not href:
        return None
    return href.split("{", 1)[0].rstrip("/").rsplit("/", 1)[-1] or None


def _link(data: dict[str, Any], name: str) -> str | None:
    link = (data.get("_links") or {}).get(name)
    return link.get("href") if isinstance(link, dict) else None


def repository_from_json(data: dict[str, Any]) -> ContentRepository:
    return ContentRepository(
        id=data["id"],
        label=data.get("label") or data.get("name") or "",
        content_type_ids=[
            entry["hubContentTypeId"]
            for entry in data.get("contentTypes") or []
            if isinstance(entry, dict) and "hubContentTypeId" in entry
        ],
    )


def folder_from_json(data: dict[str, Any]) -> Folder:
    return Folder(
        id=data["id"],
        name=data.get("name", ""),
        repository_id=data.get("contentRepositoryId")
        or _last_segment(_link(data, "content-repository")),
        parent_id=data.get("parentId"),
    )


def content_type_from_json(data: dict[str, Any]) -> ContentType:
    settings = data.get("settings") or {}
    return ContentType(
        id=data["id"],
        content_type_uri=data.get("contentTypeUri", ""),
        label=settings.get("label"),
    )


def schema_from_json(data: dict[str, Any]) -> ContentTypeSchema:
    body = data.get("body") or {}
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            body = {}
    return ContentTypeSchema(id=data["id"], schema_id=data.get("schemaId", ""), body=body)


class HubAdapter:
    """Hub and publish service backed by the management REST API.

    Args:
        hub_id: Id of the destination hub.
        client_id: OAuth client id, used with ``client_secret``.
        client_secret: OAuth client secret.
        pat_token: Personal access token, used when no client credentials
            are given.
        api_url: Base URL of the management API.
        auth_url: OAuth token endpoint.
        retry_config: ``max_retries`` / ``retry_delay`` for transient errors.
        timeout: Request timeout in seconds.
        session: Session to use, mainly for tests.
    """

    def __init__(
        self,
        hub_id: str,
        client_id: str | None = None,
        client_secret: str | None = None,
        pat_token: str | None = None,
        api_url: str = DEFAULT_API_URL,
        auth_url: str = DEFAULT_AUTH_URL,
        retry_config: dict[str, Any] | None = None,
        timeout: int = 60,
        session: requests.Session | None = None,
    ) -> None:
        if not pat_token and not (client_id and client_secret):
            raise ConfigError(
                "Either a client id and secret or a personal access token is required"
            )
        self.hub_id = hub_id
        self.api_url = api_url.rstrip("/")
        self.auth_url = auth_url
        self.timeout = timeout
        self._client_id = client_id
        self._client_secret = client_secret
        self._pat_token = pat_token
        self._session = session or requests.Session()
        self._token: str | None = None
        self._token_expires = 0.0
        self._token_lock = threading.Lock()
        self._send = with_retry(retry_config)(self._send_once)

    # -- Transport ------------------------------------------------------------

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.api_url}/{path.lstrip('/')}"

    def _auth_header(self) -> str:
        if self._pat_token and not (self._client_id and self._client_secret):
            return f"Bearer {self._pat_token}"

        with self._token_lock:
            if self._token is None or time.monotonic() >= self._token_expires:
                self._fetch_token()
            return f"Bearer {self._token}"

    def _fetch_token(self) -> None:
        log_api_request("POST", self.auth_url, {"client_id": self._client_id})
        response = self._session.post(
            self.auth_url,
            data={
                "grant_type": "client_credentials",
                "client_id": self._client_id,
                "client_secret": self._client_secret,
            },
            timeout=self.timeout,
        )
        log_api_response(response.status_code, self.auth_url)
        if not response.ok:
            raise APIError(
                f"Authentication failed: {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )
        data = response.json()
        self._token = data["access_token"]
        expires_in = float(data.get("expires_in", 300))
        self._token_expires = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)

    def _send_once(
        self, method: str, path: str, payload: Any = None
    ) -> requests.Response:
        url = self._url(path)
        log_api_request(method, url, payload if isinstance(payload, dict) else None)
        response = self._session.request(
            method,
            url,
            json=payload,
            headers={"Authorization": self._auth_header()},
            timeout=self.timeout,
        )
        log_api_response(response.status_code, url, response.text)

        if response.status_code >= 400:
            raise APIError(
                f"{method} {url} failed: {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    def _json(self, method: str, path: str, payload: Any = None) -> dict[str, Any]:
        response = self._send(method, path, payload)
        if response.status_code == HTTP_NO_CONTENT or not response.content:
            return {}
        return response.json()

    def _paginate(self, path: str, embedded_key: str) -> list[dict[str, Any]]:
        """Collect every page of a HAL collection."""
        items: list[dict[str, Any]] = []
        page = 0
        separator = "&" if "?" in path else "?"
        while True:
            data = self._json(
                "GET", f"{path}{separator}page={page}&size={DEFAULT_PAGE_SIZE}"
            )
            items.extend((data.get("_embedded") or {}).get(embedded_key) or [])
            total_pages = (data.get("page") or {}).get("totalPages", 1)
            page += 1
            if page >= total_pages:
                return items

    async def _call(self, method: str, path: str, payload: Any = None) -> dict[str, Any]:
        return await asyncio.to_thread(self._json, method, path, payload)

    async def _list(self, path: str, embedded_key: str) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._paginate, path, embedded_key)

    # -- Repositories and folders ----------------------------------------------

    async def get_repository(self, repository_id: str) -> ContentRepository:
        return repository_from_json(
            await self._call("GET", f"content-repositories/{repository_id}")
        )

    async def list_repositories(self) -> list[ContentRepository]:
        data = await self._list(
            f"hubs/{self.hub_id}/content-repositories", "content-repositories"
        )
        return [repository_from_json(item) for item in data]

    async def get_folder(self, folder_id: str) -> Folder:
        return folder_from_json(await self._call("GET", f"folders/{folder_id}"))

    async def list_folders(self, repository: ContentRepository) -> list[Folder]:
        data = await self._list(f"content-repositories/{repository.id}/folders", "folders")
        return [folder_from_json(item) for item in data]

    async def get_folder_parent(self, folder: Folder) -> Folder | None:
        if folder.parent_id:
            return await self.get_folder(folder.parent_id)
        try:
            return folder_from_json(await self._call("GET", f"folders/{folder.id}/parent"))
        except APIError as e:
            if e.status_code == HTTP_NOT_FOUND:
                return None
            raise

    async def list_subfolders(self, folder: Folder) -> list[Folder]:
        data = await self._list(f"folders/{folder.id}/folders", "folders")
        return [folder_from_json(item) for item in data]

    async def create_folder(
        self, repository: ContentRepository, name: str, parent: Folder | None
    ) -> Folder:
        if parent is None:
            path = f"content-repositories/{repository.id}/folders"
        else:
            path = f"folders/{parent.id}/folders"
        folder = folder_from_json(await self._call("POST", path, {"name": name}))
        folder.repository_id = folder.repository_id or repository.id
        return folder

    # -- Content items -----------------------------------------------------------

    async def get_content_item(self, content_id: str) -> ContentRecord:
        return ContentRecord.from_dict(
            await self._call("GET", f"content-items/{content_id}")
        )

    async def get_content_item_version(
        self, content_id: str, version: int
    ) -> ContentRecord:
        return ContentRecord.from_dict(
            await self._call("GET", f"content-items/{content_id}/versions/{version}")
        )

    async def create_content_item(
        self, repository: ContentRepository, record: ContentRecord
    ) -> ContentRecord:
        return ContentRecord.from_dict(
            await self._call(
                "POST",
                f"content-repositories/{repository.id}/content-items",
                record.to_payload(),
            )
        )

    async def update_content_item(
        self, existing: ContentRecord, record: ContentRecord
    ) -> ContentRecord:
        payload = record.to_payload()
        payload["version"] = existing.version if record.version is None else record.version
        return ContentRecord.from_dict(
            await self._call("PATCH", f"content-items/{existing.id}", payload)
        )

    async def archive_content_item(self, record: ContentRecord) -> ContentRecord:
        return ContentRecord.from_dict(
            await self._call(
                "POST", f"content-items/{record.id}/archive", {"version": record.version}
            )
        )

    async def unarchive_content_item(self, record: ContentRecord) -> ContentRecord:
        return ContentRecord.from_dict(
            await self._call(
                "POST", f"content-items/{record.id}/unarchive", {"version": record.version}
            )
        )

    async def set_locale(self, record: ContentRecord, locale: str) -> ContentRecord:
        return ContentRecord.from_dict(
            await self._call(
                "POST",
                f"content-items/{record.id}/locale",
                {"locale": locale, "version": record.version},
            )
        )

    # -- Content types -----------------------------------------------------------

    async def list_content_types(self) -> list[ContentType]:
        data = await self._list(f"hubs/{self.hub_id}/content-types", "content-types")
        return [content_type_from_json(item) for item in data]

    async def list_content_type_schemas(self) -> list[ContentTypeSchema]:
        data = await self._list(
            f"hubs/{self.hub_id}/content-type-schemas", "content-type-schemas"
        )
        return [schema_from_json(item) for item in data]

    async def register_content_type(self, schema_uri: str, label: str) -> ContentType:
        return content_type_from_json(
            await self._call(
                "POST",
                f"hubs/{self.hub_id}/content-types",
                {"contentTypeUri": schema_uri, "settings": {"label": label}},
            )
        )

    async def assign_content_type(
        self, repository: ContentRepository, content_type: ContentType
    ) -> ContentRepository:
        return repository_from_json(
            await self._call(
                "POST",
                f"content-repositories/{repository.id}/content-types/{content_type.id}",
            )
        )

    # -- Publishing --------------------------------------------------------------

    def _start_publish(self, record: ContentRecord) -> str | None:
        href = record.links.get("publish") or f"content-items/{record.id}/publish"
        response = self._send("POST", href)
        if response.status_code != HTTP_NO_CONTENT:
            raise APIError(
                f"Failed to start publish: {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )
        return response.headers.get("Location")

    async def start_publish(self, record: ContentRecord) -> str | None:
        """Start a publish and return the location of its job."""
        return await asyncio.to_thread(self._start_publish, record)

    async def get_publish_job(self, location: str) -> PublishJobState:
        data = await self._call("GET", location)
        try:
            return PublishJobState(data.get("state"))
        except ValueError as e:
            raise APIError(f"Unexpected publish job state in {data!r}") from e
