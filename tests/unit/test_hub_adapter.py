"""Tests for the REST hub adapter, with a mocked requests session."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from content_migrator.constants import DEFAULT_API_URL, DEFAULT_AUTH_URL
from content_migrator.exceptions import APIError, ConfigError
from content_migrator.services.hub_adapter import (
    HubAdapter,
    content_type_from_json,
    folder_from_json,
    repository_from_json,
    schema_from_json,
)
from content_migrator.types import ContentRecord, Folder, PublishJobState

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _response(status=200, data=None, headers=None):
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.text = json.dumps(data) if data is not None else ""
    response.content = response.text.encode()
    response.json.return_value = data
    response.headers = headers or {}
    return response


def _adapter(*responses, **kwargs):
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = list(responses)
    kwargs.setdefault("pat_token", "secret-token")
    adapter = HubAdapter("hub-1", session=session, retry_config={"max_retries": 0}, **kwargs)
    return adapter, session


def _request(session, index=0):
    """``(method, url, json payload)`` of the n-th request."""
    args, kwargs = session.request.call_args_list[index]
    return args[0], args[1], kwargs.get("json")


# ---------------------------------------------------------------------------
# JSON conversion
# ---------------------------------------------------------------------------


class TestFromJson:
    def test_repository(self):
        repository = repository_from_json(
            {
                "id": "r1",
                "label": "Content",
                "contentTypes": [{"hubContentTypeId": "t1"}, {"other": "x"}],
            }
        )
        assert repository.id == "r1"
        assert repository.label == "Content"
        assert repository.content_type_ids == ["t1"]

    def test_folder_repository_from_link(self):
        folder = folder_from_json(
            {
                "id": "f1",
                "name": "news",
                "_links": {
                    "content-repository": {
                        "href": "https://api.example.com/content-repositories/r1{?projection}"
                    }
                },
            }
        )
        assert folder.repository_id == "r1"

    def test_content_type_label_from_settings(self):
        content_type = content_type_from_json(
            {"id": "t1", "contentTypeUri": "https://x/a.json", "settings": {"label": "A"}}
        )
        assert content_type.label == "A"

    def test_schema_body_string_is_parsed(self):
        schema = schema_from_json({"id": "s1", "schemaId": "https://x/a.json", "body": '{"type": "object"}'})
        assert schema.body == {"type": "object"}

    def test_schema_body_invalid_string_is_empty(self):
        schema = schema_from_json({"id": "s1", "schemaId": "https://x/a.json", "body": "{"})
        assert schema.body == {}


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class TestAuthentication:
    def test_requires_credentials(self):
        with pytest.raises(ConfigError):
            HubAdapter("hub-1", session=MagicMock())

    def test_personal_access_token_is_sent(self):
        adapter, session = _adapter(_response(data={"id": "r1", "label": "Content"}))

        asyncio.run(adapter.get_repository("r1"))

        headers = session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer secret-token"

    def test_client_credentials_token_is_cached(self):
        adapter, session = _adapter(
            _response(data={"id": "r1", "label": "Content"}),
            _response(data={"id": "r1", "label": "Content"}),
            pat_token=None,
            client_id="cid",
            client_secret="csecret",
        )
        session.post.return_value = _response(
            data={"access_token": "oauth-token", "expires_in": 3600}
        )

        asyncio.run(adapter.get_repository("r1"))
        asyncio.run(adapter.get_repository("r1"))

        session.post.assert_called_once()
        assert session.post.call_args.args[0] == DEFAULT_AUTH_URL
        headers = session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer oauth-token"

    def test_failed_authentication_raises(self):
        adapter, session = _adapter(pat_token=None, client_id="cid", client_secret="bad")
        session.post.return_value = _response(status=401, data={"error": "invalid_client"})

        with pytest.raises(APIError) as excinfo:
            asyncio.run(adapter.get_repository("r1"))
        assert excinfo.value.status_code == 401


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TestRequests:
    def test_get_repository_url(self):
        adapter, session = _adapter(_response(data={"id": "r1", "label": "Content"}))

        asyncio.run(adapter.get_repository("r1"))

        assert _request(session) == ("GET", f"{DEFAULT_API_URL}/content-repositories/r1", None)

    def test_list_repositories_follows_pages(self):
        adapter, session = _adapter(
            _response(
                data={
                    "_embedded": {"content-repositories": [{"id": "r1", "label": "One"}]},
                    "page": {"totalPages": 2},
                }
            ),
            _response(
                data={
                    "_embedded": {"content-repositories": [{"id": "r2", "label": "Two"}]},
                    "page": {"totalPages": 2},
                }
            ),
        )

        repositories = asyncio.run(adapter.list_repositories())

        assert [r.id for r in repositories] == ["r1", "r2"]
        assert "page=1" in _request(session, 1)[1]

    def test_empty_collection(self):
        adapter, _ = _adapter(_response(data={"page": {"totalPages": 0}}))

        assert asyncio.run(adapter.list_content_types()) == []

    def test_folder_without_parent(self):
        adapter, _ = _adapter(_response(status=404, data={"errors": []}))

        parent = asyncio.run(adapter.get_folder_parent(Folder("f1", "news")))

        assert parent is None

    def test_folder_parent_from_parent_id(self):
        adapter, session = _adapter(_response(data={"id": "f0", "name": "root"}))

        parent = asyncio.run(adapter.get_folder_parent(Folder("f1", "news", parent_id="f0")))

        assert parent.id == "f0"
        assert _request(session)[1].endswith("/folders/f0")

    def test_folder_parent_error_propagates(self):
        adapter, _ = _adapter(_response(status=403, data={"errors": []}))

        with pytest.raises(APIError):
            asyncio.run(adapter.get_folder_parent(Folder("f1", "news")))

    def test_create_folder_in_repository_root(self):
        adapter, session = _adapter(_response(data={"id": "f1", "name": "news"}))
        repository = repository_from_json({"id": "r1", "label": "Content"})

        folder = asyncio.run(adapter.create_folder(repository, "news", None))

        method, url, payload = _request(session)
        assert (method, payload) == ("POST", {"name": "news"})
        assert url.endswith("/content-repositories/r1/folders")
        assert folder.repository_id == "r1"

    def test_create_content_item_sends_payload(self):
        adapter, session = _adapter(
            _response(data={"id": "new-1", "label": "A", "body": {"x": 1}, "version": 1})
        )
        repository = repository_from_json({"id": "r1", "label": "Content"})
        record = ContentRecord(label="A", body={"x": 1}, folder_id="f1", locale="en-GB")

        created = asyncio.run(adapter.create_content_item(repository, record))

        _, url, payload = _request(session)
        assert url.endswith("/content-repositories/r1/content-items")
        assert payload == {"label": "A", "body": {"x": 1}, "folderId": "f1", "locale": "en-GB"}
        assert created.id == "new-1"

    def test_update_content_item_uses_existing_version(self):
        adapter, session = _adapter(_response(data={"id": "hub-a", "label": "A", "version": 5}))
        existing = ContentRecord(label="A", body={}, id="hub-a", version=4)

        asyncio.run(adapter.update_content_item(existing, ContentRecord(label="A", body={})))

        method, url, payload = _request(session)
        assert method == "PATCH"
        assert url.endswith("/content-items/hub-a")
        assert payload["version"] == 4

    def test_register_content_type(self):
        adapter, session = _adapter(
            _response(data={"id": "t1", "contentTypeUri": "https://x/a.json"})
        )

        asyncio.run(adapter.register_content_type("https://x/a.json", "a.json"))

        _, url, payload = _request(session)
        assert url.endswith("/hubs/hub-1/content-types")
        assert payload == {"contentTypeUri": "https://x/a.json", "settings": {"label": "a.json"}}

    def test_client_error_raises_api_error(self):
        adapter, _ = _adapter(_response(status=400, data={"errors": ["bad"]}))

        with pytest.raises(APIError) as excinfo:
            asyncio.run(adapter.get_content_item("x"))
        assert excinfo.value.status_code == 400

    def test_server_error_is_retried(self):
        session = MagicMock(spec=requests.Session)
        session.request.side_effect = [
            _response(status=503),
            _response(data={"id": "x", "label": "X"}),
        ]
        adapter = HubAdapter(
            "hub-1",
            pat_token="t",
            session=session,
            retry_config={"max_retries": 2, "retry_delay": 0},
        )

        with patch("content_migrator.utils.api.time.sleep"):
            record = asyncio.run(adapter.get_content_item("x"))

        assert record.id == "x"
        assert session.request.call_count == 2


# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------


class TestPublishing:
    def test_start_publish_returns_job_location(self):
        adapter, session = _adapter(
            _response(status=204, headers={"Location": "https://api/publishing-jobs/j1"})
        )
        record = ContentRecord(
            label="A", body={}, id="hub-a", links={"publish": "https://api/content-items/hub-a/publish"}
        )

        location = asyncio.run(adapter.start_publish(record))

        assert location == "https://api/publishing-jobs/j1"
        assert _request(session)[:2] == ("POST", "https://api/content-items/hub-a/publish")

    def test_start_publish_without_link_uses_item_path(self):
        adapter, session = _adapter(_response(status=204, headers={"Location": "loc"}))

        asyncio.run(adapter.start_publish(ContentRecord(label="A", body={}, id="hub-a")))

        assert _request(session)[1].endswith("/content-items/hub-a/publish")

    def test_start_publish_unexpected_status(self):
        adapter, _ = _adapter(_response(status=200, data={}))

        with pytest.raises(APIError):
            asyncio.run(adapter.start_publish(ContentRecord(label="A", body={}, id="a")))

    def test_get_publish_job_state(self):
        adapter, _ = _adapter(_response(data={"state": "COMPLETED"}))

        state = asyncio.run(adapter.get_publish_job("https://api/publishing-jobs/j1"))

        assert state is PublishJobState.COMPLETED

    def test_unknown_publish_state_raises(self):
        adapter, _ = _adapter(_response(data={"state": "EXPLODED"}))

        with pytest.raises(APIError, match="Unexpected publish job state"):
            asyncio.run(adapter.get_publish_job("loc"))
