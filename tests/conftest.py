"""Shared test fixtures for the content_migrator test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from content_migrator.constants import CONTENT_LINK_SCHEMA, CONTENT_REFERENCE_SCHEMA

ARTICLE_SCHEMA = "https://example.com/schemas/article.json"


def content_link(content_id: str, schema: str = ARTICLE_SCHEMA) -> dict[str, Any]:
    """A content-link object pointing at ``content_id``."""
    return {
        "_meta": {"schema": CONTENT_LINK_SCHEMA},
        "contentType": schema,
        "id": content_id,
    }


def content_reference(content_id: str, schema: str = ARTICLE_SCHEMA) -> dict[str, Any]:
    """A content-reference object pointing at ``content_id``."""
    return {
        "_meta": {"schema": CONTENT_REFERENCE_SCHEMA},
        "contentType": schema,
        "id": content_id,
    }


def exported_item(
    content_id: str,
    label: str | None = None,
    schema: str = ARTICLE_SCHEMA,
    published: bool = False,
    **fields: Any,
) -> dict[str, Any]:
    """An exported content item; extra keyword arguments become body fields."""
    body: dict[str, Any] = {"_meta": {"name": label or content_id, "schema": schema}}
    body.update(fields)
    item: dict[str, Any] = {
        "id": content_id,
        "label": label or content_id.upper(),
        "body": body,
        "version": 3,
        "status": "ACTIVE",
    }
    if published:
        item["lastPublishedVersion"] = 3
    return item


def write_export(base: Path, files: dict[str, Any]) -> Path:
    """Write ``{relative path: JSON value}`` under ``base`` and return ``base``."""
    for rel, data in files.items():
        path = base / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
    return base


@pytest.fixture()
def export_dir(tmp_path):
    """An empty export directory."""
    path = tmp_path / "export"
    path.mkdir()
    return path


@pytest.fixture()
def chain_export(export_dir):
    """Three items where a links to b and b links to c."""
    return write_export(
        export_dir,
        {
            "a.json": exported_item("a", link=content_link("b")),
            "b.json": exported_item("b", link=content_link("c")),
            "c.json": exported_item("c"),
        },
    )
