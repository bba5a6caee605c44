"""JSON-schema validation of content bodies against the hub's schemas."""

from __future__ import annotations

from typing import Any

from jsonschema import Draft7Validator
from jsonschema.validators import validator_for
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT7

from content_migrator.services.protocols import HubService
from content_migrator.types import ContentTypeSchema


class SchemaValidator:
    """Validates bodies with the schema named in their ``_meta.schema``.

    Schemas are fetched from the hub on first use unless a catalog is
    passed in. Every hub schema is registered under its schema id so
    references between schemas resolve without network access.
    """

    def __init__(
        self, hub: HubService, schemas: list[ContentTypeSchema] | None = None
    ) -> None:
        self._hub = hub
        self._schemas: dict[str, dict[str, Any]] | None = None
        self._registry: Registry | None = None
        if schemas is not None:
            self._index(schemas)

    def _index(self, schemas: list[ContentTypeSchema]) -> None:
        self._schemas = {s.schema_id: s.body for s in schemas if s.body}
        self._registry = Registry().with_resources(
            (
                schema_id,
                Resource.from_contents(body, default_specification=DRAFT7),
            )
            for schema_id, body in self._schemas.items()
        )

    async def validate(self, body: dict[str, Any]) -> list[str]:
        """Return the validation error messages for ``body``.

        Raises:
            LookupError: If the body names no schema, or one the hub lacks.
        """
        if self._schemas is None:
            self._index(await self._hub.list_content_type_schemas())
        schemas = self._schemas or {}

        meta = body.get("_meta")
        schema_id = meta.get("schema") if isinstance(meta, dict) else None
        schema = schemas.get(schema_id) if isinstance(schema_id, str) else None
        if schema is None:
            raise LookupError(f"No schema available for {schema_id!r}")

        validator_cls = validator_for(schema, default=Draft7Validator)
        validator = validator_cls(schema, registry=self._registry)
        errors = sorted(
            validator.iter_errors(body),
            key=lambda e: [str(part) for part in e.absolute_path],
        )
        return [f"{_error_path(error.absolute_path)}: {error.message}" for error in errors]


def _error_path(path: Any) -> str:
    return "/".join(str(part) for part in path) or "<root>"
