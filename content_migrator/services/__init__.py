"""Service integrations for the remote content hub and schema validation."""

__all__ = [
    "dry_run_service",
    "hub_adapter",
    "protocols",
    "schema_validator",
]
