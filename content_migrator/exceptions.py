"""Custom exception hierarchy for the content hub migration tool."""

from __future__ import annotations


class MigratorError(Exception):
    """Base exception for all migration-related errors."""


class ConfigError(MigratorError):
    """Raised when configuration is invalid or missing."""


class ExportError(MigratorError):
    """Raised when the exported content directory is invalid or unreadable."""


class APIError(MigratorError):
    """Raised when a hub API call fails in an unrecoverable way."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PublishError(MigratorError):
    """Raised when a publish job cannot be started."""


class MigrationAbortedError(MigratorError):
    """Raised when the migration is aborted before any content is written."""


class RevertError(MigratorError):
    """Raised when an import cannot be reverted from its action log."""


class ImportFailedError(MigratorError):
    """Raised when writing a content item to the hub fails."""
