"""
Migration state container for a content hub migration.

Mutable tracking state for a migration run, separated from immutable
configuration (MigrationContext) for clear ownership boundaries.

State is organized into typed sub-state dataclasses by concern area.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from content_migrator.types import ContentRecord, MigrationSummary, PublishJob


def _default_migration_summary() -> MigrationSummary:
    """Return a fresh MigrationSummary with zeroed counters."""
    return MigrationSummary(
        items_loaded=0,
        items_created=0,
        items_updated=0,
        items_skipped=0,
        folders_created=0,
        publishes_started=0,
    )


# ---------------------------------------------------------------------------
# Sub-state dataclasses
# ---------------------------------------------------------------------------


@dataclass
class ProgressState:
    """Migration progress and statistics."""

    migration_summary: MigrationSummary = field(
        default_factory=_default_migration_summary
    )
    levels_completed: int = 0
    circular_items: int = 0


@dataclass
class PublishState:
    """Records waiting to be published and the outcome of their jobs."""

    publishable: list[ContentRecord] = field(default_factory=list)
    completed_jobs: list[PublishJob] = field(default_factory=list)
    failed_jobs: list[PublishJob] = field(default_factory=list)


@dataclass
class ErrorState:
    """Error and issue tracking."""

    migration_errors: list[str] = field(default_factory=list)
    removed_items: list[tuple[str, str]] = field(default_factory=list)
    folder_failures: list[str] = field(default_factory=list)
    unmatched_directories: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Composed MigrationState
# ---------------------------------------------------------------------------


@dataclass
class MigrationState:
    """Holds all mutable tracking state for a migration run.

    Composed of typed sub-state dataclasses:
    - ``progress``: Counters and level progress
    - ``publish``: Publish-eligible records and job outcomes
    - ``errors``: Error and issue tracking
    """

    progress: ProgressState = field(default_factory=ProgressState)
    publish: PublishState = field(default_factory=PublishState)
    errors: ErrorState = field(default_factory=ErrorState)

    def reset_for_run(self) -> None:
        """Reset per-run state at the start of a new migration run."""
        self.progress = ProgressState()
        self.publish = PublishState()
        self.errors = ErrorState()

    def count(self, key: str, amount: int = 1) -> None:
        """Increment one of the migration summary counters."""
        self.progress.migration_summary[key] += amount  # type: ignore[literal-required]

    def record_removed(self, record: ContentRecord, reason: str) -> None:
        self.errors.removed_items.append((record.id or record.label, reason))
        self.count("items_skipped")

    @property
    def has_errors(self) -> bool:
        """Return True if any migration errors were recorded."""
        return bool(self.errors.migration_errors)

    @property
    def summary(self) -> MigrationSummary:
        return self.progress.migration_summary
