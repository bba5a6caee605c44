"""Immutable migration context.

MigrationContext is a frozen dataclass that holds the paths, mode flags and
configuration for a migration run. It is created once by the CLI and shared
(read-only) with the orchestrator and the services it drives.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from content_migrator.core.config import MigrationConfig


@dataclass(frozen=True)
class MigrationContext:
    """Immutable context for a migration run. Created once, shared everywhere."""

    # Paths
    import_dir: Path
    mapping_path: Path | None
    action_log_path: Path | None

    # Destination
    hub_id: str
    base_repo: str | None
    base_folder: str | None

    # Mode flags
    dry_run: bool
    validate_only: bool
    verbose: bool
    debug_api: bool

    # Loaded configuration (CLI overrides already applied)
    config: MigrationConfig

    @property
    def import_title(self) -> str:
        """Name of the default mapping file for this destination."""
        if self.base_folder:
            return f"folder-{self.base_folder}"
        if self.base_repo:
            return f"repo-{self.base_repo}"
        return f"hub-{self.hub_id}"

    @property
    def log_prefix(self) -> str:
        """Mode-aware log prefix, e.g. ``"[DRY RUN] "``."""
        if self.dry_run:
            return "[DRY RUN] "
        if self.validate_only:
            return "[VALIDATE] "
        return ""
