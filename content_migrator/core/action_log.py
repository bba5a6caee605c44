"""Plain-text log of the changes an import made, used to revert it later.

Format, one entry per line::

    // <title>
    // <comment>
    CREATE <new id>
    UPDATE <new id> <old version> <new version>
    SUCCESS

The first comment is the title and the last line is the run result.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from content_migrator.constants import (
    ACTION_CREATE,
    ACTION_UPDATE,
    DEFAULT_LOG_DIR,
    RESULT_FAILURE,
    RESULT_SUCCESS,
)
from content_migrator.exceptions import RevertError
from content_migrator.types import ImportResult
from content_migrator.utils.logging import log_with_context


@dataclass
class LogEntry:
    data: str
    action: str | None = None

    @property
    def is_comment(self) -> bool:
        return self.action is None


class ActionLog:
    """Ordered comments and actions, with an overall result."""

    def __init__(self, title: str | None = None) -> None:
        self.title = title
        self.entries: list[LogEntry] = []
        self.success = True

    def add_comment(self, comment: str) -> None:
        for line in comment.split("\n"):
            self.entries.append(LogEntry(data=line))

    def add_action(self, action: str, data: str) -> None:
        self.entries.append(LogEntry(data=data, action=action))

    def record_import(self, label: str, result: ImportResult) -> None:
        """Log the create or update of one content item."""
        new_id = result.record.id or "unknown"
        if result.updated:
            self.add_comment(f"Updated {label}.")
            self.add_action(
                ACTION_UPDATE, f"{new_id} {result.old_version} {result.record.version}"
            )
        else:
            self.add_comment(f"Created {label}.")
            self.add_action(ACTION_CREATE, new_id)

    def get_data(self, action: str) -> list[str]:
        """Data of every entry recorded with ``action``, in order."""
        return [entry.data for entry in self.entries if entry.action == action]

    def to_text(self) -> str:
        lines = [f"// {self.title or ''}"]
        for entry in self.entries:
            if entry.is_comment:
                lines.append(f"// {entry.data}")
            else:
                lines.append(f"{entry.action} {entry.data}")
        lines.append(RESULT_SUCCESS if self.success else RESULT_FAILURE)
        return "\n".join(lines)

    def write(self, path: Path) -> bool:
        """Write the log, creating parent directories. Returns False on failure."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.to_text(), encoding="utf-8")
        except OSError as e:
            log_with_context(logging.ERROR, f"Could not write action log {path}: {e}")
            return False
        log_with_context(logging.INFO, f"Action log written to {path}")
        return True

    @classmethod
    def parse(cls, text: str) -> ActionLog:
        log = cls()
        lines = text.split("\n")
        for index, line in enumerate(lines):
            if line.startswith("//"):
                message = line[2:].lstrip()
                if log.title is None:
                    log.title = message
                else:
                    log.add_comment(message)
                continue

            if index == len(lines) - 1:
                log.success = line.strip() != RESULT_FAILURE
                continue

            action, _, data = line.partition(" ")
            if action and data:
                log.add_action(action, data)
        return log

    @classmethod
    def load(cls, path: Path) -> ActionLog:
        """Read a log written by ``write``.

        Raises:
            RevertError: If the file cannot be read.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise RevertError(f"Could not open the import log {path}: {e}") from e
        return cls.parse(text)


def default_action_log_path(log_dir: str = DEFAULT_LOG_DIR) -> Path:
    """Timestamped log path, e.g. ``~/.content-migrator/logs/item-import-<ms>.log``."""
    timestamp = int(time.time() * 1000)
    return Path(log_dir).expanduser() / f"item-import-{timestamp}.log"
