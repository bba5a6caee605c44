"""Tests for the import action log."""

from __future__ import annotations

import pytest

from content_migrator.core.action_log import ActionLog, default_action_log_path
from content_migrator.exceptions import RevertError
from content_migrator.types import ContentRecord, ImportResult


def _result(content_id, version, old_version=0):
    return ImportResult(
        record=ContentRecord(label="x", body={}, id=content_id, version=version),
        old_version=old_version,
    )


class TestActionLog:
    def test_record_import_create_and_update(self):
        log = ActionLog("Import")
        log.record_import("Home", _result("new-1", 1))
        log.record_import("About", _result("hub-2", 5, old_version=4))

        assert log.get_data("CREATE") == ["new-1"]
        assert log.get_data("UPDATE") == ["hub-2 4 5"]

    def test_to_text(self):
        log = ActionLog("Import of ./export")
        log.record_import("Home", _result("new-1", 1))

        assert log.to_text() == "\n".join(
            ["// Import of ./export", "// Created Home.", "CREATE new-1", "SUCCESS"]
        )

    def test_failed_run_ends_with_failure(self):
        log = ActionLog("Import")
        log.success = False
        assert log.to_text().endswith("\nFAILURE")

    def test_multiline_comment_becomes_several_lines(self):
        log = ActionLog("Import")
        log.add_comment("one\ntwo")
        assert log.to_text().splitlines()[1:3] == ["// one", "// two"]

    def test_parse_round_trip(self):
        log = ActionLog("Import")
        log.record_import("Home", _result("new-1", 1))
        log.record_import("About", _result("hub-2", 5, old_version=4))
        log.success = False

        parsed = ActionLog.parse(log.to_text())

        assert parsed.title == "Import"
        assert parsed.get_data("CREATE") == ["new-1"]
        assert parsed.get_data("UPDATE") == ["hub-2 4 5"]
        assert parsed.success is False

    def test_write_and_load(self, tmp_path):
        path = tmp_path / "logs" / "import.log"
        log = ActionLog("Import")
        log.record_import("Home", _result("new-1", 1))

        assert log.write(path) is True
        assert ActionLog.load(path).get_data("CREATE") == ["new-1"]

    def test_write_failure_returns_false(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")

        assert ActionLog("Import").write(blocker / "import.log") is False

    def test_load_missing_file_raises(self, tmp_path):
        with pytest.raises(RevertError):
            ActionLog.load(tmp_path / "missing.log")


def test_default_action_log_path(tmp_path):
    path = default_action_log_path(str(tmp_path))

    assert path.parent == tmp_path
    assert path.name.startswith("item-import-")
    assert path.suffix == ".log"
