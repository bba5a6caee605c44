"""Tests for the immutable migration context."""

import dataclasses

import pytest

from tests.unit.conftest import make_context


class TestMigrationContext:
    def test_is_frozen(self, tmp_path):
        context = make_context(tmp_path, tmp_path)
        with pytest.raises(dataclasses.FrozenInstanceError):
            context.dry_run = True

    def test_import_title_prefers_base_folder(self, tmp_path):
        context = make_context(tmp_path, tmp_path, base_repo="r1", base_folder="f1")
        assert context.import_title == "folder-f1"

    def test_import_title_for_repository(self, tmp_path):
        assert make_context(tmp_path, tmp_path, base_repo="r1").import_title == "repo-r1"

    def test_import_title_for_hub(self, tmp_path):
        assert make_context(tmp_path, tmp_path, base_repo=None).import_title == "hub-hub-1"

    def test_log_prefix(self, tmp_path):
        assert make_context(tmp_path, tmp_path).log_prefix == ""
        assert make_context(tmp_path, tmp_path, dry_run=True).log_prefix == "[DRY RUN] "
        assert (
            make_context(tmp_path, tmp_path, validate_only=True).log_prefix
            == "[VALIDATE] "
        )

    def test_config_overrides_are_carried(self, tmp_path):
        context = make_context(tmp_path, tmp_path, publish=True)
        assert context.config.should_publish is True
