"""Tests for the mutable migration state."""

from content_migrator.core.state import MigrationState
from content_migrator.types import ContentRecord


class TestMigrationState:
    def test_fresh_summary_is_zeroed(self):
        state = MigrationState()
        assert set(state.summary.values()) == {0}

    def test_count(self):
        state = MigrationState()
        state.count("items_created")
        state.count("items_created", 2)
        assert state.summary["items_created"] == 3

    def test_record_removed_uses_id_or_label(self):
        state = MigrationState()
        state.record_removed(ContentRecord(label="A", body={}, id="a"), "missing schema")
        state.record_removed(ContentRecord(label="B", body={}), "missing dependency")

        assert state.errors.removed_items == [
            ("a", "missing schema"),
            ("B", "missing dependency"),
        ]
        assert state.summary["items_skipped"] == 2

    def test_has_errors(self):
        state = MigrationState()
        assert not state.has_errors
        state.errors.migration_errors.append("boom")
        assert state.has_errors

    def test_reset_for_run(self):
        state = MigrationState()
        state.count("items_loaded", 5)
        state.errors.migration_errors.append("boom")
        state.publish.publishable.append(ContentRecord(label="A", body={}))

        state.reset_for_run()

        assert state.summary["items_loaded"] == 0
        assert not state.has_errors
        assert state.publish.publishable == []

    def test_sub_states_are_not_shared(self):
        first, second = MigrationState(), MigrationState()
        first.count("items_loaded")
        assert second.summary["items_loaded"] == 0
