"""Tests for tri-state partial update parsing."""

from orchestrate.schemas.task import TaskUpdate
from orchestrate.services.updates import CLEARED, UNCHANGED, ChangeKind, changes_from, set_to


class TestChangesFrom:
    def test_absent_fields_are_unchanged(self):
        changes = changes_from(TaskUpdate(title="New"))
        assert changes["title"] == set_to("New")
        assert changes["description"] is UNCHANGED
        assert changes["assigned_to_id"] is UNCHANGED

    def test_explicit_null_is_cleared(self):
        changes = changes_from(TaskUpdate(assigned_to_id=None))
        assert changes["assigned_to_id"] is CLEARED

    def test_empty_string_is_cleared(self):
        changes = changes_from(TaskUpdate.model_validate({"assigned_to_id": "", "description": "  "}))
        assert changes["assigned_to_id"].kind is ChangeKind.CLEARED
        assert changes["description"].kind is ChangeKind.CLEARED

    def test_zero_is_a_value_not_a_clear(self):
        changes = changes_from(TaskUpdate(actual_hours=0))
        assert changes["actual_hours"].kind is ChangeKind.SET
        assert changes["actual_hours"].value == 0


class TestResolve:
    def test_unchanged_keeps_current(self):
        assert UNCHANGED.resolve("old") == "old"

    def test_set_replaces_current(self):
        assert set_to(5).resolve(2) == 5

    def test_cleared_nullable_becomes_none(self):
        assert CLEARED.resolve(7) is None

    def test_cleared_required_keeps_current(self):
        assert CLEARED.resolve("Title", nullable=False) == "Title"
