"""Tests for the shared status vocabulary."""
import pytest
from pydantic import ValidationError

from app.models.status import Status, is_completed, normalize_status, status_spellings
from app.models.subgoal import StatusUpdate
from app.models.task import TaskCommentCreate, TaskUpdate


class TestNormalizeStatus:
    """Tests for canonical status mapping."""

    def test_on_track_maps_to_in_progress(self):
        assert normalize_status("on_track") == "in_progress"

    def test_canonical_values_unchanged(self):
        for status in Status:
            assert normalize_status(status.value) == status.value
            assert normalize_status(status) == status.value

    def test_unknown_value_passes_through(self):
        assert normalize_status("archived") == "archived"

    def test_none(self):
        assert normalize_status(None) is None

    def test_whitespace_and_case(self):
        assert normalize_status("  On_Track ") == "in_progress"


class TestStatusSpellings:
    """Tests for filter spellings."""

    def test_in_progress_covers_both(self):
        assert set(status_spellings("in_progress")) == {"in_progress", "on_track"}
        assert set(status_spellings("on_track")) == {"in_progress", "on_track"}

    def test_single_spelling(self):
        assert status_spellings("completed") == ["completed"]

    def test_none(self):
        assert status_spellings(None) == []


def test_is_completed():
    assert is_completed("completed")
    assert is_completed(Status.COMPLETED)
    assert not is_completed("in_progress")
    assert not is_completed(None)


class TestStatusValidation:
    """Tests for status validation on write models."""

    def test_keeps_spelling_as_sent(self):
        assert StatusUpdate(status="on_track").status == "on_track"
        assert StatusUpdate(status="In_Progress").status == "in_progress"

    def test_rejects_unknown(self):
        with pytest.raises(ValidationError):
            StatusUpdate(status="archived")

    def test_blocked_only_for_tasks(self):
        with pytest.raises(ValidationError):
            StatusUpdate(status="blocked")
        assert TaskUpdate(status="blocked").status == "blocked"

    def test_comment_requires_text(self):
        with pytest.raises(ValidationError):
            TaskCommentCreate(status="completed", comment="")
