"""Unit tests for the setlist version history tracker."""
import pytest
from pydantic import ValidationError

from config import FALLBACK_CHANGE_DESCRIPTION
from models.setlist import Setlist
from setlist_engine.version_history import CREATED_DESCRIPTION, commit, describe_change, start_history


@pytest.fixture
def new_setlist() -> Setlist:
    setlist = Setlist(title="Saturday", created_by="alice")
    start_history(setlist, "alice")
    return setlist


def test_start_history_records_version_one(new_setlist):
    """A new setlist is at version 1 with one matching record."""
    assert new_setlist.version == 1
    assert len(new_setlist.version_history) == 1
    record = new_setlist.version_history[0]
    assert record.version == 1
    assert record.changed_by == "alice"
    assert record.changes == CREATED_DESCRIPTION


def test_start_history_refuses_existing_history(new_setlist):
    with pytest.raises(ValueError, match="already has a version history"):
        start_history(new_setlist, "alice")


def test_commit_increments_by_one(new_setlist):
    """Each commit adds exactly one and the version matches the last record."""
    for i in range(5):
        record = commit(new_setlist, "bob", f"change {i}")
        assert record.version == new_setlist.version
        assert new_setlist.version_history[-1] is record

    versions = [r.version for r in new_setlist.version_history]
    assert versions == [1, 2, 3, 4, 5, 6]
    assert new_setlist.version == 6


def test_commit_updates_timestamp(new_setlist):
    record = commit(new_setlist, "bob", "Renamed")
    assert new_setlist.updated_at == record.timestamp


def test_commit_without_description_uses_fallback(new_setlist):
    record = commit(new_setlist, "bob", "")
    assert record.changes == FALLBACK_CHANGE_DESCRIPTION


def test_version_records_are_immutable(new_setlist):
    record = new_setlist.version_history[0]
    with pytest.raises(ValidationError):
        record.version = 42


def test_describe_change_fills_template():
    description = describe_change(
        "move_song",
        {"song_title": "Wonderwall", "from_set_name": "Set 1", "to_set_name": "Encore", "to_position": 1},
    )
    assert description == "Moved 'Wonderwall' from 'Set 1' to position 1 of 'Encore'"


@pytest.mark.parametrize("kind,details", [
    ("add_song", {"song_title": "Only a title"}),  # missing set_name
    ("unknown_kind", {"anything": 1}),
    ("add_song", None),
])
def test_describe_change_falls_back(kind, details):
    """Unknown kinds or incomplete details never fail, they fall back."""
    assert describe_change(kind, details) == FALLBACK_CHANGE_DESCRIPTION
