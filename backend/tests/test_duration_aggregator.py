"""Unit tests for set and setlist duration aggregation."""
import pytest

from models.setlist import PerformanceSet, SetSongEntry, Setlist
from models.song import Song
from setlist_engine.duration import apply_durations, compute_durations, format_clock


def make_set(name: str, durations) -> PerformanceSet:
    """Create a set whose entries have the given durations."""
    return PerformanceSet(
        name=name,
        songs=[
            SetSongEntry(song_id=f"{name}-song-{i}", order=i + 1, duration=duration)
            for i, duration in enumerate(durations)
        ]
    )


def test_compute_durations_sums_per_set_and_total():
    """Test that totals are the sums of entry durations."""
    sets = [make_set("a", [180, 200]), make_set("b", [150])]

    total, per_set = compute_durations(sets)

    assert per_set == [380, 150]
    assert total == 530


def test_compute_durations_treats_missing_durations_as_zero():
    """Test that None durations count as 0."""
    sets = [make_set("a", [None, 120])]

    total, per_set = compute_durations(sets)

    assert per_set == [120]
    assert total == 120


def test_compute_durations_empty():
    """Test empty setlists and empty sets."""
    assert compute_durations([]) == (0, [])
    assert compute_durations([PerformanceSet(name="empty")]) == (0, [0])


def test_apply_durations_writes_derived_fields_and_is_idempotent():
    """Test that applying twice yields the same totals."""
    setlist = Setlist(title="Gig", created_by="alice", sets=[make_set("a", [60, 90]), make_set("b", [30])])

    apply_durations(setlist)
    first = (setlist.total_duration, [s.duration for s in setlist.sets])
    apply_durations(setlist)
    second = (setlist.total_duration, [s.duration for s in setlist.sets])

    assert first == second == (180, [150, 30])


def test_apply_durations_overwrites_stale_values():
    """Test that stored totals never survive a recompute."""
    setlist = Setlist(title="Gig", created_by="alice", total_duration=9999, sets=[make_set("a", [10])])
    setlist.sets[0].duration = 777

    apply_durations(setlist)

    assert setlist.sets[0].duration == 10
    assert setlist.total_duration == 10


@pytest.mark.parametrize("seconds,with_hours,expected", [
    (0, True, "00:00:00"),
    (None, True, "00:00:00"),
    (530, True, "00:08:50"),
    (3725, True, "01:02:05"),
    (200, False, "03:20"),
    (0, False, "00:00"),
])
def test_format_clock(seconds, with_hours, expected):
    """Test clock formatting of durations."""
    assert format_clock(seconds, with_hours=with_hours) == expected


def test_setlist_exposes_formatted_total_duration():
    """Test the computed field on the read model."""
    setlist = Setlist(title="Gig", created_by="alice", sets=[make_set("a", [3600, 61])])
    apply_durations(setlist)

    data = setlist.model_dump(by_alias=True)

    assert data["totalDuration"] == 3661
    assert data["formattedTotalDuration"] == "01:01:01"


def test_song_exposes_formatted_duration():
    song = Song(title="Alpha", duration=200, created_by="alice")

    assert song.model_dump(by_alias=True)["formattedDuration"] == "03:20"
