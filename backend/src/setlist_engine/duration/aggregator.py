"""Duration aggregation for setlists.

Set and setlist durations are derived values. `compute_durations` is the pure
calculation; `apply_durations` writes its result into a setlist and is the
terminal structural step of every mutation.
"""
from typing import TYPE_CHECKING, List, Sequence, Tuple

if TYPE_CHECKING:
    from models.setlist import PerformanceSet, Setlist


def compute_durations(sets: Sequence["PerformanceSet"]) -> Tuple[int, List[int]]:
    """
    Compute per-set and total durations from song durations.

    Args:
        sets: Sets in performance order

    Returns:
        Tuple of (setlist total seconds, list of per-set seconds)
    """
    per_set = [sum(entry.duration or 0 for entry in performance_set.songs) for performance_set in sets]
    return sum(per_set), per_set


def apply_durations(setlist: "Setlist") -> "Setlist":
    """
    Recompute and store derived durations on a setlist (in place).

    Args:
        setlist: Setlist whose sets or entries changed

    Returns:
        The same setlist, for chaining
    """
    total, per_set = compute_durations(setlist.sets)
    for performance_set, duration in zip(setlist.sets, per_set):
        performance_set.duration = duration
    setlist.total_duration = total
    return setlist


def format_clock(seconds: float, with_hours: bool = True) -> str:
    """
    Format a duration as HH:MM:SS (or MM:SS when with_hours is False).

    Args:
        seconds: Duration in seconds; falsy values format as zero
        with_hours: Whether to include the hours field

    Returns:
        Zero-padded clock string
    """
    total = int(seconds or 0)
    if with_hours:
        hours, remainder = divmod(total, 3600)
        minutes, secs = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"
