"""Derived duration values for sets and setlists."""
from setlist_engine.duration.aggregator import apply_durations, compute_durations, format_clock

__all__ = [
    "apply_durations",
    "compute_durations",
    "format_clock",
]
