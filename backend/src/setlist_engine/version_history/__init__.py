"""Append-only version history for setlists."""
from setlist_engine.version_history.tracker import (
    CHANGE_TEMPLATES,
    CREATED_DESCRIPTION,
    commit,
    describe_change,
    start_history,
)

__all__ = [
    "CHANGE_TEMPLATES",
    "CREATED_DESCRIPTION",
    "commit",
    "describe_change",
    "start_history",
]
