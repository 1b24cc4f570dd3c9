"""Song ordering within and across the sets of a setlist."""
from setlist_engine.ordering.ordering_engine import (
    add_set,
    add_song,
    default_set_name,
    detach_song,
    insert_song,
    move_song,
    remove_set,
    remove_song,
    rename_set,
    renumbered,
    update_entry,
)

__all__ = [
    "add_set",
    "add_song",
    "default_set_name",
    "detach_song",
    "insert_song",
    "move_song",
    "remove_set",
    "remove_song",
    "rename_set",
    "renumbered",
    "update_entry",
]
