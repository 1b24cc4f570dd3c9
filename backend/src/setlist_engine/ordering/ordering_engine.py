"""Ordering engine for sets and their song entries.

Song `order` is always recomputed from list position, so after every add,
move or remove the entries of each touched set carry the contiguous orders
1..N. Moves are expressed as two pure steps over the song lists:
detach (remove + renumber the remainder) and insert (clamp + renumber).

All public functions mutate the setlist passed in; the mutation service hands
them a private copy of the stored document.
"""
from typing import List, Optional, Tuple

from config import DEFAULT_SET_NAME
from models.setlist import PerformanceSet, SetSongEntry, Setlist
from setlist_engine.errors import InvalidReference


def default_set_name(set_index: int) -> str:
    """Positional label for a set, e.g. "Set 1" for index 0."""
    return DEFAULT_SET_NAME.format(number=set_index + 1)


def renumbered(songs: List[SetSongEntry]) -> List[SetSongEntry]:
    """Return copies of `songs` with order set to their 1-based position."""
    return [entry.model_copy(update={"order": position}) for position, entry in enumerate(songs, start=1)]


def detach_song(songs: List[SetSongEntry], song_index: int) -> Tuple[SetSongEntry, List[SetSongEntry]]:
    """
    Remove one entry from a song list.

    Args:
        songs: Song entries of a set
        song_index: Position of the entry to remove (must be in range)

    Returns:
        Tuple of (detached entry, renumbered remaining entries)
    """
    detached = songs[song_index]
    remaining = songs[:song_index] + songs[song_index + 1:]
    return detached, renumbered(remaining)


def insert_song(songs: List[SetSongEntry], entry: SetSongEntry, position: int) -> List[SetSongEntry]:
    """
    Insert an entry into a song list.

    Args:
        songs: Song entries of the destination set
        entry: Entry to insert
        position: Target position, clamped to [0, len(songs)]

    Returns:
        New renumbered song list
    """
    position = max(0, min(position, len(songs)))
    return renumbered(songs[:position] + [entry] + songs[position:])


def _require_set(setlist: Setlist, set_index: int) -> PerformanceSet:
    if not 0 <= set_index < len(setlist.sets):
        raise InvalidReference(f"Invalid set index {set_index} (setlist has {len(setlist.sets)} sets)")
    return setlist.sets[set_index]


def _require_song(performance_set: PerformanceSet, set_index: int, song_index: int) -> SetSongEntry:
    if not 0 <= song_index < len(performance_set.songs):
        raise InvalidReference(
            f"Invalid song index {song_index} for set {set_index} "
            f"({len(performance_set.songs)} songs)"
        )
    return performance_set.songs[song_index]


def add_set(setlist: Setlist, name: Optional[str] = None) -> int:
    """
    Append an empty set.

    Args:
        setlist: Setlist to modify
        name: Display name; defaults to the positional label

    Returns:
        Index of the new set
    """
    set_index = len(setlist.sets)
    setlist.sets.append(PerformanceSet(name=name or default_set_name(set_index)))
    return set_index


def rename_set(setlist: Setlist, set_index: int, name: str) -> PerformanceSet:
    """Rename an existing set."""
    performance_set = _require_set(setlist, set_index)
    performance_set.name = name
    return performance_set


def remove_set(setlist: Setlist, set_index: int) -> PerformanceSet:
    """Remove a set and every entry in it. Later sets shift down by one position."""
    _require_set(setlist, set_index)
    return setlist.sets.pop(set_index)


def add_song(
    setlist: Setlist,
    set_index: int,
    song_id: str,
    duration: Optional[int],
    notes: str = ""
) -> SetSongEntry:
    """
    Append a song to a set, creating the set if it does not exist yet.

    When `set_index` is past the end of the setlist, empty sets with their
    positional names are created up to and including that index.

    Args:
        setlist: Setlist to modify
        set_index: Target set position (>= 0)
        song_id: ID of the song to reference
        duration: Duration override in seconds
        notes: Performance notes

    Returns:
        The new entry

    Raises:
        InvalidReference: If set_index is negative
    """
    if set_index < 0:
        raise InvalidReference(f"Invalid set index {set_index}")

    while len(setlist.sets) <= set_index:
        add_set(setlist)

    target = setlist.sets[set_index]
    next_order = max(entry.order for entry in target.songs) + 1 if target.songs else 1
    entry = SetSongEntry(song_id=song_id, order=next_order, duration=duration, notes=notes)
    target.songs.append(entry)
    return entry


def move_song(
    setlist: Setlist,
    from_set_index: int,
    from_song_index: int,
    to_set_index: int,
    to_position: int
) -> SetSongEntry:
    """
    Move a song within a set or to another set.

    Args:
        setlist: Setlist to modify
        from_set_index: Set currently holding the song
        from_song_index: Position of the song in its set
        to_set_index: Destination set
        to_position: Position in the destination set, clamped to [0, length]

    Returns:
        The moved entry (with its new order)

    Raises:
        InvalidReference: If a set index or the source song index is out of range
    """
    source = _require_set(setlist, from_set_index)
    destination = _require_set(setlist, to_set_index)
    _require_song(source, from_set_index, from_song_index)

    entry, remaining = detach_song(source.songs, from_song_index)
    if from_set_index == to_set_index:
        position = max(0, min(to_position, len(remaining)))
        source.songs = insert_song(remaining, entry, position)
    else:
        # Source only needs the renumbering done by detach_song
        position = max(0, min(to_position, len(destination.songs)))
        source.songs = remaining
        destination.songs = insert_song(destination.songs, entry, position)

    return destination.songs[position]


def remove_song(setlist: Setlist, set_index: int, song_index: int) -> SetSongEntry:
    """
    Remove a song from a set and renumber the remaining entries.

    Raises:
        InvalidReference: If either index is out of range
    """
    performance_set = _require_set(setlist, set_index)
    _require_song(performance_set, set_index, song_index)
    removed, performance_set.songs = detach_song(performance_set.songs, song_index)
    return removed


def update_entry(
    setlist: Setlist,
    set_index: int,
    song_index: int,
    duration: Optional[int] = None,
    notes: Optional[str] = None,
    is_played: Optional[bool] = None
) -> SetSongEntry:
    """
    Edit the per-setlist attributes of a song entry. Order is not touched.

    Raises:
        InvalidReference: If either index is out of range
    """
    entry = _require_song(_require_set(setlist, set_index), set_index, song_index)
    if duration is not None:
        entry.duration = duration
    if notes is not None:
        entry.notes = notes
    if is_played is not None:
        entry.is_played = is_played
    return entry
