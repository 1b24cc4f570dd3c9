"""Version history for setlists.

Every committed mutation appends one immutable VersionRecord whose version is
exactly one more than the previous, and the setlist's version always equals
the last record's.
"""
from typing import Any, Dict, Optional

from config import FALLBACK_CHANGE_DESCRIPTION
from models.setlist import Setlist, VersionRecord
from utils.logger import get_logger

logger = get_logger(__name__)

CREATED_DESCRIPTION = "Setlist created"

# Human-readable summaries per mutation kind
CHANGE_TEMPLATES: Dict[str, str] = {
    "update_fields": "Updated {fields}",
    "add_set": "Added set '{set_name}'",
    "rename_set": "Renamed set {set_number} to '{set_name}'",
    "remove_set": "Removed set '{set_name}'",
    "add_song": "Added '{song_title}' to '{set_name}'",
    "move_song": "Moved '{song_title}' from '{from_set_name}' to position {to_position} of '{to_set_name}'",
    "remove_song": "Removed '{song_title}' from '{set_name}'",
    "update_entry": "Updated {fields} of '{song_title}' in '{set_name}'",
}


def describe_change(kind: str, details: Optional[Dict[str, Any]] = None) -> str:
    """
    Build the description recorded for a mutation.

    Falls back to the generic description when the kind is unknown or the
    details do not fill the template; a commit never fails for lack of a summary.

    Args:
        kind: Mutation kind (e.g. "move_song")
        details: Values for the kind's template

    Returns:
        Description string
    """
    template = CHANGE_TEMPLATES.get(kind)
    if template is None:
        return FALLBACK_CHANGE_DESCRIPTION
    try:
        return template.format(**(details or {}))
    except (KeyError, IndexError, ValueError) as e:
        logger.debug(f"Could not describe {kind} change ({e}), using fallback description")
        return FALLBACK_CHANGE_DESCRIPTION


def start_history(setlist: Setlist, actor_id: str) -> VersionRecord:
    """
    Record the creation of a setlist as its first version.

    Args:
        setlist: Newly built setlist with an empty history
        actor_id: Creator

    Returns:
        The appended record
    """
    if setlist.version_history:
        raise ValueError(f"Setlist {setlist.id} already has a version history")
    record = VersionRecord(version=setlist.version, changed_by=actor_id, changes=CREATED_DESCRIPTION)
    setlist.version_history.append(record)
    return record


def commit(setlist: Setlist, actor_id: str, description: Optional[str]) -> VersionRecord:
    """
    Append a version record and advance the setlist's version.

    Must run after the structural change and the duration recompute. Applied
    to the caller's working copy; the new version only becomes visible when
    the copy is persisted.

    Args:
        setlist: Setlist that was just mutated
        actor_id: Author of the change
        description: Summary of the change (fallback used when empty)

    Returns:
        The appended record
    """
    record = VersionRecord(
        version=setlist.version + 1,
        changed_by=actor_id,
        changes=description or FALLBACK_CHANGE_DESCRIPTION,
    )
    setlist.version_history.append(record)
    setlist.version = record.version
    setlist.updated_at = record.timestamp
    logger.info(f"Setlist {setlist.id} now at version {setlist.version}: {record.changes}")
    return record
