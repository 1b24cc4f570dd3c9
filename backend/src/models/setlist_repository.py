"""Repository for Setlist document persistence.

This module abstracts read/write operations for setlists, allowing the storage
implementation to be changed later without affecting the API layer. Callers
always receive deep copies: a document is only changed through
`replace_setlist`, which is the single serialization point for mutations.
"""
from typing import List, Optional

from models.setlist import Setlist
from models.store import SETLISTS, STORE_LOCK
from setlist_engine.errors import SetlistNotFound, VersionConflict
from utils.logger import get_logger

logger = get_logger(__name__)


def get_setlist(setlist_id: str) -> Optional[Setlist]:
    """
    Load a setlist by id.

    Args:
        setlist_id: ID of the setlist

    Returns:
        A private copy of the stored Setlist, or None if it does not exist
    """
    stored = SETLISTS.get(setlist_id)
    if stored is None:
        return None
    return stored.model_copy(deep=True)


def create_setlist(setlist: Setlist) -> Setlist:
    """
    Store a new setlist.

    Args:
        setlist: Setlist to store (its id must not exist yet)

    Returns:
        The stored Setlist

    Raises:
        VersionConflict: If a setlist with the same id is already stored
    """
    with STORE_LOCK:
        if setlist.id in SETLISTS:
            raise VersionConflict(f"Setlist {setlist.id} already exists")
        SETLISTS[setlist.id] = setlist.model_copy(deep=True)
    return setlist


def replace_setlist(setlist: Setlist, expected_version: int) -> Setlist:
    """
    Atomically replace a stored setlist if its version is still `expected_version`.

    The structural change and the version increment travel in the same
    document, so either both are stored or neither is.

    Args:
        setlist: Updated document (already carrying its new version)
        expected_version: Version the caller loaded before mutating

    Returns:
        The stored Setlist

    Raises:
        SetlistNotFound: If the setlist was removed in the meantime
        VersionConflict: If another commit landed first
    """
    with STORE_LOCK:
        current = SETLISTS.get(setlist.id)
        if current is None:
            raise SetlistNotFound(f"Setlist {setlist.id} not found")
        if current.version != expected_version:
            logger.warning(
                f"Rejected write to setlist {setlist.id}: expected version {expected_version}, "
                f"stored version is {current.version}"
            )
            raise VersionConflict(
                f"Setlist {setlist.id} is at version {current.version}, expected {expected_version}"
            )
        SETLISTS[setlist.id] = setlist.model_copy(deep=True)
    return setlist


def query_setlists(
    owner_id: Optional[str] = None,
    band_id: Optional[str] = None,
    text: Optional[str] = None
) -> List[Setlist]:
    """
    Query setlists by owner, band and free text.

    Args:
        owner_id: Only setlists created by this actor
        band_id: Only setlists owned by this band
        text: Case-insensitive match against title, description and venue

    Returns:
        Matching setlists (copies), newest performance date first, undated last
    """
    needle = text.lower().strip() if text else None
    results = []
    for setlist in list(SETLISTS.values()):
        if owner_id is not None and setlist.created_by != owner_id:
            continue
        if band_id is not None and setlist.band_id != band_id:
            continue
        if needle:
            haystack = " ".join([setlist.title, setlist.description, setlist.venue]).lower()
            if needle not in haystack:
                continue
        results.append(setlist.model_copy(deep=True))

    results.sort(
        key=lambda s: (s.performance_date is None, -(s.performance_date.timestamp() if s.performance_date else 0))
    )
    return results
