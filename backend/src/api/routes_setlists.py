"""Setlist API routes."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, model_validator

from api.dependencies import collaboration_session, optional_actor, require_actor
from config import HISTORY_PAGE_LIMIT
from models.setlist import Setlist
from mutations.mutation_service import setlist_service
from setlist_engine.errors import (
    AccessDenied,
    InvalidReference,
    SetlistEngineError,
    SetlistNotFound,
    TransientLookupFailure,
    VersionConflict,
)
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/setlists", tags=["setlists"])


class SetlistCreate(BaseModel):
    """Payload for creating a setlist."""
    title: str = Field(..., min_length=1, description="Title of the setlist")
    description: str = Field(default="", description="Description of the setlist")
    performance_date: Optional[datetime] = Field(None, alias="date", description="Date and time of the performance")
    venue: str = Field(default="", description="Venue of the performance")
    is_public: bool = Field(default=False, alias="isPublic")
    band_id: Optional[str] = Field(None, alias="bandId", description="Band that owns the setlist")

    class Config:
        populate_by_name = True


class SetlistUpdate(BaseModel):
    """Partial update of setlist fields. Only fields present in the payload change."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    performance_date: Optional[datetime] = Field(None, alias="date")
    venue: Optional[str] = None
    is_public: Optional[bool] = Field(None, alias="isPublic")
    band_id: Optional[str] = Field(None, alias="bandId")
    expected_version: Optional[int] = Field(None, ge=1, alias="expectedVersion")

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "SetlistUpdate":
        """Only date and bandId may be cleared with null."""
        for name in ("title", "description", "venue", "is_public"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class SetCreate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, description="Display name (defaults to 'Set N')")
    expected_version: Optional[int] = Field(None, ge=1, alias="expectedVersion")

    class Config:
        populate_by_name = True


class SetRename(BaseModel):
    name: str = Field(..., min_length=1)
    expected_version: Optional[int] = Field(None, ge=1, alias="expectedVersion")

    class Config:
        populate_by_name = True


class SongAdd(BaseModel):
    """Payload for adding a song to a set (the set is created if missing)."""
    set_index: int = Field(..., ge=0, alias="setIndex")
    song_id: str = Field(..., min_length=1, alias="songId")
    duration: Optional[int] = Field(None, ge=0, description="Override in seconds (defaults to the song's duration)")
    notes: str = Field(default="")
    expected_version: Optional[int] = Field(None, ge=1, alias="expectedVersion")

    class Config:
        populate_by_name = True


class SongMove(BaseModel):
    """Payload for moving a song within or across sets."""
    from_set_index: int = Field(..., alias="fromSetIndex")
    from_song_index: int = Field(..., alias="fromSongIndex")
    to_set_index: int = Field(..., alias="toSetIndex")
    to_position: int = Field(..., alias="toPosition", description="Clamped to the destination set length")
    expected_version: Optional[int] = Field(None, ge=1, alias="expectedVersion")

    class Config:
        populate_by_name = True


class SongEntryUpdate(BaseModel):
    duration: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    is_played: Optional[bool] = Field(None, alias="isPlayed")
    expected_version: Optional[int] = Field(None, ge=1, alias="expectedVersion")

    class Config:
        populate_by_name = True


def _dump(setlist: Setlist) -> dict:
    """Serialize a setlist read model with camelCase field names."""
    return setlist.model_dump(mode="json", by_alias=True)


def _http_error(e: Exception, setlist_id: Optional[str] = None) -> HTTPException:
    """
    Translate an engine error into an HTTP error.

    Args:
        e: Error raised by the setlist service
        setlist_id: Setlist the request addressed, for logging

    Returns:
        HTTPException to raise
    """
    if isinstance(e, SetlistNotFound):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, InvalidReference):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(e, AccessDenied):
        status_code = status.HTTP_403_FORBIDDEN
    elif isinstance(e, VersionConflict):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(e, TransientLookupFailure):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_400_BAD_REQUEST

    logger.warning(f"Request on setlist {setlist_id} failed with {status_code}: {e}")
    return HTTPException(status_code=status_code, detail=str(e))


def _unexpected(e: Exception, action: str, setlist_id: Optional[str] = None) -> HTTPException:
    logger.error(f"Unexpected error trying to {action} (setlist {setlist_id}): {e}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(e)}"
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_setlist(
    payload: SetlistCreate = Body(...),
    actor_id: str = Depends(require_actor)
):
    """
    Create a setlist owned by the requesting actor.

    Returns:
        JSON with the new setlist (version 1)

    Raises:
        400 if bandId names an unknown band
        403 if the actor may not manage the band's setlists
    """
    logger.info(f"Creating setlist {payload.title!r} for actor {actor_id}")

    try:
        setlist = await setlist_service.create_setlist(
            actor_id=actor_id,
            title=payload.title,
            description=payload.description,
            performance_date=payload.performance_date,
            venue=payload.venue,
            is_public=payload.is_public,
            band_id=payload.band_id,
        )
    except (SetlistEngineError, ValueError) as e:
        raise _http_error(e)
    except Exception as e:
        raise _unexpected(e, "create setlist")

    return _dump(setlist)


@router.get("")
async def list_setlists(
    owner_id: Optional[str] = Query(None, alias="ownerId", description="Only setlists created by this actor"),
    band_id: Optional[str] = Query(None, alias="bandId", description="Only setlists of this band"),
    q: Optional[str] = Query(None, description="Text search over title, description and venue"),
    actor_id: Optional[str] = Depends(optional_actor)
):
    """
    List the setlists the requesting actor may read.

    Returns:
        JSON with matching setlists and their count
    """
    logger.info(f"Listing setlists for actor {actor_id} (owner={owner_id}, band={band_id}, q={q!r})")

    try:
        setlists = await setlist_service.list_setlists(actor_id, owner_id=owner_id, band_id=band_id, text=q)
    except Exception as e:
        raise _unexpected(e, "list setlists")

    return {
        "setlists": [_dump(setlist) for setlist in setlists],
        "count": len(setlists)
    }


@router.get("/{setlist_id}")
async def get_setlist(setlist_id: str, actor_id: Optional[str] = Depends(optional_actor)):
    """
    Get a setlist with derived totals and its current version.

    Raises:
        404 if the setlist does not exist
        403 if the actor may not read it
    """
    try:
        setlist = await setlist_service.get_setlist(setlist_id, actor_id)
    except (SetlistEngineError, ValueError) as e:
        raise _http_error(e, setlist_id)
    except Exception as e:
        raise _unexpected(e, "get setlist", setlist_id)

    return _dump(setlist)


@router.get("/{setlist_id}/history")
async def get_setlist_history(
    setlist_id: str,
    offset: int = Query(0, ge=0),
    limit: int = Query(HISTORY_PAGE_LIMIT, ge=1, le=500),
    actor_id: Optional[str] = Depends(optional_actor)
):
    """
    Get a page of a setlist's version history, oldest first.

    Returns:
        JSON with the records, current version and total record count
    """
    try:
        setlist, records = await setlist_service.get_history(setlist_id, actor_id, offset=offset, limit=limit)
    except (SetlistEngineError, ValueError) as e:
        raise _http_error(e, setlist_id)
    except Exception as e:
        raise _unexpected(e, "get setlist history", setlist_id)

    return {
        "setlistId": setlist_id,
        "version": setlist.version,
        "total": len(setlist.version_history),
        "offset": offset,
        "limit": limit,
        "records": [record.model_dump(mode="json", by_alias=True) for record in records]
    }


@router.patch("/{setlist_id}")
async def update_setlist(
    setlist_id: str,
    payload: SetlistUpdate = Body(...),
    actor_id: str = Depends(require_actor),
    session_id: Optional[str] = Depends(collaboration_session)
):
    """
    Update setlist fields (title, description, date, venue, isPublic, bandId).

    Raises:
        400 if no fields are given or bandId is unknown
        403 if the actor may not edit the setlist
        409 if expectedVersion is stale
    """
    changes = payload.model_dump(exclude_unset=True, exclude={"expected_version"})
    logger.info(f"Updating setlist {setlist_id} fields {sorted(changes)} by {actor_id}")

    try:
        setlist = await setlist_service.update_fields(
            setlist_id, actor_id, changes,
            session_id=session_id, expected_version=payload.expected_version
        )
    except (SetlistEngineError, ValueError) as e:
        raise _http_error(e, setlist_id)
    except Exception as e:
        raise _unexpected(e, "update setlist", setlist_id)

    return _dump(setlist)


@router.post("/{setlist_id}/sets")
async def add_set(
    setlist_id: str,
    payload: Optional[SetCreate] = Body(None),
    actor_id: str = Depends(require_actor),
    session_id: Optional[str] = Depends(collaboration_session)
):
    """Append an empty set."""
    payload = payload or SetCreate()
    try:
        setlist = await setlist_service.add_set(
            setlist_id, actor_id, payload.name,
            session_id=session_id, expected_version=payload.expected_version
        )
    except (SetlistEngineError, ValueError) as e:
        raise _http_error(e, setlist_id)
    except Exception as e:
        raise _unexpected(e, "add set", setlist_id)

    return _dump(setlist)


@router.patch("/{setlist_id}/sets/{set_index}")
async def rename_set(
    setlist_id: str,
    set_index: int,
    payload: SetRename = Body(...),
    actor_id: str = Depends(require_actor),
    session_id: Optional[str] = Depends(collaboration_session)
):
    """Rename a set."""
    try:
        setlist = await setlist_service.rename_set(
            setlist_id, actor_id, set_index, payload.name,
            session_id=session_id, expected_version=payload.expected_version
        )
    except (SetlistEngineError, ValueError) as e:
        raise _http_error(e, setlist_id)
    except Exception as e:
        raise _unexpected(e, "rename set", setlist_id)

    return _dump(setlist)


@router.delete("/{setlist_id}/sets/{set_index}")
async def remove_set(
    setlist_id: str,
    set_index: int,
    expected_version: Optional[int] = Query(None, ge=1, alias="expectedVersion"),
    actor_id: str = Depends(require_actor),
    session_id: Optional[str] = Depends(collaboration_session)
):
    """Remove a set and its songs."""
    try:
        setlist = await setlist_service.remove_set(
            setlist_id, actor_id, set_index,
            session_id=session_id, expected_version=expected_version
        )
    except (SetlistEngineError, ValueError) as e:
        raise _http_error(e, setlist_id)
    except Exception as e:
        raise _unexpected(e, "remove set", setlist_id)

    return _dump(setlist)


@router.post("/{setlist_id}/songs")
async def add_song(
    setlist_id: str,
    payload: SongAdd = Body(...),
    actor_id: str = Depends(require_actor),
    session_id: Optional[str] = Depends(collaboration_session)
):
    """
    Add a song to a set, creating the set if it does not exist yet.

    Raises:
        400 if the song is unknown
        403 if the actor may not edit the setlist
    """
    logger.info(f"Adding song {payload.song_id} to set {payload.set_index} of setlist {setlist_id}")

    try:
        setlist = await setlist_service.add_song(
            setlist_id, actor_id, payload.set_index, payload.song_id,
            duration=payload.duration, notes=payload.notes,
            session_id=session_id, expected_version=payload.expected_version
        )
    except (SetlistEngineError, ValueError) as e:
        raise _http_error(e, setlist_id)
    except Exception as e:
        raise _unexpected(e, "add song", setlist_id)

    return _dump(setlist)


@router.post("/{setlist_id}/songs/move")
async def move_song(
    setlist_id: str,
    payload: SongMove = Body(...),
    actor_id: str = Depends(require_actor),
    session_id: Optional[str] = Depends(collaboration_session)
):
    """
    Move a song within a set or to another set.

    Raises:
        400 if a set index or the source song index is out of range
    """
    logger.info(
        f"Moving song {payload.from_set_index}:{payload.from_song_index} to "
        f"{payload.to_set_index}:{payload.to_position} in setlist {setlist_id}"
    )

    try:
        setlist = await setlist_service.move_song(
            setlist_id, actor_id,
            payload.from_set_index, payload.from_song_index,
            payload.to_set_index, payload.to_position,
            session_id=session_id, expected_version=payload.expected_version
        )
    except (SetlistEngineError, ValueError) as e:
        raise _http_error(e, setlist_id)
    except Exception as e:
        raise _unexpected(e, "move song", setlist_id)

    return _dump(setlist)


@router.patch("/{setlist_id}/sets/{set_index}/songs/{song_index}")
async def update_song_entry(
    setlist_id: str,
    set_index: int,
    song_index: int,
    payload: SongEntryUpdate = Body(...),
    actor_id: str = Depends(require_actor),
    session_id: Optional[str] = Depends(collaboration_session)
):
    """Update a song entry's duration override, notes or played flag."""
    try:
        setlist = await setlist_service.update_entry(
            setlist_id, actor_id, set_index, song_index,
            duration=payload.duration, notes=payload.notes, is_played=payload.is_played,
            session_id=session_id, expected_version=payload.expected_version
        )
    except (SetlistEngineError, ValueError) as e:
        raise _http_error(e, setlist_id)
    except Exception as e:
        raise _unexpected(e, "update song entry", setlist_id)

    return _dump(setlist)


@router.delete("/{setlist_id}/sets/{set_index}/songs/{song_index}")
async def remove_song(
    setlist_id: str,
    set_index: int,
    song_index: int,
    expected_version: Optional[int] = Query(None, ge=1, alias="expectedVersion"),
    actor_id: str = Depends(require_actor),
    session_id: Optional[str] = Depends(collaboration_session)
):
    """Remove a song from a set; the remaining songs are renumbered."""
    try:
        setlist = await setlist_service.remove_song(
            setlist_id, actor_id, set_index, song_index,
            session_id=session_id, expected_version=expected_version
        )
    except (SetlistEngineError, ValueError) as e:
        raise _http_error(e, setlist_id)
    except Exception as e:
        raise _unexpected(e, "remove song", setlist_id)

    return _dump(setlist)
