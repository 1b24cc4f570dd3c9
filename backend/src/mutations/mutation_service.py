"""Service that applies setlist mutations end to end.

Every mutation runs the same pipeline:
    access check -> structural change -> duration recompute -> version commit
    -> atomic write -> broadcast to co-editors

The change is applied to a private copy of the loaded document and written
with a compare-and-swap on the version that was loaded, so the version bump
and the structural change are stored together or not at all. Two concurrent
commits can never both claim the same version: the loser gets
VersionConflict. Beyond that, concurrent editors are not reconciled (each
request works on the latest stored state, last commit wins) and peers learn
about the new state from the broadcast or a re-read.
"""
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from models import catalog_repository, setlist_repository
from models.setlist import Setlist, VersionRecord
from setlist_engine import ordering
from setlist_engine.access_control import EDIT_SETLISTS, AccessControlEvaluator
from setlist_engine.collaboration import CollaborationBroadcaster, SetlistUpdatedEvent
from setlist_engine.duration import apply_durations
from setlist_engine.errors import AccessDenied, InvalidReference, SetlistNotFound, VersionConflict
from setlist_engine.version_history import commit, describe_change, start_history
from utils.logger import get_logger

logger = get_logger(__name__)

# Setlist fields editable through update_fields, with the names used in change descriptions
EDITABLE_FIELDS: Dict[str, str] = {
    "title": "title",
    "description": "description",
    "performance_date": "date",
    "venue": "venue",
    "is_public": "visibility",
    "band_id": "band",
}

Mutator = Callable[[Setlist], Dict[str, Any]]


def _song_title(song_id: str) -> str:
    song = catalog_repository.get_song(song_id)
    return song.title if song is not None else song_id


class SetlistService:
    """
    Entry point for creating, reading and mutating setlists.

    Args:
        evaluator: Access control evaluator (defaults to one over the in-memory band catalog)
        broadcaster: Collaboration broadcaster for committed mutations
    """

    def __init__(
        self,
        evaluator: Optional[AccessControlEvaluator] = None,
        broadcaster: Optional[CollaborationBroadcaster] = None
    ):
        self.evaluator = evaluator or AccessControlEvaluator()
        self.broadcaster = broadcaster or CollaborationBroadcaster()

    async def get_setlist(self, setlist_id: str, actor_id: Optional[str]) -> Setlist:
        """
        Load a setlist the actor may read.

        Raises:
            SetlistNotFound: If the setlist does not exist
            AccessDenied: If the actor may not read it
        """
        setlist = setlist_repository.get_setlist(setlist_id)
        if setlist is None:
            raise SetlistNotFound(f"Setlist {setlist_id} not found")
        if not await self.evaluator.can_access(setlist, actor_id, "read"):
            raise AccessDenied(f"Actor {actor_id} may not read setlist {setlist_id}")
        return setlist

    async def list_setlists(
        self,
        actor_id: Optional[str],
        owner_id: Optional[str] = None,
        band_id: Optional[str] = None,
        text: Optional[str] = None
    ) -> List[Setlist]:
        """Query setlists and keep only those the actor may read."""
        readable = []
        for setlist in setlist_repository.query_setlists(owner_id=owner_id, band_id=band_id, text=text):
            if await self.evaluator.can_access(setlist, actor_id, "read"):
                readable.append(setlist)
        return readable

    async def get_history(
        self,
        setlist_id: str,
        actor_id: Optional[str],
        offset: int = 0,
        limit: Optional[int] = None
    ) -> Tuple[Setlist, List[VersionRecord]]:
        """
        Return a setlist and one page of its version history, oldest first.

        The page is sliced from the returned setlist, so its version and
        record count describe the same snapshot as the page.

        Args:
            setlist_id: ID of the setlist
            actor_id: Reading actor
            offset: Number of records to skip
            limit: Maximum number of records (None for all)
        """
        setlist = await self.get_setlist(setlist_id, actor_id)
        end = None if limit is None else offset + limit
        return setlist, setlist.version_history[offset:end]

    async def create_setlist(
        self,
        actor_id: str,
        title: str,
        description: str = "",
        performance_date: Optional[datetime] = None,
        venue: str = "",
        is_public: bool = False,
        band_id: Optional[str] = None
    ) -> Setlist:
        """
        Create a setlist owned by `actor_id` at version 1.

        Raises:
            InvalidReference: If band_id does not name an existing band
            AccessDenied: If the actor may not edit the band's setlists
        """
        if band_id is not None:
            await self._require_band_permission(band_id, actor_id)

        setlist = Setlist(
            title=title,
            description=description,
            performance_date=performance_date,
            venue=venue,
            is_public=is_public,
            created_by=actor_id,
            band_id=band_id,
        )
        apply_durations(setlist)
        start_history(setlist, actor_id)
        setlist_repository.create_setlist(setlist)
        logger.info(f"Created setlist {setlist.id} for {actor_id}: {setlist!r}")
        return setlist

    async def update_fields(
        self,
        setlist_id: str,
        actor_id: str,
        changes: Dict[str, Any],
        session_id: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> Setlist:
        """
        Update top-level setlist fields.

        Args:
            changes: Field name -> new value; keys must be in EDITABLE_FIELDS

        Raises:
            ValueError: If no fields or unknown fields are given
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")
        if not changes:
            raise ValueError("No fields to update")

        async def check_band() -> None:
            new_band_id = changes.get("band_id")
            if new_band_id is not None:
                await self._require_band_permission(new_band_id, actor_id)

        def apply(setlist: Setlist) -> Dict[str, Any]:
            for name, value in changes.items():
                setattr(setlist, name, value)
            return {"fields": ", ".join(EDITABLE_FIELDS[name] for name in changes)}

        return await self._mutate(
            setlist_id, actor_id, "update_fields", apply, session_id, expected_version, precondition=check_band
        )

    async def add_set(
        self,
        setlist_id: str,
        actor_id: str,
        name: Optional[str] = None,
        session_id: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> Setlist:
        def apply(setlist: Setlist) -> Dict[str, Any]:
            set_index = ordering.add_set(setlist, name)
            return {"set_name": setlist.sets[set_index].name}

        return await self._mutate(setlist_id, actor_id, "add_set", apply, session_id, expected_version)

    async def rename_set(
        self,
        setlist_id: str,
        actor_id: str,
        set_index: int,
        name: str,
        session_id: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> Setlist:
        def apply(setlist: Setlist) -> Dict[str, Any]:
            ordering.rename_set(setlist, set_index, name)
            return {"set_number": set_index + 1, "set_name": name}

        return await self._mutate(setlist_id, actor_id, "rename_set", apply, session_id, expected_version)

    async def remove_set(
        self,
        setlist_id: str,
        actor_id: str,
        set_index: int,
        session_id: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> Setlist:
        def apply(setlist: Setlist) -> Dict[str, Any]:
            removed = ordering.remove_set(setlist, set_index)
            return {"set_name": removed.name}

        return await self._mutate(setlist_id, actor_id, "remove_set", apply, session_id, expected_version)

    async def add_song(
        self,
        setlist_id: str,
        actor_id: str,
        set_index: int,
        song_id: str,
        duration: Optional[int] = None,
        notes: str = "",
        session_id: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> Setlist:
        """
        Add a song to a set. Without an explicit duration the song's canonical
        duration is used.

        Raises:
            InvalidReference: If the song does not exist or set_index is negative
        """
        def apply(setlist: Setlist) -> Dict[str, Any]:
            song = catalog_repository.get_song(song_id)
            if song is None:
                raise InvalidReference(f"Song {song_id} not found")
            entry_duration = song.duration if duration is None else duration
            ordering.add_song(setlist, set_index, song_id, entry_duration, notes)
            return {"song_title": song.title, "set_name": setlist.sets[set_index].name}

        return await self._mutate(setlist_id, actor_id, "add_song", apply, session_id, expected_version)

    async def move_song(
        self,
        setlist_id: str,
        actor_id: str,
        from_set_index: int,
        from_song_index: int,
        to_set_index: int,
        to_position: int,
        session_id: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> Setlist:
        def apply(setlist: Setlist) -> Dict[str, Any]:
            entry = ordering.move_song(setlist, from_set_index, from_song_index, to_set_index, to_position)
            return {
                "song_title": _song_title(entry.song_id),
                "from_set_name": setlist.sets[from_set_index].name,
                "to_set_name": setlist.sets[to_set_index].name,
                "to_position": entry.order,
            }

        return await self._mutate(setlist_id, actor_id, "move_song", apply, session_id, expected_version)

    async def remove_song(
        self,
        setlist_id: str,
        actor_id: str,
        set_index: int,
        song_index: int,
        session_id: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> Setlist:
        def apply(setlist: Setlist) -> Dict[str, Any]:
            removed = ordering.remove_song(setlist, set_index, song_index)
            return {"song_title": _song_title(removed.song_id), "set_name": setlist.sets[set_index].name}

        return await self._mutate(setlist_id, actor_id, "remove_song", apply, session_id, expected_version)

    async def update_entry(
        self,
        setlist_id: str,
        actor_id: str,
        set_index: int,
        song_index: int,
        duration: Optional[int] = None,
        notes: Optional[str] = None,
        is_played: Optional[bool] = None,
        session_id: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> Setlist:
        """Edit an entry's duration override, notes or played flag."""
        edited = [
            label for label, value in (("duration", duration), ("notes", notes), ("played flag", is_played))
            if value is not None
        ]
        if not edited:
            raise ValueError("No entry fields to update")

        def apply(setlist: Setlist) -> Dict[str, Any]:
            entry = ordering.update_entry(setlist, set_index, song_index, duration, notes, is_played)
            return {
                "fields": ", ".join(edited),
                "song_title": _song_title(entry.song_id),
                "set_name": setlist.sets[set_index].name,
            }

        return await self._mutate(setlist_id, actor_id, "update_entry", apply, session_id, expected_version)

    async def _mutate(
        self,
        setlist_id: str,
        actor_id: str,
        kind: str,
        apply: Mutator,
        session_id: Optional[str],
        expected_version: Optional[int],
        precondition: Optional[Callable[[], Awaitable[None]]] = None
    ) -> Setlist:
        """
        Run one mutation through the pipeline.

        `precondition` runs after the write-access and version checks.
        """
        current = setlist_repository.get_setlist(setlist_id)
        if current is None:
            raise SetlistNotFound(f"Setlist {setlist_id} not found")

        if not await self.evaluator.can_access(current, actor_id, "write", EDIT_SETLISTS):
            logger.info(f"Denied {kind} on setlist {setlist_id} for {actor_id}")
            raise AccessDenied(f"Actor {actor_id} may not edit setlist {setlist_id}")

        if expected_version is not None and expected_version != current.version:
            raise VersionConflict(
                f"Setlist {setlist_id} is at version {current.version}, expected {expected_version}"
            )

        if precondition is not None:
            await precondition()

        working = current.model_copy(deep=True)
        details = apply(working)
        apply_durations(working)
        commit(working, actor_id, describe_change(kind, details))
        setlist_repository.replace_setlist(working, expected_version=current.version)

        self._broadcast(working, actor_id, kind, session_id)
        return working

    def _broadcast(self, setlist: Setlist, actor_id: str, kind: str, session_id: Optional[str]) -> None:
        # The mutation is already committed; fan-out problems are logged only
        try:
            event = SetlistUpdatedEvent(
                setlist_id=setlist.id,
                version=setlist.version,
                changed_by=actor_id,
                payload={
                    "action": kind,
                    "changes": setlist.version_history[-1].changes,
                    "setlist": setlist.model_dump(mode="json", by_alias=True),
                },
            )
            self.broadcaster.emit(setlist.id, event, sender_session_id=session_id)
        except Exception as e:
            logger.error(f"Failed to broadcast {kind} on setlist {setlist.id}: {e}", exc_info=True)

    async def _require_band_permission(self, band_id: str, actor_id: str) -> None:
        band = await self.evaluator.band_directory.get_band(band_id)
        if band is None:
            raise InvalidReference(f"Band {band_id} not found")
        if not band.has_permission(actor_id, EDIT_SETLISTS):
            raise AccessDenied(f"Actor {actor_id} may not manage setlists of band {band_id}")


# Service used by the API routes
setlist_service = SetlistService()
