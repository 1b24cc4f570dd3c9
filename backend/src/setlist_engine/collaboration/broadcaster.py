"""
Collaboration broadcaster for setlist rooms.

Each setlist has a room of co-editor sessions. A committed mutation is fanned
out to every session in the room except the one that sent it. The broadcaster
does not authorize, merge or replay: callers check read access before
joining, and late joiners re-fetch the setlist from persistence.

Architecture:
    SetlistService → emit(setlist_id, event) → CollaborationBroadcaster → session queues
"""
import asyncio
from typing import Dict, List, Optional

from setlist_engine.collaboration.models import CollaborationSession, RoomState, SetlistUpdatedEvent
from utils.logger import get_logger

logger = get_logger(__name__)


class CollaborationBroadcaster:
    """
    Owns the room membership mapping (setlist id -> sessions).

    Rooms go Empty -> Active on the first join and back to Empty (removed)
    when the last session leaves or disconnects.
    """

    def __init__(self):
        # setlist_id -> session_id -> session
        self._rooms: Dict[str, Dict[str, CollaborationSession]] = {}

    def join(self, setlist_id: str, session: CollaborationSession) -> None:
        """
        Add a session to a setlist's room.

        Args:
            setlist_id: Room key
            session: Session to add (joining twice is a no-op)
        """
        room = self._rooms.setdefault(setlist_id, {})
        room[session.session_id] = session
        logger.info(f"Session {session.session_id} ({session.actor_id}) joined setlist {setlist_id}")

    def leave(self, setlist_id: str, session_id: str) -> bool:
        """
        Remove a session from a room.

        Returns:
            True if the session was in the room
        """
        room = self._rooms.get(setlist_id)
        if not room or session_id not in room:
            return False
        del room[session_id]
        if not room:
            del self._rooms[setlist_id]
        logger.info(f"Session {session_id} left setlist {setlist_id}")
        return True

    def disconnect(self, session_id: str) -> List[str]:
        """
        Remove a session from every room it joined.

        Returns:
            Setlist ids of the rooms the session was removed from
        """
        left = [setlist_id for setlist_id, room in list(self._rooms.items()) if session_id in room]
        for setlist_id in left:
            self.leave(setlist_id, session_id)
        logger.info(f"Session {session_id} disconnected from {len(left)} room(s)")
        return left

    def emit(
        self,
        setlist_id: str,
        event: SetlistUpdatedEvent,
        sender_session_id: Optional[str] = None
    ) -> int:
        """
        Deliver an event to every session in the room except the sender.

        Delivery is fire-and-forget: a full queue drops the event for that
        recipient only. Never raises.

        Args:
            setlist_id: Room key
            event: Event to deliver
            sender_session_id: Session that caused the event (excluded)

        Returns:
            Number of sessions the event was queued for
        """
        recipients = [
            session for session_id, session in self._rooms.get(setlist_id, {}).items()
            if session_id != sender_session_id
        ]
        delivered = 0
        for session in recipients:
            try:
                session.queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(
                    f"Queue full for session {session.session_id} in setlist {setlist_id}, "
                    f"dropping version {event.version}"
                )

        logger.debug(
            f"Broadcast setlist {setlist_id} v{event.version} to {delivered}/{len(recipients)} peers"
        )
        return delivered

    def participants(self, setlist_id: str) -> List[str]:
        """Session ids currently in a room."""
        return list(self._rooms.get(setlist_id, {}))

    def room_state(self, setlist_id: str) -> RoomState:
        return "active" if self._rooms.get(setlist_id) else "empty"
