"""Real-time fan-out of setlist edits to co-editors."""
from setlist_engine.collaboration.broadcaster import CollaborationBroadcaster
from setlist_engine.collaboration.models import CollaborationSession, RoomState, SetlistUpdatedEvent

__all__ = [
    "CollaborationBroadcaster",
    "CollaborationSession",
    "RoomState",
    "SetlistUpdatedEvent",
]
