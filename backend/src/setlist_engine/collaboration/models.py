"""Models for setlist collaboration rooms."""
import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field

from config import BROADCAST_QUEUE_SIZE


class SetlistUpdatedEvent(BaseModel):
    """Event delivered to co-editors after a committed mutation."""
    type: Literal["setlist-updated"] = "setlist-updated"
    setlist_id: str = Field(..., alias="setlistId")
    version: int = Field(..., ge=1)
    changed_by: str = Field(..., alias="changedBy")
    payload: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        populate_by_name = True


@dataclass
class CollaborationSession:
    """
    One connected co-editor.

    Events are buffered in a bounded queue that the transport drains; the
    broadcaster never waits on it.
    """
    actor_id: str
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    queue: "asyncio.Queue[SetlistUpdatedEvent]" = field(
        default_factory=lambda: asyncio.Queue(maxsize=BROADCAST_QUEUE_SIZE)
    )

    def __post_init__(self):
        if not self.actor_id:
            raise ValueError("actor_id cannot be empty")


RoomState = Literal["empty", "active"]
