"""Pydantic models for the Setlist document (sets, song entries, version history)."""
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field

from setlist_engine.duration.aggregator import format_clock


def _new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    """Timezone-aware current time used for document and history timestamps."""
    return datetime.now(timezone.utc)


class SetSongEntry(BaseModel):
    """A song placed in a set.

    The entry references the Song by id only; duration is an override that may
    differ from the song's canonical duration.
    """
    song_id: str = Field(..., alias="songId", description="ID of the referenced song")
    order: int = Field(..., ge=1, description="1-based position of the song within its set")
    duration: Optional[int] = Field(0, ge=0, description="Duration override in seconds")
    notes: str = Field(default="", description="Performance notes for this song in this setlist")
    is_played: bool = Field(default=False, alias="isPlayed", description="Whether the song has been played")

    class Config:
        populate_by_name = True  # Allow both field names and aliases


class PerformanceSet(BaseModel):
    """One set of a setlist. Position in the setlist is its performance order."""
    name: str = Field(default="Main Set", description="Display name of the set")
    duration: int = Field(default=0, ge=0, description="Derived: sum of song durations in seconds")
    songs: List[SetSongEntry] = Field(default_factory=list, description="Songs in performance order")

    class Config:
        populate_by_name = True


class VersionRecord(BaseModel):
    """Immutable entry of a setlist's change log."""
    version: int = Field(..., ge=1, description="Setlist version produced by this change")
    changed_by: str = Field(..., alias="changedBy", description="Actor who made the change")
    timestamp: datetime = Field(default_factory=utcnow, description="When the change was committed")
    changes: str = Field(..., description="Human-readable description of the change")

    class Config:
        populate_by_name = True
        frozen = True


class Setlist(BaseModel):
    """Root aggregate: ordered sets of songs plus their version history.

    `total_duration` and each set's `duration` are derived values; they are
    rewritten by the duration aggregator at the end of every mutation and are
    never edited directly.
    """
    id: str = Field(default_factory=_new_id, description="Unique identifier of the setlist")
    title: str = Field(..., min_length=1, description="Title of the setlist")
    description: str = Field(default="", description="Description of the setlist")
    performance_date: Optional[datetime] = Field(None, alias="date", description="Date and time of the performance")
    venue: str = Field(default="", description="Venue of the performance")
    is_public: bool = Field(default=False, alias="isPublic", description="Whether anyone may read the setlist")
    created_by: str = Field(..., alias="createdBy", description="Owning actor id")
    band_id: Optional[str] = Field(None, alias="bandId", description="Owning band id, if band-owned")
    version: int = Field(default=1, ge=1, description="Current version number")
    total_duration: int = Field(default=0, ge=0, alias="totalDuration", description="Derived: total seconds")
    sets: List[PerformanceSet] = Field(default_factory=list, description="Sets in performance order")
    version_history: List[VersionRecord] = Field(
        default_factory=list,
        alias="versionHistory",
        description="Append-only change log"
    )
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    class Config:
        populate_by_name = True

    @computed_field(alias="formattedTotalDuration")
    @property
    def formatted_total_duration(self) -> str:
        """Total duration as HH:MM:SS."""
        return format_clock(self.total_duration, with_hours=True)

    def __repr__(self) -> str:
        """String representation of Setlist."""
        return (
            f"Setlist(id={self.id}, title={self.title!r}, version={self.version}, "
            f"sets={len(self.sets)}, total={self.formatted_total_duration})"
        )
