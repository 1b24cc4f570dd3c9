"""Song model. Setlists reference songs by id only."""
import uuid
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field

from setlist_engine.duration.aggregator import format_clock


class Song(BaseModel):
    """A song in an actor's or band's catalog."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Unique identifier of the song")
    title: str = Field(..., min_length=1, description="Title of the song")
    artist: str = Field(default="", description="Artist of the song")
    duration: int = Field(default=0, ge=0, description="Canonical duration in seconds")
    key: str = Field(default="", description="Musical key")
    tempo: float = Field(default=0.0, ge=0.0, description="Tempo in BPM")
    tags: List[str] = Field(default_factory=list)
    created_by: str = Field(..., alias="createdBy")
    band_id: Optional[str] = Field(None, alias="bandId")

    class Config:
        populate_by_name = True

    @computed_field(alias="formattedDuration")
    @property
    def formatted_duration(self) -> str:
        """Duration as MM:SS."""
        return format_clock(self.duration, with_hours=False)
