"""Repository for the bands and songs that setlists point at.

Bands and songs are owned by other parts of the application; the setlist
engine only reads them (membership for access checks, canonical durations for
new entries). The save functions exist so those collaborators, and tests, can
populate the catalog.
"""
from typing import Optional

from models.band import Band
from models.song import Song
from models.store import BANDS, SONGS, STORE_LOCK


def get_band(band_id: str) -> Optional[Band]:
    """
    Get a band by id.

    Args:
        band_id: ID of the band

    Returns:
        Band if found, None otherwise
    """
    band = BANDS.get(band_id)
    return band.model_copy(deep=True) if band is not None else None


def save_band(band: Band) -> Band:
    """Create or replace a band."""
    with STORE_LOCK:
        BANDS[band.id] = band.model_copy(deep=True)
    return band


def get_song(song_id: str) -> Optional[Song]:
    """
    Get a song by id.

    Args:
        song_id: ID of the song

    Returns:
        Song if found, None otherwise
    """
    song = SONGS.get(song_id)
    return song.model_copy(deep=True) if song is not None else None


def save_song(song: Song) -> Song:
    """Create or replace a song."""
    with STORE_LOCK:
        SONGS[song.id] = song.model_copy(deep=True)
    return song
