"""In-memory store for setlists, bands and songs."""
import threading
from typing import Dict

from models.band import Band
from models.setlist import Setlist
from models.song import Song

# In-memory storage for setlist documents
# Maps setlist_id -> Setlist
SETLISTS: Dict[str, Setlist] = {}

# In-memory storage for bands consulted by access checks
# Maps band_id -> Band
BANDS: Dict[str, Band] = {}

# In-memory storage for songs referenced by setlist entries
# Maps song_id -> Song
SONGS: Dict[str, Song] = {}

# Guards structural writes so a document replace is atomic
STORE_LOCK = threading.Lock()


def clear_all() -> None:
    """Drop every stored document."""
    with STORE_LOCK:
        SETLISTS.clear()
        BANDS.clear()
        SONGS.clear()
