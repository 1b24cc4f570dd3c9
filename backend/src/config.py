"""Configuration module for Setlist Sync."""
import os

from dotenv import load_dotenv

load_dotenv()


APP_NAME = "Setlist Sync"
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Comma-separated list of frontend origins allowed by CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173",
    ).split(",")
    if origin.strip()
]

# Identity headers attached to every mutation request
ACTOR_HEADER = os.environ.get("ACTOR_HEADER", "X-Actor-Id")
SESSION_HEADER = os.environ.get("SESSION_HEADER", "X-Session-Id")

# Setlist document defaults
DEFAULT_SET_NAME = os.environ.get("DEFAULT_SET_NAME", "Set {number}")
FALLBACK_CHANGE_DESCRIPTION = os.environ.get("FALLBACK_CHANGE_DESCRIPTION", "Setlist updated")

# Collaboration fan-out: events buffered per session before dropping
BROADCAST_QUEUE_SIZE = int(os.environ.get("BROADCAST_QUEUE_SIZE", "256"))

# Version history paging
HISTORY_PAGE_LIMIT = int(os.environ.get("HISTORY_PAGE_LIMIT", "50"))
