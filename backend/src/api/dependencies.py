"""Request identity dependencies.

Authentication lives in front of this service; requests arrive with the
authenticated actor id in a header. Reads may be anonymous, writes may not.
"""
from typing import Optional

from fastapi import Header, HTTPException, status

from config import ACTOR_HEADER, SESSION_HEADER


def optional_actor(actor_id: Optional[str] = Header(None, alias=ACTOR_HEADER)) -> Optional[str]:
    """Actor id if the request carries one, otherwise None (anonymous reader)."""
    return actor_id or None


def require_actor(actor_id: Optional[str] = Header(None, alias=ACTOR_HEADER)) -> str:
    """Actor id of an authenticated request; 401 when missing."""
    if not actor_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {ACTOR_HEADER} header"
        )
    return actor_id


def collaboration_session(session_id: Optional[str] = Header(None, alias=SESSION_HEADER)) -> Optional[str]:
    """Collaboration session of the sender, excluded from the resulting broadcast."""
    return session_id or None
