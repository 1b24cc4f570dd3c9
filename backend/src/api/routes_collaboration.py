"""Real-time collaboration over WebSocket.

Protocol (JSON messages):
    server -> client  {"type": "session", "sessionId": ...} on connect
    client -> server  {"type": "join-setlist", "setlistId": ...}
    client -> server  {"type": "leave-setlist", "setlistId": ...}
    client -> server  {"type": "ping"}
    server -> client  {"type": "joined" | "left" | "pong" | "error", ...}
    server -> client  {"type": "setlist-updated", "setlistId", "version", "changedBy", "payload"}

Clients pass their sessionId in the X-Session-Id header of mutation requests
so their own edits are not echoed back to them.
"""
import asyncio
import contextlib
from typing import Any, Dict, Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from models import setlist_repository
from mutations.mutation_service import setlist_service
from setlist_engine.collaboration import CollaborationSession
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["collaboration"])


async def _forward_events(websocket: WebSocket, session: CollaborationSession) -> None:
    """Drain the session's event queue onto the socket until cancelled."""
    while True:
        event = await session.queue.get()
        try:
            await websocket.send_json(event.model_dump(mode="json", by_alias=True))
        except Exception as e:
            logger.warning(f"Could not deliver version {event.version} to session {session.session_id}: {e}")
            return


async def _join(session: CollaborationSession, setlist_id: str) -> Dict[str, Any]:
    # Joining is only allowed for actors who may read the setlist
    setlist = setlist_repository.get_setlist(setlist_id)
    if not await setlist_service.evaluator.can_access(setlist, session.actor_id, "read"):
        logger.info(f"Session {session.session_id} refused join to setlist {setlist_id}")
        return {"type": "error", "setlistId": setlist_id, "detail": "Setlist not found or access denied"}

    setlist_service.broadcaster.join(setlist.id, session)
    return {"type": "joined", "setlistId": setlist.id, "version": setlist.version}


async def _handle_message(session: CollaborationSession, message: Any) -> Dict[str, Any]:
    """
    Handle one client message.

    Args:
        session: Sending session
        message: Decoded JSON message

    Returns:
        Reply to send back to the client
    """
    if not isinstance(message, dict):
        return {"type": "error", "detail": "Messages must be JSON objects"}

    message_type = message.get("type")
    setlist_id = message.get("setlistId")

    if message_type in ("join-setlist", "leave-setlist") and not (isinstance(setlist_id, str) and setlist_id):
        return {"type": "error", "detail": "setlistId must be a non-empty string"}

    if message_type == "join-setlist":
        return await _join(session, setlist_id)
    if message_type == "leave-setlist":
        left = setlist_service.broadcaster.leave(setlist_id, session.session_id)
        return {"type": "left", "setlistId": setlist_id, "wasMember": left}
    if message_type == "ping":
        return {"type": "pong"}
    return {"type": "error", "detail": f"Unknown message type: {message_type}"}


@router.websocket("/ws/setlists")
async def setlist_collaboration(
    websocket: WebSocket,
    actor_id: Optional[str] = Query(None, alias="actorId")
):
    """
    WebSocket endpoint for co-editing setlists.

    The connection is one collaboration session. Disconnecting removes it
    from every room it joined.
    """
    if not actor_id:
        logger.warning("Collaboration connection attempt without actor id")
        await websocket.close(code=4001)
        return

    await websocket.accept()
    session = CollaborationSession(actor_id=actor_id)
    logger.info(f"Collaboration session {session.session_id} opened for {actor_id}")
    await websocket.send_json({"type": "session", "sessionId": session.session_id})

    forwarder = asyncio.create_task(_forward_events(websocket, session))
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                await websocket.send_json({"type": "error", "detail": "Invalid JSON"})
                continue
            except KeyError:
                # Binary frames carry no text payload
                await websocket.send_json({"type": "error", "detail": "Messages must be sent as text frames"})
                continue
            await websocket.send_json(await _handle_message(session, message))
    except WebSocketDisconnect:
        logger.info(f"Collaboration session {session.session_id} disconnected")
    finally:
        forwarder.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await forwarder
        setlist_service.broadcaster.disconnect(session.session_id)
