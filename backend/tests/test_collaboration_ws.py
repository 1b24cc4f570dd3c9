"""WebSocket tests for real-time setlist collaboration."""
import pytest
import sys
import os
from fastapi.testclient import TestClient
from fastapi.websockets import WebSocketDisconnect

# Add src to path to match how the routes import
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from main import app
from models import catalog_repository
from models.song import Song
from models.store import clear_all
from mutations.mutation_service import setlist_service

WS_PATH = "/api/ws/setlists"


@pytest.fixture(autouse=True)
def setup_test_data():
    clear_all()
    catalog_repository.save_song(Song(id="A", title="Alpha", duration=180, created_by="alice"))
    yield
    clear_all()


@pytest.fixture
def client():
    """Test client whose requests and sockets share one event loop."""
    with TestClient(app) as test_client:
        yield test_client


def create_setlist(client, owner: str, is_public: bool) -> str:
    response = client.post(
        "/api/setlists",
        json={"title": "Shared gig", "isPublic": is_public},
        headers={"X-Actor-Id": owner}
    )
    assert response.status_code == 201
    return response.json()["id"]


def open_session(websocket) -> str:
    """Read the greeting sent on connect and return the session id."""
    greeting = websocket.receive_json()
    assert greeting["type"] == "session"
    return greeting["sessionId"]


def test_edit_is_broadcast_to_peer_but_not_sender(client):
    """A edits while A and B are in the room: B gets one event, A none."""
    setlist_id = create_setlist(client, "alice", is_public=True)

    with client.websocket_connect(f"{WS_PATH}?actorId=alice") as ws_a, \
            client.websocket_connect(f"{WS_PATH}?actorId=bob") as ws_b:
        session_a = open_session(ws_a)
        open_session(ws_b)

        for ws in (ws_a, ws_b):
            ws.send_json({"type": "join-setlist", "setlistId": setlist_id})
            joined = ws.receive_json()
            assert joined == {"type": "joined", "setlistId": setlist_id, "version": 1}

        response = client.post(
            f"/api/setlists/{setlist_id}/songs",
            json={"setIndex": 0, "songId": "A"},
            headers={"X-Actor-Id": "alice", "X-Session-Id": session_a}
        )
        assert response.status_code == 200

        event = ws_b.receive_json()
        assert event["type"] == "setlist-updated"
        assert event["setlistId"] == setlist_id
        assert event["version"] == 2
        assert event["changedBy"] == "alice"
        assert event["payload"]["action"] == "add_song"
        assert event["payload"]["setlist"]["totalDuration"] == 180

        # Nothing was queued for A, so the next message A sees is the pong
        ws_a.send_json({"type": "ping"})
        assert ws_a.receive_json() == {"type": "pong"}


def test_join_refused_without_read_access(client):
    setlist_id = create_setlist(client, "alice", is_public=False)

    with client.websocket_connect(f"{WS_PATH}?actorId=mallory") as ws:
        open_session(ws)
        ws.send_json({"type": "join-setlist", "setlistId": setlist_id})
        reply = ws.receive_json()

    assert reply["type"] == "error"
    assert setlist_service.broadcaster.room_state(setlist_id) == "empty"


def test_join_unknown_setlist(client):
    with client.websocket_connect(f"{WS_PATH}?actorId=alice") as ws:
        open_session(ws)
        ws.send_json({"type": "join-setlist", "setlistId": "missing"})
        assert ws.receive_json()["type"] == "error"


def test_leave_room(client):
    setlist_id = create_setlist(client, "alice", is_public=False)

    with client.websocket_connect(f"{WS_PATH}?actorId=alice") as ws:
        session_id = open_session(ws)
        ws.send_json({"type": "join-setlist", "setlistId": setlist_id})
        ws.receive_json()
        assert session_id in setlist_service.broadcaster.participants(setlist_id)

        ws.send_json({"type": "leave-setlist", "setlistId": setlist_id})
        assert ws.receive_json() == {"type": "left", "setlistId": setlist_id, "wasMember": True}
        assert setlist_service.broadcaster.room_state(setlist_id) == "empty"


def test_bad_messages_get_error_replies(client):
    with client.websocket_connect(f"{WS_PATH}?actorId=alice") as ws:
        open_session(ws)

        ws.send_text("not json")
        assert ws.receive_json() == {"type": "error", "detail": "Invalid JSON"}

        ws.send_json({"type": "dance"})
        assert ws.receive_json()["type"] == "error"

        ws.send_json(["not", "an", "object"])
        assert ws.receive_json()["type"] == "error"


def test_connection_without_actor_is_closed(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect(WS_PATH) as ws:
            ws.receive_json()

    assert exc_info.value.code == 4001


def test_malformed_messages_keep_session_and_rooms(client):
    """Non-string setlist ids and binary frames get error replies, the session survives."""
    setlist_id = create_setlist(client, "alice", is_public=False)

    with client.websocket_connect(f"{WS_PATH}?actorId=alice") as ws:
        session_id = open_session(ws)
        ws.send_json({"type": "join-setlist", "setlistId": setlist_id})
        assert ws.receive_json()["type"] == "joined"

        ws.send_json({"type": "join-setlist", "setlistId": ["x"]})
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "leave-setlist", "setlistId": {"id": setlist_id}})
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "join-setlist"})
        assert ws.receive_json()["type"] == "error"

        ws.send_bytes(b'{"type": "ping"}')
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}
        assert session_id in setlist_service.broadcaster.participants(setlist_id)
