"""Unit tests for the collaboration broadcaster."""
import asyncio

import pytest

from setlist_engine.collaboration import CollaborationBroadcaster, CollaborationSession, SetlistUpdatedEvent


def make_event(version: int = 2, setlist_id: str = "setlist-1") -> SetlistUpdatedEvent:
    return SetlistUpdatedEvent(setlist_id=setlist_id, version=version, changed_by="alice", payload={"action": "add_song"})


def drain(session: CollaborationSession):
    events = []
    while not session.queue.empty():
        events.append(session.queue.get_nowait())
    return events


@pytest.fixture
def broadcaster() -> CollaborationBroadcaster:
    return CollaborationBroadcaster()


def test_sender_is_excluded(broadcaster):
    """A edits: B gets exactly one event, A gets none."""
    a = CollaborationSession(actor_id="alice")
    b = CollaborationSession(actor_id="bob")
    broadcaster.join("setlist-1", a)
    broadcaster.join("setlist-1", b)

    delivered = broadcaster.emit("setlist-1", make_event(version=5), sender_session_id=a.session_id)

    assert delivered == 1
    assert drain(a) == []
    received = drain(b)
    assert len(received) == 1
    assert received[0].version == 5
    assert received[0].setlist_id == "setlist-1"


def test_emit_without_sender_reaches_everyone(broadcaster):
    sessions = [CollaborationSession(actor_id=f"user-{i}") for i in range(3)]
    for session in sessions:
        broadcaster.join("setlist-1", session)

    assert broadcaster.emit("setlist-1", make_event()) == 3


def test_events_stay_in_their_room(broadcaster):
    a = CollaborationSession(actor_id="alice")
    b = CollaborationSession(actor_id="bob")
    broadcaster.join("setlist-1", a)
    broadcaster.join("setlist-2", b)

    broadcaster.emit("setlist-1", make_event())

    assert len(drain(a)) == 1
    assert drain(b) == []


def test_emit_to_empty_room_is_a_no_op(broadcaster):
    assert broadcaster.emit("nobody-here", make_event()) == 0


def test_room_lifecycle(broadcaster):
    """Rooms become active on first join and empty when the last session leaves."""
    a = CollaborationSession(actor_id="alice")
    b = CollaborationSession(actor_id="bob")
    assert broadcaster.room_state("setlist-1") == "empty"

    broadcaster.join("setlist-1", a)
    broadcaster.join("setlist-1", a)
    broadcaster.join("setlist-1", b)
    assert broadcaster.room_state("setlist-1") == "active"
    assert sorted(broadcaster.participants("setlist-1")) == sorted([a.session_id, b.session_id])

    assert broadcaster.leave("setlist-1", a.session_id) is True
    assert broadcaster.leave("setlist-1", a.session_id) is False
    assert broadcaster.room_state("setlist-1") == "active"

    broadcaster.leave("setlist-1", b.session_id)
    assert broadcaster.room_state("setlist-1") == "empty"
    assert broadcaster.participants("setlist-1") == []


def test_disconnect_leaves_every_room(broadcaster):
    a = CollaborationSession(actor_id="alice")
    b = CollaborationSession(actor_id="bob")
    broadcaster.join("setlist-1", a)
    broadcaster.join("setlist-2", a)
    broadcaster.join("setlist-2", b)

    left = broadcaster.disconnect(a.session_id)

    assert sorted(left) == ["setlist-1", "setlist-2"]
    assert broadcaster.room_state("setlist-1") == "empty"
    assert broadcaster.participants("setlist-2") == [b.session_id]
    assert broadcaster.emit("setlist-2", make_event()) == 1
    assert drain(a) == []


def test_full_queue_drops_event_for_that_session_only(broadcaster):
    """A slow consumer never blocks or fails the broadcast."""
    slow = CollaborationSession(actor_id="slow", queue=asyncio.Queue(maxsize=1))
    fast = CollaborationSession(actor_id="fast")
    broadcaster.join("setlist-1", slow)
    broadcaster.join("setlist-1", fast)

    assert broadcaster.emit("setlist-1", make_event(version=2)) == 2
    assert broadcaster.emit("setlist-1", make_event(version=3)) == 1

    assert [e.version for e in drain(slow)] == [2]
    assert [e.version for e in drain(fast)] == [2, 3]


def test_session_requires_actor():
    with pytest.raises(ValueError, match="actor_id cannot be empty"):
        CollaborationSession(actor_id="")


def test_event_serializes_with_wire_names():
    data = make_event(version=7).model_dump(mode="json", by_alias=True)

    assert data["type"] == "setlist-updated"
    assert data["setlistId"] == "setlist-1"
    assert data["changedBy"] == "alice"
    assert data["version"] == 7
