"""
Tests for the WebSocket hub and its room channel.
"""

from unittest.mock import MagicMock

import pytest

from cardroom.events.websocket import ServerMessage, WebSocketClient, WebSocketHub


@pytest.fixture
def hub():
    return WebSocketHub()


@pytest.fixture
def connect(hub):
    """Connect a client whose messages are collected in a list."""

    def _connect(client_id):
        inbox = []
        hub.connect_client(client_id, inbox.append)
        return inbox

    return _connect


def test_client_send_wraps_message():
    callback = MagicMock()
    client = WebSocketClient("c1", callback)

    client.send(ServerMessage.GAME_STATE_UPDATE, {"gameState": {}})

    message = callback.call_args[0][0]
    assert message["type"] == "gameStateUpdate"
    assert message["data"] == {"gameState": {}}
    assert isinstance(message["timestamp"], float)


def test_connect_sends_client_id(hub, connect):
    inbox = connect("c1")

    assert inbox[0]["type"] == ServerMessage.CONNECTED
    assert inbox[0]["data"] == {"clientId": "c1"}
    assert "c1" in hub.get_connected_clients()


def test_connect_generates_id(hub):
    client_id = hub.connect_client()
    assert client_id in hub.clients


def test_publish_reaches_room_members_only(hub, connect):
    alice, bob, carol = connect("c1"), connect("c2"), connect("c3")
    hub.join("c1", "R")
    hub.join("c2", "R")
    hub.join("c3", "S")

    sent = hub.publish("R", ServerMessage.GAME_STATE_UPDATE, {"n": 1})

    assert sent == 2
    assert alice[-1]["data"] == {"n": 1}
    assert bob[-1]["data"] == {"n": 1}
    assert carol[-1]["type"] == ServerMessage.CONNECTED


def test_publish_to_unknown_room(hub):
    assert hub.publish("nowhere", ServerMessage.GAME_STATE_UPDATE, {}) == 0


def test_send_to_one_client(hub, connect):
    inbox = connect("c1")

    assert hub.send("c1", ServerMessage.ERROR, {"message": "nope"})
    assert inbox[-1]["data"] == {"message": "nope"}
    assert not hub.send("zz", ServerMessage.ERROR, {})


def test_joining_another_room_leaves_the_first(hub, connect):
    connect("c1")
    hub.join("c1", "R")

    hub.join("c1", "S")

    assert hub.room_members("R") == []
    assert "R" not in hub.rooms
    assert hub.room_members("S") == ["c1"]
    assert hub.get_connected_clients()["c1"]["room_id"] == "S"


def test_join_unknown_client_is_ignored(hub):
    hub.join("zz", "R")
    assert hub.room_members("R") == []


def test_leave_and_disconnect(hub, connect):
    connect("c1")
    connect("c2")
    hub.join("c1", "R")
    hub.join("c2", "R")

    hub.leave("c1")
    assert hub.room_members("R") == ["c2"]

    hub.disconnect_client("c2")
    assert "R" not in hub.rooms
    assert "c2" not in hub.clients


def test_failing_client_does_not_block_room(hub, connect):
    def broken(message):
        if message["type"] != ServerMessage.CONNECTED:
            raise ConnectionError("socket gone")

    hub.connect_client("c1", broken)
    inbox = connect("c2")
    hub.join("c1", "R")
    hub.join("c2", "R")

    sent = hub.publish("R", ServerMessage.GAME_STATE_UPDATE, {})

    assert sent == 1
    assert inbox[-1]["type"] == ServerMessage.GAME_STATE_UPDATE
    assert not hub.send("c1", ServerMessage.ERROR, {})
