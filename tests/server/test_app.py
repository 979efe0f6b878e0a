"""
End-to-end tests for the WebSocket server and its command line.
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager

import pytest
from websockets.asyncio.client import connect

from cardroom.config import ServerConfig, TableConfig
from cardroom.events import EngineEventType, EventEmitter
from cardroom.server.app import CardroomServer, build_server, parse_args


@asynccontextmanager
async def running_server(**table_options):
    server = CardroomServer(
        ServerConfig(host="127.0.0.1", port=0),
        TableConfig(**table_options),
        event_bus=EventEmitter(),
    )
    await server.start()
    try:
        yield server
    finally:
        await server.shutdown()


async def receive(websocket, message_type):
    """Read frames until one of ``message_type`` arrives."""
    while True:
        message = json.loads(await asyncio.wait_for(websocket.recv(), timeout=2))
        if message["type"] == message_type:
            return message


async def request(websocket, message_type, **data):
    await websocket.send(json.dumps({"type": message_type, "data": data}))


async def state_where(websocket, predicate):
    """Read state updates until one satisfies ``predicate``."""
    while True:
        update = await receive(websocket, "gameStateUpdate")
        if predicate(update["data"]["gameState"]):
            return update["data"]["gameState"]


@pytest.mark.asyncio
async def test_connect_and_join():
    async with running_server() as server:
        async with connect(f"ws://127.0.0.1:{server.port}") as websocket:
            hello = json.loads(await websocket.recv())
            assert hello["type"] == "connected"
            client_id = hello["data"]["clientId"]
            assert isinstance(hello["timestamp"], float)

            await request(websocket, "joinGame", roomId="R", playerName="Alice")

            joined = await receive(websocket, "playerJoined")
            assert joined["data"]["player"]["id"] == client_id
            update = await receive(websocket, "gameStateUpdate")
            assert update["data"]["gameState"]["players"][0]["name"] == "Alice"
            assert "deck" not in update["data"]["gameState"]


@pytest.mark.asyncio
async def test_malformed_frame_gets_error():
    async with running_server() as server:
        async with connect(f"ws://127.0.0.1:{server.port}") as websocket:
            await websocket.recv()

            await websocket.send("this is not json")

            error = await receive(websocket, "error")
            assert error["data"]["message"] == "Message is not valid JSON"


@pytest.mark.asyncio
async def test_round_between_two_clients():
    async with running_server(reset_countdown=0) as server:
        url = f"ws://127.0.0.1:{server.port}"
        async with connect(url) as alice, connect(url) as bob:
            await alice.recv()
            bob_id = json.loads(await bob.recv())["data"]["clientId"]
            await request(alice, "joinGame", roomId="R", playerName="Alice")
            await receive(alice, "playerJoined")
            await request(bob, "joinGame", roomId="R", playerName="Bob")
            await receive(bob, "playerJoined")

            for websocket in (alice, bob):
                await request(websocket, "playerReady", roomId="R")
            await state_where(bob, lambda s: s["phase"] == "betting")

            for websocket in (alice, bob):
                await request(websocket, "placeBet", roomId="R", amount=100)
            await state_where(bob, lambda s: s["phase"] == "playing")

            await request(alice, "stand", roomId="R")
            await state_where(bob, lambda s: s["currentPlayerId"] == bob_id)
            await request(bob, "stand", roomId="R")

            game_state = await state_where(alice, lambda s: s["phase"] == "gameOver")
            assert game_state["resetTimer"] == 0
            assert game_state["message"].startswith("Game over!")
            assert len(game_state["dealer"]["cards"]) >= 2
            assert all(p["status"] in ("win", "lose", "push") for p in game_state["players"])


@pytest.mark.asyncio
async def test_closing_a_socket_removes_the_player():
    async with running_server() as server:
        url = f"ws://127.0.0.1:{server.port}"
        async with connect(url) as bob:
            await bob.recv()
            await request(bob, "joinGame", roomId="R", playerName="Bob")
            await receive(bob, "playerJoined")

            async with connect(url) as alice:
                await alice.recv()
                await request(alice, "joinGame", roomId="R", playerName="Alice")
                await receive(alice, "playerJoined")

            left = await receive(bob, "playerLeft")
            assert left["data"]["playerName"] == "Alice"
            assert [p["name"] for p in left["data"]["gameState"]["players"]] == ["Bob"]


@pytest.mark.asyncio
async def test_table_events_are_logged_until_shutdown(caplog):
    caplog.set_level(logging.DEBUG, logger="cardroom.server")
    async with running_server() as server:
        bus = server.event_bus
        bus.emit(
            EngineEventType.PLAYER_JOINED,
            {"game_id": "R", "player_id": "c1", "player_name": "Alice", "waiting": False},
        )
        bus.emit(
            EngineEventType.PLAYER_LEFT,
            {"game_id": "R", "player_id": "c1", "player_name": "Alice"},
        )
        bus.emit(EngineEventType.ERROR, {"connection_id": "c9", "message": "bad frame"})

    messages = [(r.levelno, r.getMessage()) for r in caplog.records if r.name == "cardroom.server"]
    assert (logging.INFO, "Alice joined room R") in messages
    assert (logging.INFO, "Alice left room R") in messages
    assert (logging.WARNING, "Connection c9: bad frame") in messages
    assert any(
        level == logging.DEBUG and text.startswith("PLAYER_JOINED") for level, text in messages
    )

    caplog.clear()
    bus.emit(EngineEventType.ERROR, {"connection_id": "c9", "message": "after shutdown"})
    assert not [r for r in caplog.records if r.name == "cardroom.server"]


@pytest.mark.asyncio
async def test_health_endpoint():
    async with running_server() as server:
        reader, writer = await asyncio.open_connection("127.0.0.1", server.port)
        writer.write(b"GET /health HTTP/1.1\r\nHost: localhost\r\n\r\n")
        await writer.drain()

        raw = await asyncio.wait_for(reader.read(), timeout=2)
        writer.close()

        head, _, body = raw.decode("utf-8").partition("\r\n\r\n")
        assert head.startswith("HTTP/1.1 200")
        assert "Content-Type: application/json" in head
        payload = json.loads(body)
        assert payload["status"] == "ok"
        assert payload["websocket"] is True
        assert payload["rooms"] == 0
        assert "timestamp" in payload


def test_parse_args_defaults_from_environment():
    args = parse_args([], environ={"PORT": "4000", "HOST": "127.0.0.1"})

    assert args.port == 4000
    assert args.host == "127.0.0.1"
    assert args.log_level == "INFO"
    assert args.reset_countdown == 5
    assert args.starting_chips == 1000


def test_parse_args_flags_win():
    args = parse_args(
        ["--port", "5000", "--log-level", "debug", "--reset-countdown", "0"],
        environ={"PORT": "4000"},
    )

    assert args.port == 5000
    assert args.log_level == "DEBUG"
    assert args.reset_countdown == 0


def test_build_server():
    args = parse_args(["--port", "0", "--starting-chips", "500"], environ={})

    server = build_server(args)

    assert server.config.port == 0
    assert server.directory.engine.config.starting_chips == 500
    assert server.port == 0
