"""
WebSocket server for Cardroom.

Serves the table dispatcher over WebSocket connections and answers a plain
HTTP liveness probe on ``/health`` from the same port.

Usage:
    cardroom-server --host 0.0.0.0 --port 3001
"""

import argparse
import asyncio
import json
import logging
import signal
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Dict, List, Optional

from websockets.asyncio.server import ServerConnection, serve
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response

from cardroom.config import ServerConfig, TableConfig
from cardroom.events.emitter import (
    EngineEventType,
    EventBus,
    EventEmitter,
    EventPriority,
)
from cardroom.events.websocket import WebSocketHub
from cardroom.server.directory import GameDirectory
from cardroom.server.dispatcher import TableDispatcher
from cardroom.state.transitions import StateTransitionEngine

logger = logging.getLogger("cardroom.server")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
HEALTH_PATH = "/health"


class CardroomServer:
    """
    WebSocket server hosting blackjack rooms.

    Each connection gets an opaque client id and an outbound queue drained by
    a single writer task, so messages reach a client in the order the
    dispatcher produced them.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        table_config: Optional[TableConfig] = None,
        event_bus: Optional[EventEmitter] = None,
    ):
        """
        Initialize the server.

        Args:
            config: Host, port and log level
            table_config: House rules for every room
            event_bus: Emitter receiving engine events (defaults to the EventBus)
        """
        self.config = config or ServerConfig()
        self.event_bus = event_bus or EventBus.get_instance()
        self.hub = WebSocketHub()
        self.directory = GameDirectory(
            StateTransitionEngine(table_config), event_bus=self.event_bus
        )
        self.dispatcher = TableDispatcher(self.directory, self.hub, self.event_bus)
        self.server = None
        self._stopped: Optional[asyncio.Future] = None
        self._event_subscriptions: List[Any] = []

    @property
    def port(self) -> int:
        """Port actually bound, useful when configured with port 0."""
        if self.server is None:
            return self.config.port
        return self.server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        """Start accepting connections."""
        self._event_subscriptions = [
            self.event_bus.on(EngineEventType.ERROR, self._log_error, EventPriority.HIGH),
            self.event_bus.on(EngineEventType.PLAYER_JOINED, self._log_player_joined),
            self.event_bus.on(EngineEventType.PLAYER_LEFT, self._log_player_left),
            self.event_bus.on_any(self._log_event, EventPriority.LOW),
        ]
        self.server = await serve(
            self.handle_client,
            self.config.host,
            self.config.port,
            process_request=self.process_request,
        )
        logger.info(f"Cardroom server started on ws://{self.config.host}:{self.port}")

    async def run(self) -> None:
        """Start the server and block until a shutdown is requested."""
        await self.start()

        loop = asyncio.get_running_loop()
        self._stopped = loop.create_future()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._request_stop)
            except NotImplementedError:
                logger.debug(f"Signal handler for {sig.name} not supported")

        try:
            await self._stopped
        finally:
            await self.shutdown()

    def _request_stop(self) -> None:
        if self._stopped is not None and not self._stopped.done():
            self._stopped.set_result(None)

    async def shutdown(self) -> None:
        """Stop accepting connections and cancel pending countdowns."""
        logger.info("Shutting down Cardroom server...")
        await self.dispatcher.shutdown()

        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()
            self.server = None

        for unsubscribe in self._event_subscriptions:
            unsubscribe()
        self._event_subscriptions = []

    def process_request(
        self, connection: ServerConnection, request: Request
    ) -> Optional[Response]:
        """Answer the liveness probe; let every other request upgrade."""
        if request.path.split("?", 1)[0] != HEALTH_PATH:
            return None

        body = json.dumps(
            {
                "status": "ok",
                "websocket": True,
                "rooms": len(self.directory),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )
        response = connection.respond(HTTPStatus.OK, body + "\n")
        del response.headers["Content-Type"]
        response.headers["Content-Type"] = "application/json"
        return response

    async def handle_client(self, websocket: ServerConnection) -> None:
        """
        Handle a WebSocket client connection until it closes.

        Args:
            websocket: WebSocket connection
        """
        outbox: asyncio.Queue = asyncio.Queue()
        client_id = self.hub.connect_client(send_callback=outbox.put_nowait)
        writer = asyncio.create_task(self._drain(websocket, outbox))

        try:
            async for raw in websocket:
                self.dispatcher.handle_message(client_id, raw)
        except ConnectionClosed as e:
            logger.info(f"Connection {client_id} closed: {e}")
        finally:
            self.dispatcher.disconnect(client_id)
            self.hub.disconnect_client(client_id)
            writer.cancel()
            await asyncio.gather(writer, return_exceptions=True)

    async def _drain(self, websocket: ServerConnection, outbox: asyncio.Queue) -> None:
        """Send queued messages to one client, in order."""
        while True:
            message = await outbox.get()
            try:
                await websocket.send(json.dumps(message, ensure_ascii=False))
            except ConnectionClosed:
                return

    def _log_error(self, data: Dict[str, Any]) -> None:
        logger.warning(f"Connection {data.get('connection_id')}: {data.get('message')}")

    def _log_player_joined(self, data: Dict[str, Any]) -> None:
        suffix = " (waiting for next round)" if data.get("waiting") else ""
        logger.info(f"{data['player_name']} joined room {data['game_id']}{suffix}")

    def _log_player_left(self, data: Dict[str, Any]) -> None:
        logger.info(f"{data['player_name']} left room {data['game_id']}")

    def _log_event(self, event: Any) -> None:
        event_type, data = event
        logger.debug(f"{event_type}: {data}")


def parse_args(
    argv: Optional[List[str]] = None, environ: Optional[Dict[str, str]] = None
) -> argparse.Namespace:
    """Parse command-line arguments, taking defaults from the environment."""
    defaults = ServerConfig.from_env(environ)
    table_defaults = TableConfig()

    parser = argparse.ArgumentParser(description="Multiplayer blackjack server")
    parser.add_argument("--host", type=str, default=defaults.host, help="Host to bind to")
    parser.add_argument("--port", type=int, default=defaults.port, help="Port to bind to")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        default=defaults.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level",
    )
    parser.add_argument(
        "--reset-countdown",
        type=int,
        default=table_defaults.reset_countdown,
        help="Seconds before a finished round resets (0 waits for nextGame)",
    )
    parser.add_argument(
        "--starting-chips",
        type=int,
        default=table_defaults.starting_chips,
        help="Chips given to each new player",
    )
    return parser.parse_args(argv)


def build_server(args: argparse.Namespace) -> CardroomServer:
    """Create a server from parsed command-line arguments."""
    config = ServerConfig(host=args.host, port=args.port, log_level=args.log_level)
    table_config = TableConfig(
        reset_countdown=args.reset_countdown, starting_chips=args.starting_chips
    )
    return CardroomServer(config, table_config)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``cardroom-server`` command."""
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT)
    server = build_server(args)
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
