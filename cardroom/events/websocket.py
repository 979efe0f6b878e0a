"""
Room channel for the Cardroom server.

This module provides the pub/sub boundary between the table dispatcher and
connected clients: a room-scoped broadcast and a point-to-point reply. The
`WebSocketHub` implementation tracks connected WebSocket clients and the room
each one has joined; the actual socket writes are done by the callback each
client was registered with.
"""

import logging
import threading
import time
import uuid
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Set

# Setup logging
logger = logging.getLogger("cardroom.events.websocket")


class ClientMessage:
    """Message types that clients can send to the server."""

    JOIN_GAME = "joinGame"
    PLAYER_READY = "playerReady"
    PLACE_BET = "placeBet"
    HIT = "hit"
    STAND = "stand"
    DOUBLE_DOWN = "doubleDown"
    RESET_GAME = "resetGame"
    NEXT_GAME = "nextGame"
    DEBUG_GAME_STATE = "debugGameState"


class ServerMessage:
    """Message types that the server can send to clients."""

    CONNECTED = "connected"
    PLAYER_JOINED = "playerJoined"
    PLAYER_LEFT = "playerLeft"
    GAME_STATE_UPDATE = "gameStateUpdate"
    ERROR = "error"


class RoomChannel(ABC):
    """
    Room-scoped publish/subscribe channel.

    Implementations deliver messages in order per connection.
    """

    @abstractmethod
    def join(self, client_id: str, room_id: str) -> None:
        """Subscribe a connection to a room."""

    @abstractmethod
    def leave(self, client_id: str) -> None:
        """Unsubscribe a connection from its room."""

    @abstractmethod
    def publish(self, room_id: str, message_type: str, data: Dict[str, Any]) -> int:
        """
        Send a message to every connection in a room.

        Returns:
            Number of connections the message was sent to
        """

    @abstractmethod
    def send(self, client_id: str, message_type: str, data: Dict[str, Any]) -> bool:
        """
        Send a message to one connection.

        Returns:
            True if the message was handed to the connection
        """


class WebSocketClient:
    """
    Represents a connected WebSocket client.

    This class tracks the room a client has joined and provides methods
    for sending messages to the client.
    """

    def __init__(self, client_id: str, send_callback: Callable[[Dict[str, Any]], None]):
        """
        Initialize a WebSocket client.

        Args:
            client_id: Unique identifier for the client
            send_callback: Function to call to send a message to the client
        """
        self.id = client_id
        self._send = send_callback
        self.room_id: Optional[str] = None
        self.connected_at = time.time()
        self.last_activity = time.time()

    def send(self, message_type: str, data: Dict[str, Any]) -> None:
        """
        Send a message to the client.

        Args:
            message_type: Type of message to send
            data: Data to include in the message
        """
        message = {"type": message_type, "data": data, "timestamp": time.time()}
        self._send(message)
        self.last_activity = time.time()


class WebSocketHub(RoomChannel):
    """
    Tracks WebSocket clients and routes room broadcasts to them.
    """

    def __init__(self):
        """Initialize the hub."""
        self.clients: Dict[str, WebSocketClient] = {}
        self.rooms: Dict[str, Set[str]] = {}
        self._client_lock = threading.RLock()

    def connect_client(
        self,
        client_id: Optional[str] = None,
        send_callback: Optional[Callable[[Dict[str, Any]], None]] = None,
    ) -> str:
        """
        Connect a new WebSocket client.

        Args:
            client_id: Optional client ID. If not provided, a new ID will be generated.
            send_callback: Function to call to send a message to the client

        Returns:
            The client ID
        """
        if client_id is None:
            client_id = str(uuid.uuid4())

        if send_callback is None:
            send_callback = lambda msg: None

        client = WebSocketClient(client_id, send_callback)

        with self._client_lock:
            self.clients[client_id] = client

        client.send(ServerMessage.CONNECTED, {"clientId": client_id})

        logger.info(f"Client {client_id} connected")
        return client_id

    def disconnect_client(self, client_id: str) -> None:
        """
        Forget a WebSocket client and its room membership.

        Args:
            client_id: ID of the client to disconnect
        """
        with self._client_lock:
            self.leave(client_id)
            client = self.clients.pop(client_id, None)

        if client:
            logger.info(f"Client {client_id} disconnected")

    def join(self, client_id: str, room_id: str) -> None:
        with self._client_lock:
            client = self.clients.get(client_id)
            if client is None:
                logger.warning(f"Cannot add unknown client {client_id} to room {room_id}")
                return
            if client.room_id is not None and client.room_id != room_id:
                self.leave(client_id)
            client.room_id = room_id
            self.rooms.setdefault(room_id, set()).add(client_id)

    def leave(self, client_id: str) -> None:
        with self._client_lock:
            client = self.clients.get(client_id)
            if client is None or client.room_id is None:
                return
            members = self.rooms.get(client.room_id)
            if members is not None:
                members.discard(client_id)
                if not members:
                    del self.rooms[client.room_id]
            client.room_id = None

    def publish(self, room_id: str, message_type: str, data: Dict[str, Any]) -> int:
        with self._client_lock:
            members = [
                self.clients[client_id]
                for client_id in sorted(self.rooms.get(room_id, ()))
                if client_id in self.clients
            ]

        count = 0
        for client in members:
            try:
                client.send(message_type, data)
                count += 1
            except Exception as e:
                logger.warning(f"Error broadcasting to client {client.id}: {e}")

        return count

    def send(self, client_id: str, message_type: str, data: Dict[str, Any]) -> bool:
        with self._client_lock:
            client = self.clients.get(client_id)

        if client:
            try:
                client.send(message_type, data)
                return True
            except Exception as e:
                logger.warning(f"Error sending message to client {client_id}: {e}")

        return False

    def room_members(self, room_id: str) -> List[str]:
        """Ids of the clients subscribed to a room."""
        with self._client_lock:
            return sorted(self.rooms.get(room_id, ()))

    def get_connected_clients(self) -> Dict[str, Dict[str, Any]]:
        """
        Get information about all connected clients.

        Returns:
            Dictionary mapping client IDs to client information
        """
        result = {}
        with self._client_lock:
            for client_id, client in self.clients.items():
                result[client_id] = {
                    "id": client.id,
                    "connected_at": client.connected_at,
                    "last_activity": client.last_activity,
                    "room_id": client.room_id,
                }

        return result
