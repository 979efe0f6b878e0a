"""
Room directory for the Cardroom server.

The directory owns the mapping from room id to table state. Tables are created
lazily on the first join to a room and dropped as soon as nobody is seated or
waiting at them.
"""

import logging
import threading
from typing import Dict, Iterator, Optional, Tuple

from cardroom.events.emitter import EngineEventType, EventBus, EventEmitter
from cardroom.state.commands import Command, Disconnect
from cardroom.state.effects import Transition
from cardroom.state.models import GameState
from cardroom.state.transitions import StateTransitionEngine

logger = logging.getLogger("cardroom.server.directory")


class GameDirectory:
    """
    Mapping from room id to the table state of that room.

    All reads and writes go through an internal lock, so a directory can be
    shared between the event loop and other threads.
    """

    def __init__(
        self,
        engine: Optional[StateTransitionEngine] = None,
        event_bus: Optional[EventEmitter] = None,
    ):
        """
        Initialize an empty directory.

        Args:
            engine: State machine used to create and update tables
            event_bus: Emitter for room lifecycle events (defaults to the EventBus)
        """
        self.engine = engine or StateTransitionEngine()
        self.event_bus = event_bus or EventBus.get_instance()
        self._games: Dict[str, GameState] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)

    def __contains__(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._games

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._games))

    def get(self, room_id: str) -> Optional[GameState]:
        """Return the table for a room, or None if the room does not exist."""
        with self._lock:
            return self._games.get(room_id)

    def get_or_create(self, room_id: str) -> GameState:
        """
        Return the table for a room, creating it if needed.

        Args:
            room_id: Identifier of the room

        Returns:
            The existing table, or a new one in the waiting phase
        """
        with self._lock:
            game = self._games.get(room_id)
            if game is None:
                game = self.engine.new_game(room_id)
                self._games[room_id] = game
                created = True
            else:
                created = False

        if created:
            logger.info(f"Created game for room {room_id}")
            self.event_bus.emit(EngineEventType.GAME_CREATED, {"game_id": room_id})
        return game

    def find_by_connection(self, connection_id: str) -> Optional[GameState]:
        """
        Find the table a connection is seated or waiting at.

        Scans every room; the number of rooms and players is expected to be small.
        """
        with self._lock:
            for game in self._games.values():
                if game.has_member(connection_id):
                    return game
        return None

    def apply(self, room_id: str, command: Command) -> Optional[Transition]:
        """
        Apply a command to an existing room and store the result.

        The room is removed once it has no seated or waiting players.

        Args:
            room_id: Identifier of the room
            command: The command to apply

        Returns:
            The transition, or None if the room does not exist
        """
        with self._lock:
            game = self._games.get(room_id)
            if game is None:
                return None
            transition = self.engine.apply(game, command)
            if transition.state.is_empty:
                del self._games[room_id]
                removed = True
            else:
                self._games[room_id] = transition.state
                removed = False

        if removed:
            logger.info(f"Removed empty game for room {room_id}")
            self.event_bus.emit(EngineEventType.GAME_DESTROYED, {"game_id": room_id})
        return transition

    def remove_player(self, connection_id: str) -> Optional[Tuple[str, Transition]]:
        """
        Remove a connection from whichever table it belongs to.

        Args:
            connection_id: Id of the disconnected connection

        Returns:
            Tuple of (room id, transition), or None if the connection was not
            at any table
        """
        with self._lock:
            game = self.find_by_connection(connection_id)
            if game is None:
                return None
            transition = self.apply(game.id, Disconnect(connection_id))
        return game.id, transition
