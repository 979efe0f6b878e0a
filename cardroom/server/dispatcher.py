"""
Event dispatcher for the Cardroom server.

The dispatcher is the boundary between the transport and the table state
machine. It turns inbound frames into commands, applies them through the
`GameDirectory`, publishes the resulting messages on the `RoomChannel`, emits
engine events on the event bus and runs the deferred gameOver countdown.

Every command is handled to completion before the next one starts: nothing
between parsing a frame and publishing its results awaits.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from cardroom.events.emitter import EngineEventType, EventBus, EventEmitter
from cardroom.events.websocket import ClientMessage, RoomChannel, ServerMessage
from cardroom.exceptions import MalformedPayloadError
from cardroom.server.directory import GameDirectory
from cardroom.server.protocol import decode_message, parse_command
from cardroom.state.commands import Command, Join, Tick
from cardroom.state.effects import (
    Broadcast,
    CancelCountdown,
    Reply,
    ScheduleCountdown,
    Transition,
)
from cardroom.state.models import GamePhase

logger = logging.getLogger("cardroom.server.dispatcher")


class TableDispatcher:
    """
    Routes client actions to tables and table output back to clients.

    Attributes:
        directory: The rooms served by this dispatcher
        channel: Room-scoped channel used to reach clients
        event_bus: Emitter receiving engine events
    """

    def __init__(
        self,
        directory: GameDirectory,
        channel: RoomChannel,
        event_bus: Optional[EventEmitter] = None,
    ):
        self.directory = directory
        self.channel = channel
        self.event_bus = event_bus or EventBus.get_instance()
        self._countdowns: Dict[str, asyncio.Task] = {}

    @property
    def tick_interval(self) -> float:
        return self.directory.engine.config.tick_interval

    def handle_message(self, connection_id: str, raw: Any) -> Optional[Transition]:
        """
        Handle one raw frame from a client.

        Malformed frames are answered with an ``error`` message to the sender
        and never reach a table.

        Args:
            connection_id: Id of the sending connection
            raw: The text frame as received

        Returns:
            The transition that was applied, if any
        """
        try:
            message_type, data = decode_message(raw)
            return self.dispatch(connection_id, message_type, data)
        except MalformedPayloadError as e:
            logger.warning(f"Rejected message from {connection_id}: {e}")
            self.channel.send(connection_id, ServerMessage.ERROR, {"message": str(e)})
            self.event_bus.emit(
                EngineEventType.ERROR,
                {"connection_id": connection_id, "message": str(e)},
            )
            return None

    def dispatch(
        self, connection_id: str, message_type: str, data: Dict[str, Any]
    ) -> Optional[Transition]:
        """
        Handle one decoded client action.

        Raises:
            MalformedPayloadError: If the action or its payload is invalid
        """
        room_id, command = parse_command(message_type, data, connection_id)
        logger.debug(f"{message_type} from {connection_id} for room {room_id}")

        if message_type == ClientMessage.JOIN_GAME:
            return self.join(room_id, command)
        return self.handle_command(room_id, command)

    def join(self, room_id: str, command: Join) -> Transition:
        """
        Seat a connection at a room, creating the room if needed.

        A connection sits at one table at a time, so it first leaves any other
        room it belongs to.
        """
        current = self.directory.find_by_connection(command.connection_id)
        if current is not None and current.id != room_id:
            self.disconnect(command.connection_id)

        self.directory.get_or_create(room_id)
        transition = self.directory.apply(room_id, command)
        if transition.state.has_member(command.connection_id):
            self.channel.join(command.connection_id, room_id)
        self._commit(room_id, transition, command.connection_id)
        return transition

    def handle_command(self, room_id: str, command: Command) -> Optional[Transition]:
        """
        Apply a command to an existing room and publish the result.

        Commands for rooms that do not exist are dropped.
        """
        transition = self.directory.apply(room_id, command)
        if transition is None:
            logger.debug(f"Dropping {type(command).__name__} for unknown room {room_id}")
            return None
        self._commit(room_id, transition, command.connection_id)
        return transition

    def disconnect(self, connection_id: str) -> Optional[Transition]:
        """
        Remove a connection from its table after the socket closed.

        Runs in every phase; the departing connection does not receive the
        resulting broadcasts.
        """
        self.channel.leave(connection_id)
        result = self.directory.remove_player(connection_id)
        if result is None:
            return None

        room_id, transition = result
        self._commit(room_id, transition, connection_id)
        return transition

    def _commit(
        self, room_id: str, transition: Transition, connection_id: Optional[str]
    ) -> None:
        """Emit events, deliver messages and run effects of a stored transition."""
        for event in transition.events:
            self.event_bus.emit(event.event_type, event.data)

        for message in transition.messages:
            if isinstance(message, Broadcast):
                self.channel.publish(room_id, message.event, message.payload)
            elif isinstance(message, Reply) and connection_id is not None:
                self.channel.send(connection_id, message.event, message.payload)

        for effect in transition.effects:
            if isinstance(effect, ScheduleCountdown):
                self._schedule_countdown(room_id, effect)
            elif isinstance(effect, CancelCountdown):
                self._cancel_countdown(room_id)

        if room_id not in self.directory:
            self._cancel_countdown(room_id)

    def _schedule_countdown(self, room_id: str, effect: ScheduleCountdown) -> None:
        self._cancel_countdown(room_id)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, countdown for room {room_id} not started")
            return

        self._countdowns[room_id] = loop.create_task(
            self._run_countdown(room_id, effect.round_number, effect.seconds)
        )

    def _cancel_countdown(self, room_id: str) -> None:
        task = self._countdowns.pop(room_id, None)
        if task is not None and not task.done():
            task.cancel()
            logger.debug(f"Cancelled countdown for room {room_id}")

    async def _run_countdown(self, room_id: str, round_number: int, seconds: int) -> None:
        """Apply one tick per interval until the table resets or the round changes."""
        try:
            for _ in range(seconds):
                await asyncio.sleep(self.tick_interval)
                transition = self.handle_command(room_id, Tick(round_number=round_number))
                if transition is None:
                    return
                state = transition.state
                if state.phase != GamePhase.GAME_OVER or state.round_number != round_number:
                    return
        finally:
            if self._countdowns.get(room_id) is asyncio.current_task():
                del self._countdowns[room_id]

    def has_countdown(self, room_id: str) -> bool:
        """True if a countdown is pending for the room."""
        task = self._countdowns.get(room_id)
        return task is not None and not task.done()

    async def shutdown(self) -> None:
        """Cancel every pending countdown."""
        tasks = list(self._countdowns.values())
        self._countdowns.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
