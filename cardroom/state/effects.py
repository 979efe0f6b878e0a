"""
Outputs of a state transition.

A transition never talks to the network or the clock. Instead it describes
what should happen next: messages to publish, deferred actions to schedule,
and engine events to emit on the event bus.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from cardroom.events.emitter import EngineEventType
from cardroom.state.models import GameState


@dataclass(frozen=True)
class Broadcast:
    """Publish ``event`` with ``payload`` to every connection in the room."""

    event: str
    payload: Dict[str, Any]


@dataclass(frozen=True)
class Reply:
    """Send ``event`` with ``payload`` to the connection that sent the command."""

    event: str
    payload: Dict[str, Any]


@dataclass(frozen=True)
class ScheduleCountdown:
    """
    Start the gameOver countdown.

    Attributes:
        round_number: Round the countdown belongs to
        seconds: Number of ticks before the table resets
    """

    round_number: int
    seconds: int


@dataclass(frozen=True)
class CancelCountdown:
    """Cancel a pending countdown for the room, if any."""


@dataclass(frozen=True)
class EngineEvent:
    """An event to emit on the event bus once the transition is committed."""

    event_type: EngineEventType
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Transition:
    """
    Result of applying a command to a table.

    Attributes:
        state: The new table state
        messages: Broadcasts and replies, in the order they must be sent
        effects: Deferred actions for the scheduler
        events: Engine events for the event bus
    """

    state: GameState
    messages: Tuple[Any, ...] = ()
    effects: Tuple[Any, ...] = ()
    events: Tuple[EngineEvent, ...] = ()
