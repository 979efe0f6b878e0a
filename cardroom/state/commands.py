"""
Commands accepted by the table state machine.

Every inbound client action, the implicit disconnect and the countdown tick
are represented as a frozen dataclass. `StateTransitionEngine.apply` takes a
table state and one command and returns the resulting transition.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Command:
    """
    Base class for table commands.

    Attributes:
        connection_id: Opaque id of the connection that sent the command
    """

    connection_id: str


@dataclass(frozen=True)
class Join(Command):
    """Seat a player, put them on the waiting list, or reconnect them by name."""

    player_name: str = "Player"


@dataclass(frozen=True)
class Ready(Command):
    """Mark the sender ready for the next round."""


@dataclass(frozen=True)
class Bet(Command):
    """Stake ``amount`` chips for the current round."""

    amount: int = 0


@dataclass(frozen=True)
class Hit(Command):
    """Draw one card."""


@dataclass(frozen=True)
class Stand(Command):
    """End the sender's turn."""


@dataclass(frozen=True)
class DoubleDown(Command):
    """Double the stake, draw exactly one card and end the turn."""


@dataclass(frozen=True)
class Reset(Command):
    """Force the table back to the waiting phase."""


@dataclass(frozen=True)
class NextGame(Command):
    """Start the next round once the current one is over."""


@dataclass(frozen=True)
class Disconnect(Command):
    """Remove the sender from the table."""


@dataclass(frozen=True)
class DebugState(Command):
    """Re-broadcast the current state."""


@dataclass(frozen=True)
class Tick(Command):
    """
    One step of the gameOver countdown.

    Attributes:
        round_number: Round the countdown was scheduled for; ticks for any
            other round are ignored
    """

    connection_id: Optional[str] = None
    round_number: int = 0
