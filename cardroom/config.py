"""
Configuration for the Cardroom table engine and server.

`TableConfig` holds the house rules that the state machine reads, and
`ServerConfig` holds the process settings for the WebSocket server. Server
defaults come from the environment and can be overridden on the command line.
"""

import os
from dataclasses import dataclass, asdict
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class TableConfig:
    """
    House rules for a blackjack table.

    Attributes:
        starting_chips: Chips given to a player on first join
        min_players: Seated players needed before betting can start
        max_players: Seats plus waiting-list places available in a room
        dealer_stands_on: Dealer draws while the dealer score is below this
        reset_countdown: Seconds shown on the gameOver countdown
        tick_interval: Seconds between two countdown ticks
    """

    starting_chips: int = 1000
    min_players: int = 2
    max_players: int = 7
    dealer_stands_on: int = 17
    reset_countdown: int = 5
    tick_interval: float = 1.0

    def __post_init__(self):
        if self.min_players < 1:
            raise ValueError("min_players must be at least 1")
        if self.max_players < self.min_players:
            raise ValueError("max_players must not be lower than min_players")
        if self.starting_chips < 0:
            raise ValueError("starting_chips must not be negative")
        if self.reset_countdown < 0:
            raise ValueError("reset_countdown must not be negative")
        if self.tick_interval <= 0:
            raise ValueError("tick_interval must be positive")

    def to_dict(self) -> Dict[str, Any]:
        """Convert the table rules to a dictionary for serialization."""
        return asdict(self)


@dataclass(frozen=True)
class ServerConfig:
    """
    Process settings for the WebSocket server.

    Attributes:
        host: Interface to bind to
        port: TCP port for both WebSocket connections and the health probe
        log_level: Name of the root logging level
    """

    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerConfig":
        """
        Build a server configuration from environment variables.

        Reads ``HOST``, ``PORT`` and ``LOG_LEVEL``; missing variables keep
        their defaults.

        Raises:
            ValueError: If ``PORT`` is not an integer
        """
        environ = os.environ if environ is None else environ
        defaults = cls()
        port = environ.get("PORT")
        return cls(
            host=environ.get("HOST", defaults.host),
            port=int(port) if port else defaults.port,
            log_level=environ.get("LOG_LEVEL", defaults.log_level).upper(),
        )
