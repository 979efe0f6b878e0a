"""
Immutable state management for the Cardroom table engine.

This package provides immutable state classes, the commands a table accepts
and the pure transition engine that applies them.
"""

from cardroom.state.models import (
    PlayerState,
    DealerState,
    HandState,
    GameState,
    GamePhase,
    PlayerStatus,
)

from cardroom.state.transitions import StateTransitionEngine

__all__ = [
    "PlayerState",
    "DealerState",
    "HandState",
    "GameState",
    "GamePhase",
    "PlayerStatus",
    "StateTransitionEngine",
]
