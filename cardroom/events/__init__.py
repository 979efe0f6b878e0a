"""
Event system for the Cardroom engine.

This package provides the event bus used for engine events and the room
channel that carries messages to WebSocket clients.
"""

from cardroom.events.emitter import (
    EventEmitter,
    EventBus,
    EventPriority,
    EngineEventType,
)
from cardroom.events.websocket import (
    RoomChannel,
    WebSocketHub,
    WebSocketClient,
    ClientMessage,
    ServerMessage,
)

__all__ = [
    "EventEmitter",
    "EventBus",
    "EventPriority",
    "EngineEventType",
    "RoomChannel",
    "WebSocketHub",
    "WebSocketClient",
    "ClientMessage",
    "ServerMessage",
]
