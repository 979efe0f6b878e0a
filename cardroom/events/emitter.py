"""
Event system for the Cardroom engine.

The state machine describes what happened at a table as engine events; the
dispatcher emits them here once a transition is committed. The server
subscribes its logging hooks, either to one event type or to every event.
"""

import logging
import threading
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

logger = logging.getLogger("cardroom.events")

# Handler table key for subscriptions to every event
_ANY = None


class EventPriority(Enum):
    """Priority levels for event handlers."""

    LOW = 0
    NORMAL = 1
    HIGH = 2
    CRITICAL = 3


def _event_name(event_type: Union[str, Enum]) -> str:
    return event_type.name if isinstance(event_type, Enum) else event_type


class EventEmitter:
    """
    Publish/subscribe hub for engine events.

    Handlers for one event type receive the event data; handlers registered
    with `on_any` receive ``(event name, data)``. Within each group handlers
    run highest priority first, in subscription order for equal priorities.
    """

    def __init__(self):
        self._handlers: Dict[Optional[str], List[Tuple[int, Callable]]] = defaultdict(list)
        self._lock = threading.RLock()

    def on(
        self,
        event_type: Union[str, Enum],
        callback: Callable[[Dict[str, Any]], None],
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable[[], None]:
        """
        Subscribe to one event type.

        Args:
            event_type: Event name or `EngineEventType` member
            callback: Called with the event data
            priority: Handlers with a higher priority run first

        Returns:
            Function that removes this subscription
        """
        return self._subscribe(_event_name(event_type), callback, priority)

    def on_any(
        self, callback: Callable[[Tuple[str, Dict[str, Any]]], None],
        priority: EventPriority = EventPriority.NORMAL,
    ) -> Callable[[], None]:
        """Subscribe to every event; see `on`."""
        return self._subscribe(_ANY, callback, priority)

    def _subscribe(
        self, key: Optional[str], callback: Callable, priority: EventPriority
    ) -> Callable[[], None]:
        entry = (priority.value, callback)
        with self._lock:
            handlers = self._handlers[key]
            position = next(
                (i for i, (rank, _) in enumerate(handlers) if rank < priority.value),
                len(handlers),
            )
            handlers.insert(position, entry)

        def unsubscribe():
            with self._lock:
                handlers = self._handlers[key]
                for i, existing in enumerate(handlers):
                    if existing is entry:
                        del handlers[i]
                        return

        return unsubscribe

    def emit(self, event_type: Union[str, Enum], data: Dict[str, Any]) -> None:
        """
        Deliver an event to its subscribers.

        Exceptions raised by handlers are logged and never reach the caller.
        """
        name = _event_name(event_type)
        with self._lock:
            calls = [(callback, data) for _, callback in self._handlers.get(name, ())]
            calls += [(callback, (name, data)) for _, callback in self._handlers.get(_ANY, ())]

        # Handlers run outside the lock so they may subscribe or unsubscribe
        for callback, payload in calls:
            try:
                callback(payload)
            except Exception as e:
                logger.error(f"Error in event handler for {name}: {e}", exc_info=True)


class EventBus:
    """
    Process-wide default event bus.

    Components accept an explicit `EventEmitter`; this singleton is the one
    they fall back to when none is given.
    """

    _instance = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> EventEmitter:
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = EventEmitter()
        return cls._instance


class EngineEventType(Enum):
    """
    Event types describing what happens at a table.
    """

    # Room lifecycle
    GAME_CREATED = "game_created"
    GAME_DESTROYED = "game_destroyed"
    GAME_RESET = "game_reset"
    ROUND_STARTED = "round_started"
    ROUND_ENDED = "round_ended"

    # Player events
    PLAYER_JOINED = "player_joined"
    PLAYER_RECONNECTED = "player_reconnected"
    PLAYER_LEFT = "player_left"
    PLAYER_READY = "player_ready"
    PLAYER_BET = "player_bet"
    PLAYER_ACTION = "player_action"
    ACTION_IGNORED = "action_ignored"

    # Card events
    CARD_DEALT = "card_dealt"
    SHUFFLE = "shuffle"

    # Hand events
    HAND_BUSTED = "hand_busted"
    HAND_RESULT = "hand_result"

    # Dealer events
    DEALER_ACTION = "dealer_action"

    # Countdown
    COUNTDOWN_TICK = "countdown_tick"

    # Error events
    ERROR = "error"
