"""
Tests for the event system.

This module checks subscription, priority ordering and error isolation of
the EventEmitter, and the EventBus singleton.
"""

import threading
from unittest.mock import MagicMock

import pytest

from cardroom.events import EngineEventType, EventBus, EventEmitter, EventPriority


def test_on_and_unsubscribe():
    """Test subscribing with a string event type and unsubscribing."""
    emitter = EventEmitter()
    callback = MagicMock()

    unsubscribe = emitter.on("table_event", callback)
    emitter.emit("table_event", {"room": "R"})

    callback.assert_called_once_with({"room": "R"})

    unsubscribe()
    emitter.emit("table_event", {"room": "S"})

    assert callback.call_count == 1


def test_enum_and_name_are_interchangeable():
    """Test that an enum subscription receives events emitted by name."""
    emitter = EventEmitter()
    callback = MagicMock()

    emitter.on(EngineEventType.PLAYER_BET, callback)
    emitter.emit("PLAYER_BET", {"amount": 100})

    callback.assert_called_once_with({"amount": 100})


def test_on_any_receives_event_names():
    """Test that global handlers get (event name, data) pairs."""
    emitter = EventEmitter()
    callback = MagicMock()

    unsubscribe = emitter.on_any(callback)
    emitter.emit(EngineEventType.GAME_CREATED, {"game_id": "R"})
    emitter.emit(EngineEventType.GAME_DESTROYED, {"game_id": "R"})

    assert [c[0][0] for c in callback.call_args_list] == [
        ("GAME_CREATED", {"game_id": "R"}),
        ("GAME_DESTROYED", {"game_id": "R"}),
    ]

    unsubscribe()
    emitter.emit(EngineEventType.GAME_CREATED, {"game_id": "S"})
    assert callback.call_count == 2


def test_handlers_run_in_priority_order():
    """Test that higher priority handlers are called first."""
    emitter = EventEmitter()
    call_order = []

    emitter.on("tick", lambda data: call_order.append("normal"))
    emitter.on("tick", lambda data: call_order.append("low"), EventPriority.LOW)
    emitter.on("tick", lambda data: call_order.append("critical"), EventPriority.CRITICAL)
    emitter.on("tick", lambda data: call_order.append("high"), EventPriority.HIGH)

    emitter.emit("tick", {})

    assert call_order == ["critical", "high", "normal", "low"]


def test_equal_priorities_keep_subscription_order():
    """Test that handlers sharing a priority run in the order they subscribed."""
    emitter = EventEmitter()
    call_order = []

    emitter.on(EngineEventType.CARD_DEALT, lambda data: call_order.append("first"))
    emitter.on(EngineEventType.CARD_DEALT, lambda data: call_order.append("second"))
    emitter.on_any(lambda event: call_order.append("any"), EventPriority.CRITICAL)

    emitter.emit(EngineEventType.CARD_DEALT, {})

    assert call_order == ["first", "second", "any"]


def test_unsubscribe_removes_only_that_subscription():
    """Test that one callback subscribed twice can be removed once."""
    emitter = EventEmitter()
    callback = MagicMock()

    first = emitter.on(EngineEventType.SHUFFLE, callback)
    emitter.on(EngineEventType.SHUFFLE, callback)
    first()
    first()
    emitter.emit(EngineEventType.SHUFFLE, {})

    callback.assert_called_once()


def test_handler_errors_do_not_stop_emission():
    """Test that a failing handler neither raises nor blocks later handlers."""
    emitter = EventEmitter()
    after = MagicMock()

    def broken(data):
        raise ValueError("handler failed")

    emitter.on("table_event", broken, EventPriority.HIGH)
    emitter.on("table_event", after)

    emitter.emit("table_event", {})

    after.assert_called_once()


def test_event_bus_singleton():
    """Test that EventBus hands out one shared emitter."""
    bus = EventBus.get_instance()

    assert bus is EventBus.get_instance()
    assert isinstance(bus, EventEmitter)


def test_concurrent_emission():
    """Test that events emitted from many threads are all delivered."""
    emitter = EventEmitter()
    count = {"value": 0}
    lock = threading.Lock()

    def increment(data):
        with lock:
            count["value"] += 1

    emitter.on("tick", increment)

    threads = [threading.Thread(target=emitter.emit, args=("tick", {})) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert count["value"] == 10


if __name__ == "__main__":
    pytest.main(["-xvs", __file__])
