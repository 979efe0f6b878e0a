"""
Pytest configuration for Cardroom tests.

This module contains fixtures for building tables with predictable decks.
"""

import random
from dataclasses import replace

import pytest

from cardroom.common.card import Card, Rank, Suit
from cardroom.common.deck import Deck
from cardroom.config import TableConfig
from cardroom.events import EventBus
from cardroom.state.commands import Bet, Join, Ready
from cardroom.state.transitions import StateTransitionEngine


def make_cards(*ranks):
    """Cards of the given ranks, cycling through the suits."""
    suits = list(Suit)
    return [Card(suits[i % len(suits)], Rank(rank)) for i, rank in enumerate(ranks)]


def stacked_deck(*ranks):
    """A deck that deals ``ranks`` in the order given."""
    return Deck.from_cards(reversed(make_cards(*ranks)))


# Reset event bus before each test
@pytest.fixture(scope="function", autouse=True)
def reset_event_bus():
    """Reset the event bus singleton before each test."""
    EventBus._instance = None
    yield
    EventBus._instance = None


@pytest.fixture
def table_config():
    return TableConfig(reset_countdown=3, tick_interval=0.01)


@pytest.fixture
def engine(table_config):
    return StateTransitionEngine(table_config, rng=random.Random(1234))


@pytest.fixture
def cards():
    return make_cards


@pytest.fixture
def deck_of():
    return stacked_deck


@pytest.fixture
def seated_table(engine):
    """A waiting table with Alice (c1) and Bob (c2) seated."""
    state = engine.new_game("R")
    state = engine.apply(state, Join("c1", player_name="Alice")).state
    state = engine.apply(state, Join("c2", player_name="Bob")).state
    return state


@pytest.fixture
def start_round(engine, seated_table):
    """
    Return a function that takes a table through ready and betting.

    The returned function accepts the ranks to deal (players in seat order,
    two cards each, then the dealer's two cards, then any later draws) and the
    bets to place, and returns the table in the playing phase.
    """

    def _start(*ranks, bets=(100, 100), state=None):
        state = state or seated_table
        for player in state.players:
            state = engine.apply(state, Ready(player.id)).state
        state = replace(state, deck=stacked_deck(*ranks))
        for player, amount in zip(list(state.players), bets):
            state = engine.apply(state, Bet(player.id, amount=amount)).state
        return state

    return _start
