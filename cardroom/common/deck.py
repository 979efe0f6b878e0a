"""
This module contains the immutable Deck used by the table state machine.

>>> deck = new_deck()
>>> deck.size
52
>>> card, deck = deck.draw()
>>> deck.size
51
"""

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from cardroom.common.card import Card, Rank, Suit
from cardroom.exceptions import DeckExhaustedError

# Every (suit, rank) pair in unshuffled order
FULL_DECK: Tuple[Card, ...] = tuple(Card(suit, rank) for suit in Suit for rank in Rank)


def shuffle_cards(cards: Iterable[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Return a shuffled copy of ``cards`` using the Fisher-Yates algorithm.

    Walks from the last index down to 1 and swaps each position with a
    uniformly chosen index in ``[0, i]``.

    :param cards: The cards to shuffle.
    :param rng: Source of randomness (defaults to the ``random`` module).
    :return: A new list holding the shuffled cards.
    """
    rng = rng or random
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


@dataclass(frozen=True)
class Deck:
    """
    An ordered, immutable stack of cards. The top of the deck is the last card.
    """

    cards: Tuple[Card, ...] = ()

    @classmethod
    def from_cards(cls, cards: Iterable[Card]) -> "Deck":
        """Build a deck holding ``cards`` in the given order."""
        return cls(tuple(cards))

    def draw(self) -> Tuple[Card, "Deck"]:
        """
        Remove the top card.

        :return: The drawn card and the deck that remains.
        :raises DeckExhaustedError: If the deck is empty.
        """
        if not self.cards:
            raise DeckExhaustedError("Cannot draw from an empty deck")
        return self.cards[-1], Deck(self.cards[:-1])

    @property
    def size(self) -> int:
        """Number of cards left in the deck."""
        return len(self.cards)

    def is_empty(self) -> bool:
        return not self.cards

    def __repr__(self) -> str:
        return f"Deck({list(self.cards)!r})"

    def __str__(self) -> str:
        return f"Deck of {len(self.cards)} cards"


def new_deck(rng: Optional[random.Random] = None) -> Deck:
    """Create a full 52-card deck in uniformly random order."""
    return Deck.from_cards(shuffle_cards(FULL_DECK, rng))


def deck_from_discards(
    in_play: Iterable[Card], rng: Optional[random.Random] = None
) -> Deck:
    """
    Rebuild a shuffled deck from every card that is not currently in play.

    :param in_play: Cards still held in hands on the table.
    :param rng: Source of randomness.
    :return: A deck of the remaining cards, shuffled.
    """
    held = set(in_play)
    return Deck.from_cards(shuffle_cards((c for c in FULL_DECK if c not in held), rng))
