"""
Blackjack hand scoring.
"""

from typing import Iterable

from cardroom.common.card import Card, Rank

BLACKJACK = 21


def card_points(card: Card) -> int:
    """Hard points for a card: aces count 1 and face cards count 10."""
    return min(int(card.rank), 10)


def score(cards: Iterable[Card]) -> int:
    """
    Calculate the blackjack total of a hand.

    Every ace is first counted as 1. One ace is then promoted to 11 when that
    keeps the total at 21 or less; a second soft ace would always bust.
    """
    total = 0
    has_ace = False
    for card in cards:
        total += card_points(card)
        if card.rank == Rank.ACE:
            has_ace = True

    if has_ace and total + 10 <= BLACKJACK:
        total += 10

    return total
