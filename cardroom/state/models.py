"""
Immutable state models for the Cardroom table engine.

This module provides dataclasses for representing the state of a blackjack
table in an immutable manner. These classes are designed to be used with the
pure transition functions in `cardroom.state.transitions`, which create new
state instances rather than modifying existing ones.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

from cardroom.common.card import Card
from cardroom.common.deck import Deck, new_deck
from cardroom.common.scoring import BLACKJACK, score


class GamePhase(Enum):
    """
    Top-level phases of a table, valued by their wire names.
    """

    WAITING = "waiting"
    BETTING = "betting"
    PLAYING = "playing"
    DEALER_TURN = "dealerTurn"
    GAME_OVER = "gameOver"


class PlayerStatus(Enum):
    """
    Per-round status of a player, valued by their wire names.
    """

    WAITING = "waiting"
    READY = "ready"
    BET_PLACED = "betPlaced"
    PLAYING = "playing"
    STAND = "stand"
    BUST = "bust"
    WIN = "win"
    LOSE = "lose"
    PUSH = "push"


@dataclass(frozen=True)
class HandState:
    """
    Immutable representation of a hand of cards.

    Attributes:
        cards: Cards in the order they were dealt
        score: Blackjack total, recomputed whenever a hand is built
    """

    cards: Tuple[Card, ...] = ()
    score: int = field(init=False, default=0)

    def __post_init__(self):
        object.__setattr__(self, "score", score(self.cards))

    def add(self, card: Card) -> "HandState":
        """Return a new hand with ``card`` appended."""
        return HandState(self.cards + (card,))

    @property
    def is_bust(self) -> bool:
        """Check if the hand is bust."""
        return self.score > BLACKJACK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cards": [card.to_dict() for card in self.cards],
            "score": self.score,
        }


@dataclass(frozen=True)
class PlayerState:
    """
    Immutable representation of a seated or waiting player.

    Attributes:
        id: Connection-scoped identifier, reassigned on reconnect
        name: Display name, also used to recognise a reconnecting player
        chips: Chips not currently staked
        hand: The player's current hand
        bet: Chips staked on the current hand
        status: Per-round status
        is_dealer: Cosmetic flag for the player who opened the table
    """

    id: str
    name: str = "Player"
    chips: int = 1000
    hand: HandState = field(default_factory=HandState)
    bet: int = 0
    status: PlayerStatus = PlayerStatus.WAITING
    is_dealer: bool = False

    @property
    def score(self) -> int:
        return self.hand.score

    def to_dict(self) -> Dict[str, Any]:
        hand = self.hand.to_dict()
        return {
            "id": self.id,
            "name": self.name,
            "chips": self.chips,
            "cards": hand["cards"],
            "score": hand["score"],
            "bet": self.bet,
            "status": self.status.value,
            "isDealer": self.is_dealer,
        }


@dataclass(frozen=True)
class DealerState:
    """
    Immutable representation of the house hand.

    The hole card is not hidden; both dealer cards are visible once dealt.
    """

    hand: HandState = field(default_factory=HandState)

    @property
    def score(self) -> int:
        return self.hand.score

    def to_dict(self) -> Dict[str, Any]:
        return self.hand.to_dict()


@dataclass(frozen=True)
class GameState:
    """
    Immutable representation of one room's table.

    Attributes:
        id: Room identifier
        players: Seated players in turn order
        waiting_players: Players admitted mid-round, seated at the next reset
        dealer: The house hand
        deck: Remaining cards; never serialized
        phase: Current phase of the round
        current_player_id: Id of the player whose turn it is, if any
        pot: Sum of the stakes on the table
        current_bet: Most recent stake placed
        message: Human-readable status line
        winners: Names of players who won or pushed in the last round
        reset_timer: Seconds left on the gameOver countdown
        round_number: Incremented on every reset
    """

    id: str
    players: Tuple[PlayerState, ...] = ()
    waiting_players: Tuple[PlayerState, ...] = ()
    dealer: DealerState = field(default_factory=DealerState)
    deck: Deck = field(default_factory=new_deck)
    phase: GamePhase = GamePhase.WAITING
    current_player_id: Optional[str] = None
    pot: int = 0
    current_bet: int = 0
    message: str = "Waiting for players..."
    winners: Tuple[str, ...] = ()
    reset_timer: int = 0
    round_number: int = 0

    @property
    def current_player(self) -> Optional[PlayerState]:
        """Get the player whose turn it is."""
        if self.current_player_id is None:
            return None
        return self.find_player(self.current_player_id)

    @property
    def is_empty(self) -> bool:
        """True when nobody is seated or waiting."""
        return not self.players and not self.waiting_players

    def all_players(self) -> Iterator[PlayerState]:
        """Seated players followed by waiting players."""
        yield from self.players
        yield from self.waiting_players

    def find_player(self, player_id: str) -> Optional[PlayerState]:
        """Find a seated player by id."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def seat_index(self, player_id: str) -> Optional[int]:
        """Index of a seated player in turn order, or None."""
        for i, player in enumerate(self.players):
            if player.id == player_id:
                return i
        return None

    def has_member(self, player_id: str) -> bool:
        """True if the id belongs to a seated or waiting player."""
        return any(player.id == player_id for player in self.all_players())

    def cards_in_play(self) -> Iterator[Card]:
        """Every card currently held by a player or the dealer."""
        for player in self.all_players():
            yield from player.hand.cards
        yield from self.dealer.hand.cards

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the table to the sanitized snapshot sent to clients.

        The deck is left out so clients cannot see upcoming cards.

        Returns:
            Dictionary representation of the table
        """
        return {
            "id": self.id,
            "players": [player.to_dict() for player in self.players],
            "waitingPlayers": [player.to_dict() for player in self.waiting_players],
            "dealer": self.dealer.to_dict(),
            "phase": self.phase.value,
            "pot": self.pot,
            "currentBet": self.current_bet,
            "message": self.message,
            "winners": list(self.winners),
            "resetTimer": self.reset_timer,
            "currentPlayerId": self.current_player_id,
        }
