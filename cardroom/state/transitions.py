"""
State transition functions for the Cardroom table engine.

`StateTransitionEngine.apply` takes an immutable `GameState` and one command
and returns a `Transition`: the new state together with the messages to send,
the deferred actions to schedule and the engine events to emit. The original
state is never modified, and nothing here touches the network or the clock.

Phases move ``waiting -> betting -> playing -> dealerTurn -> gameOver`` and
back to ``waiting`` on reset. Actions that are not valid for the sender, the
phase or the turn leave the state untouched and produce no messages.
"""

import logging
import random
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from cardroom.common.card import Card
from cardroom.common.deck import deck_from_discards, new_deck
from cardroom.config import TableConfig
from cardroom.events.emitter import EngineEventType
from cardroom.events.websocket import ServerMessage
from cardroom.state.commands import (
    Bet,
    Command,
    DebugState,
    Disconnect,
    DoubleDown,
    Hit,
    Join,
    NextGame,
    Ready,
    Reset,
    Stand,
    Tick,
)
from cardroom.state.effects import (
    Broadcast,
    CancelCountdown,
    EngineEvent,
    Reply,
    ScheduleCountdown,
    Transition,
)
from cardroom.state.models import (
    DealerState,
    GamePhase,
    GameState,
    HandState,
    PlayerState,
    PlayerStatus,
)

logger = logging.getLogger("cardroom.state.transitions")

# Statuses still in the round once cards are dealt
_ACTIVE_STATUSES = (PlayerStatus.PLAYING, PlayerStatus.STAND)

# Statuses whose stake is still held in escrow
_ESCROWED_STATUSES = (PlayerStatus.BET_PLACED,) + _ACTIVE_STATUSES


class _TransitionBuilder:
    """Collects the outputs of one transition while it is being computed."""

    def __init__(self):
        self.messages: List[Any] = []
        self.effects: List[Any] = []
        self.events: List[EngineEvent] = []
        self.broadcast_state = False

    def emit(self, event_type: EngineEventType, data: Dict[str, Any]) -> None:
        self.events.append(EngineEvent(event_type, data))

    def build(self, state: GameState) -> Transition:
        messages = list(self.messages)
        if self.broadcast_state:
            messages.append(
                Broadcast(ServerMessage.GAME_STATE_UPDATE, {"gameState": state.to_dict()})
            )
        return Transition(
            state=state,
            messages=tuple(messages),
            effects=tuple(self.effects),
            events=tuple(self.events),
        )


def _replace_player(
    players: Tuple[PlayerState, ...], updated: PlayerState, player_id: Optional[str] = None
) -> Tuple[PlayerState, ...]:
    """Swap the player with ``player_id`` (default: ``updated.id``) for ``updated``."""
    target = updated.id if player_id is None else player_id
    return tuple(updated if p.id == target else p for p in players)


def _ensure_dealer_flag(players: Tuple[PlayerState, ...]) -> Tuple[PlayerState, ...]:
    """Give the dealer flag to the first seated player if nobody holds it."""
    if not players or any(p.is_dealer for p in players):
        return players
    return (replace(players[0], is_dealer=True),) + players[1:]


class StateTransitionEngine:
    """
    Pure state transitions for a blackjack table.

    The engine holds only the house rules and a source of randomness used to
    shuffle new decks; all table data lives in the `GameState` passed in.
    """

    def __init__(
        self, config: Optional[TableConfig] = None, rng: Optional[random.Random] = None
    ):
        """
        Initialize the engine.

        Args:
            config: House rules (defaults to `TableConfig()`)
            rng: Random source for shuffling (defaults to a fresh `random.Random`)
        """
        self.config = config or TableConfig()
        self.rng = rng or random.Random()
        self._handlers: Dict[type, Callable[..., GameState]] = {
            Join: self._join,
            Ready: self._ready,
            Bet: self._place_bet,
            Hit: self._hit,
            Stand: self._stand,
            DoubleDown: self._double_down,
            Reset: self._reset_command,
            NextGame: self._next_game,
            Disconnect: self._disconnect,
            Tick: self._tick,
            DebugState: self._debug_state,
        }

    def new_game(self, room_id: str) -> GameState:
        """
        Create an empty table for a room.

        Args:
            room_id: Identifier of the room

        Returns:
            A table in the waiting phase with a freshly shuffled deck
        """
        return GameState(id=room_id, deck=new_deck(self.rng))

    def apply(self, state: GameState, command: Command) -> Transition:
        """
        Apply one command to a table.

        Args:
            state: Current table state
            command: The command to apply

        Returns:
            The resulting transition; its state is ``state`` itself when the
            command was ignored
        """
        handler = self._handlers.get(type(command))
        out = _TransitionBuilder()
        if handler is None:
            new_state = self._ignore(state, command, out, "unknown command")
        else:
            new_state = handler(state, command, out)
        return out.build(new_state)

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------

    def _join(self, state: GameState, command: Join, out: _TransitionBuilder) -> GameState:
        name = command.player_name

        existing = next((p for p in state.all_players() if p.name == name), None)
        if existing is not None:
            if existing.id != command.connection_id and state.has_member(
                command.connection_id
            ):
                return self._ignore(state, command, out, "connection already seated")
            return self._reconnect(state, existing, command.connection_id, out)

        if state.has_member(command.connection_id):
            return self._ignore(state, command, out, "connection already seated")

        occupied = len(state.players) + len(state.waiting_players)
        if occupied >= self.config.max_players:
            logger.info(f"Room {state.id} is full, rejecting {name}")
            out.messages.append(Reply(ServerMessage.ERROR, {"message": "Table is full."}))
            return state

        player = PlayerState(
            id=command.connection_id,
            name=name,
            chips=self.config.starting_chips,
            is_dealer=not any(p.is_dealer for p in state.all_players()),
        )

        if state.phase == GamePhase.WAITING:
            if player.is_dealer:
                message = f"{name} joined as dealer. Waiting for more players..."
            else:
                message = f"{name} joined the game."
            new_state = replace(state, players=state.players + (player,), message=message)
        else:
            new_state = replace(
                state,
                waiting_players=state.waiting_players + (player,),
                message=f"{name} will join the next round.",
            )

        out.emit(
            EngineEventType.PLAYER_JOINED,
            {
                "game_id": state.id,
                "player_id": player.id,
                "player_name": name,
                "chips": player.chips,
                "waiting": state.phase != GamePhase.WAITING,
            },
        )
        out.messages.append(
            Reply(
                ServerMessage.PLAYER_JOINED,
                {"player": player.to_dict(), "gameState": new_state.to_dict()},
            )
        )
        out.broadcast_state = True
        return new_state

    def _reconnect(
        self,
        state: GameState,
        player: PlayerState,
        connection_id: str,
        out: _TransitionBuilder,
    ) -> GameState:
        """Move an existing player, found by name, onto a new connection."""
        previous_id = player.id
        moved = replace(player, id=connection_id)
        current_player_id = state.current_player_id
        if current_player_id == previous_id:
            current_player_id = connection_id

        new_state = replace(
            state,
            players=_replace_player(state.players, moved, previous_id),
            waiting_players=_replace_player(state.waiting_players, moved, previous_id),
            current_player_id=current_player_id,
            message=f"{player.name} reconnected.",
        )

        out.emit(
            EngineEventType.PLAYER_RECONNECTED,
            {
                "game_id": state.id,
                "player_id": connection_id,
                "previous_id": previous_id,
                "player_name": player.name,
            },
        )
        out.messages.append(
            Reply(
                ServerMessage.PLAYER_JOINED,
                {"player": moved.to_dict(), "gameState": new_state.to_dict()},
            )
        )
        out.broadcast_state = True
        return new_state

    def _ready(self, state: GameState, command: Ready, out: _TransitionBuilder) -> GameState:
        player = state.find_player(command.connection_id)
        if player is None or state.phase != GamePhase.WAITING:
            return self._ignore(state, command, out, "not ready-able")

        player = replace(player, status=PlayerStatus.READY)
        new_state = replace(
            state,
            players=_replace_player(state.players, player),
            message=f"{player.name} is ready to play.",
        )
        out.emit(
            EngineEventType.PLAYER_READY,
            {"game_id": state.id, "player_id": player.id, "player_name": player.name},
        )
        out.broadcast_state = True
        return self._check_all_ready(new_state, out)

    def _place_bet(self, state: GameState, command: Bet, out: _TransitionBuilder) -> GameState:
        player = state.find_player(command.connection_id)
        if (
            player is None
            or state.phase != GamePhase.BETTING
            or player.status != PlayerStatus.READY
        ):
            return self._ignore(state, command, out, "not in betting")

        amount = command.amount
        if isinstance(amount, bool) or not isinstance(amount, int):
            return self._ignore(state, command, out, "bet is not an integer")
        if amount <= 0 or amount > player.chips:
            return self._ignore(state, command, out, f"invalid bet amount {amount}")

        player = replace(
            player,
            chips=player.chips - amount,
            bet=amount,
            status=PlayerStatus.BET_PLACED,
        )
        new_state = replace(
            state,
            players=_replace_player(state.players, player),
            pot=state.pot + amount,
            current_bet=amount,
            message=f"{player.name} placed a bet of {amount}.",
        )
        out.emit(
            EngineEventType.PLAYER_BET,
            {
                "game_id": state.id,
                "player_id": player.id,
                "player_name": player.name,
                "amount": amount,
                "chips": player.chips,
            },
        )
        out.broadcast_state = True

        if all(p.status == PlayerStatus.BET_PLACED for p in new_state.players):
            new_state = self._deal_initial_cards(new_state, out)
        return new_state

    def _hit(self, state: GameState, command: Hit, out: _TransitionBuilder) -> GameState:
        player = self._acting_player(state, command)
        if player is None:
            return self._ignore(state, command, out, "not your turn")

        card, state = self._draw(state, out)
        player = replace(player, hand=player.hand.add(card))
        self._emit_card(state, out, card, player.id)
        self._emit_action(state, out, player, "HIT")
        out.broadcast_state = True

        if player.hand.is_bust:
            player = replace(player, status=PlayerStatus.BUST)
            state = replace(
                state,
                players=_replace_player(state.players, player),
                message=f"{player.name} busts!",
            )
            self._emit_bust(state, out, player)
            return self._advance_turn(state, out)

        return replace(
            state,
            players=_replace_player(state.players, player),
            message=f"{player.name} hits.",
        )

    def _stand(self, state: GameState, command: Stand, out: _TransitionBuilder) -> GameState:
        player = self._acting_player(state, command)
        if player is None:
            return self._ignore(state, command, out, "not your turn")

        player = replace(player, status=PlayerStatus.STAND)
        state = replace(
            state,
            players=_replace_player(state.players, player),
            message=f"{player.name} stands.",
        )
        self._emit_action(state, out, player, "STAND")
        out.broadcast_state = True
        return self._advance_turn(state, out)

    def _double_down(
        self, state: GameState, command: DoubleDown, out: _TransitionBuilder
    ) -> GameState:
        player = self._acting_player(state, command)
        if player is None:
            return self._ignore(state, command, out, "not your turn")
        if player.chips < player.bet:
            return self._ignore(state, command, out, "not enough chips to double")

        card, state = self._draw(state, out)
        stake = player.bet
        player = replace(
            player,
            chips=player.chips - stake,
            bet=stake * 2,
            hand=player.hand.add(card),
        )
        self._emit_card(state, out, card, player.id)
        self._emit_action(state, out, player, "DOUBLE")

        if player.hand.is_bust:
            player = replace(player, status=PlayerStatus.BUST)
            message = f"{player.name} busts after doubling down!"
        else:
            player = replace(player, status=PlayerStatus.STAND)
            message = f"{player.name} doubles down and stands."

        state = replace(
            state,
            players=_replace_player(state.players, player),
            pot=state.pot + stake,
            current_bet=player.bet,
            message=message,
        )
        if player.status == PlayerStatus.BUST:
            self._emit_bust(state, out, player)
        out.broadcast_state = True
        return self._advance_turn(state, out)

    def _reset_command(
        self, state: GameState, command: Reset, out: _TransitionBuilder
    ) -> GameState:
        if not state.has_member(command.connection_id):
            return self._ignore(state, command, out, "not a member")
        return self._reset(state, out)

    def _next_game(
        self, state: GameState, command: NextGame, out: _TransitionBuilder
    ) -> GameState:
        if not state.has_member(command.connection_id):
            return self._ignore(state, command, out, "not a member")
        if state.phase != GamePhase.GAME_OVER:
            out.messages.append(
                Reply(ServerMessage.ERROR, {"message": "Game is not over yet."})
            )
            return state
        return self._reset(state, out)

    def _disconnect(
        self, state: GameState, command: Disconnect, out: _TransitionBuilder
    ) -> GameState:
        player_id = command.connection_id
        index = state.seat_index(player_id)

        if index is None:
            waiting = next((p for p in state.waiting_players if p.id == player_id), None)
            if waiting is None:
                return self._ignore(state, command, out, "not a member")
            state = replace(
                state,
                waiting_players=tuple(p for p in state.waiting_players if p.id != player_id),
                message=f"{waiting.name} left the game.",
            )
            return self._player_left(state, waiting, out)

        player = state.players[index]
        remaining = state.players[:index] + state.players[index + 1 :]
        if player.is_dealer and remaining:
            heir = remaining[index % len(remaining)]
            remaining = _replace_player(remaining, replace(heir, is_dealer=True))

        was_current = state.current_player_id == player_id
        state = replace(
            state,
            players=remaining,
            current_player_id=None if was_current else state.current_player_id,
            message=f"{player.name} left the game.",
        )

        if not state.players:
            if state.waiting_players:
                state = self._reset(state, out)
        elif state.phase == GamePhase.WAITING:
            state = self._check_all_ready(state, out)
        elif state.phase == GamePhase.BETTING:
            if all(p.status == PlayerStatus.BET_PLACED for p in state.players):
                state = self._deal_initial_cards(state, out)
        elif state.phase == GamePhase.PLAYING and was_current:
            state = self._advance_turn(state, out, start=index % len(state.players))

        return self._player_left(state, player, out)

    def _player_left(
        self, state: GameState, player: PlayerState, out: _TransitionBuilder
    ) -> GameState:
        out.emit(
            EngineEventType.PLAYER_LEFT,
            {"game_id": state.id, "player_id": player.id, "player_name": player.name},
        )
        out.messages.append(
            Broadcast(
                ServerMessage.PLAYER_LEFT,
                {
                    "playerId": player.id,
                    "playerName": player.name,
                    "gameState": state.to_dict(),
                },
            ),
        )
        out.broadcast_state = True
        return state

    def _tick(self, state: GameState, command: Tick, out: _TransitionBuilder) -> GameState:
        if (
            state.phase != GamePhase.GAME_OVER
            or command.round_number != state.round_number
            or state.reset_timer <= 0
        ):
            return self._ignore(state, command, out, "stale countdown tick")

        remaining = state.reset_timer - 1
        out.emit(
            EngineEventType.COUNTDOWN_TICK,
            {"game_id": state.id, "round_number": state.round_number, "remaining": remaining},
        )
        out.broadcast_state = True
        if remaining == 0:
            return self._reset(replace(state, reset_timer=0), out, cancel_countdown=False)
        return replace(state, reset_timer=remaining)

    def _debug_state(
        self, state: GameState, command: DebugState, out: _TransitionBuilder
    ) -> GameState:
        logger.debug(f"Debug state for room {state.id}: {state.to_dict()}")
        out.broadcast_state = True
        return state

    # ------------------------------------------------------------------
    # Phase transitions
    # ------------------------------------------------------------------

    def _check_all_ready(self, state: GameState, out: _TransitionBuilder) -> GameState:
        """Move from waiting to betting once every seated player is ready."""
        if not state.players or not all(
            p.status == PlayerStatus.READY for p in state.players
        ):
            return state

        if len(state.players) < self.config.min_players:
            return replace(state, message="Waiting for more players...")

        out.emit(
            EngineEventType.ROUND_STARTED,
            {
                "game_id": state.id,
                "round_number": state.round_number,
                "players": [p.name for p in state.players],
            },
        )
        logger.info(f"Room {state.id} moved to betting with {len(state.players)} players")
        return replace(state, phase=GamePhase.BETTING, message="Place your bets!")

    def _deal_initial_cards(self, state: GameState, out: _TransitionBuilder) -> GameState:
        """Deal two cards to every player who bet, then two to the dealer."""
        for player in state.players:
            if player.status != PlayerStatus.BET_PLACED:
                continue
            # Each card is stored before the next draw so a reshuffle never
            # puts it back in the deck
            player = replace(player, hand=HandState(), status=PlayerStatus.PLAYING)
            for _ in range(2):
                card, state = self._draw(state, out)
                player = replace(player, hand=player.hand.add(card))
                state = replace(state, players=_replace_player(state.players, player))
                self._emit_card(state, out, card, player.id)

        state = replace(state, dealer=DealerState())
        for _ in range(2):
            card, state = self._draw(state, out)
            state = replace(state, dealer=DealerState(hand=state.dealer.hand.add(card)))
            self._emit_card(state, out, card, None)

        first = next(p for p in state.players if p.status == PlayerStatus.PLAYING)
        logger.info(f"Room {state.id} dealt, {first.name} to act")
        return replace(
            state,
            phase=GamePhase.PLAYING,
            current_player_id=first.id,
            message=f"{first.name}'s turn.",
        )

    def _advance_turn(
        self, state: GameState, out: _TransitionBuilder, start: Optional[int] = None
    ) -> GameState:
        """
        Hand the turn to the next player still playing.

        Scans the seats from ``start`` (default: the seat after the current
        player), wrapping once around the table. If nobody is left to act the
        dealer plays and the round is settled.
        """
        count = len(state.players)
        if start is None:
            current = state.seat_index(state.current_player_id) if state.current_player_id else None
            start = 0 if current is None else current + 1

        for step in range(count):
            candidate = state.players[(start + step) % count]
            if candidate.status == PlayerStatus.PLAYING:
                return replace(
                    state,
                    current_player_id=candidate.id,
                    message=f"{candidate.name}'s turn.",
                )

        return self._dealer_play(state, out)

    def _dealer_play(self, state: GameState, out: _TransitionBuilder) -> GameState:
        """Draw for the house until it reaches the stand threshold, then settle."""
        state = replace(
            state,
            phase=GamePhase.DEALER_TURN,
            current_player_id=None,
            message="Dealer is playing...",
        )

        while state.dealer.score < self.config.dealer_stands_on:
            card, state = self._draw(state, out)
            state = replace(state, dealer=DealerState(hand=state.dealer.hand.add(card)))
            self._emit_card(state, out, card, None)
            out.emit(
                EngineEventType.DEALER_ACTION,
                {"game_id": state.id, "action": "HIT", "score": state.dealer.score},
            )

        out.emit(
            EngineEventType.DEALER_ACTION,
            {"game_id": state.id, "action": "STAND", "score": state.dealer.score},
        )
        return self._settle(state, out)

    def _settle(self, state: GameState, out: _TransitionBuilder) -> GameState:
        """
        Resolve every hand still in the round against the dealer.

        Stakes are held in escrow, so a win returns twice the bet, a push
        returns the bet and a loss returns nothing. Busted players already
        forfeited their stake and are skipped.
        """
        dealer_score = state.dealer.score
        dealer_bust = state.dealer.hand.is_bust

        players = []
        winners = []
        for player in state.players:
            if player.status not in _ACTIVE_STATUSES:
                players.append(player)
                continue

            if dealer_bust or player.score > dealer_score:
                result, payout = PlayerStatus.WIN, player.bet * 2
            elif player.score < dealer_score:
                result, payout = PlayerStatus.LOSE, 0
            else:
                result, payout = PlayerStatus.PUSH, player.bet

            player = replace(player, status=result, chips=player.chips + payout)
            if result in (PlayerStatus.WIN, PlayerStatus.PUSH):
                winners.append(player.name)
            players.append(player)

            out.emit(
                EngineEventType.HAND_RESULT,
                {
                    "game_id": state.id,
                    "player_id": player.id,
                    "player_name": player.name,
                    "result": result.value,
                    "score": player.score,
                    "dealer_score": dealer_score,
                    "payout": payout,
                    "chips": player.chips,
                },
            )

        if winners:
            message = f"Game over! Winners: {', '.join(winners)}"
        else:
            message = "Game over! Dealer wins."

        countdown = self.config.reset_countdown
        new_state = replace(
            state,
            players=tuple(players),
            phase=GamePhase.GAME_OVER,
            winners=tuple(winners),
            message=message,
            reset_timer=countdown,
        )
        if countdown > 0:
            out.effects.append(ScheduleCountdown(state.round_number, countdown))

        out.emit(
            EngineEventType.ROUND_ENDED,
            {
                "game_id": state.id,
                "round_number": state.round_number,
                "dealer_score": dealer_score,
                "winners": list(winners),
            },
        )
        logger.info(f"Room {state.id} round {state.round_number} over: {message}")
        return new_state

    def _reset(
        self, state: GameState, out: _TransitionBuilder, cancel_countdown: bool = True
    ) -> GameState:
        """
        Clear the table for a new round.

        Chips are kept; hands, bets and statuses are cleared, waiting players
        take their seats and a fresh deck is shuffled. Stakes of an unsettled
        round are returned, except those already lost to a bust.
        """
        seated = tuple(
            replace(
                p,
                chips=p.chips + (p.bet if p.status in _ESCROWED_STATUSES else 0),
                hand=HandState(),
                bet=0,
                status=PlayerStatus.WAITING,
            )
            for p in state.all_players()
        )

        if cancel_countdown:
            out.effects.append(CancelCountdown())
        out.emit(
            EngineEventType.GAME_RESET,
            {
                "game_id": state.id,
                "round_number": state.round_number + 1,
                "players": {p.name: p.chips for p in seated},
            },
        )
        out.broadcast_state = True
        return replace(
            state,
            players=_ensure_dealer_flag(seated),
            waiting_players=(),
            dealer=DealerState(),
            deck=new_deck(self.rng),
            phase=GamePhase.WAITING,
            current_player_id=None,
            pot=0,
            current_bet=0,
            message="Game reset. Waiting for players to be ready...",
            winners=(),
            reset_timer=0,
            round_number=state.round_number + 1,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _acting_player(self, state: GameState, command: Command) -> Optional[PlayerState]:
        """The sender, if it is their turn to act in the playing phase."""
        if state.phase != GamePhase.PLAYING:
            return None
        if command.connection_id != state.current_player_id:
            return None
        player = state.find_player(command.connection_id)
        if player is None or player.status != PlayerStatus.PLAYING:
            return None
        return player

    def _draw(self, state: GameState, out: _TransitionBuilder) -> Tuple[Card, GameState]:
        """
        Draw the top card of the table's deck.

        An empty deck is rebuilt from the discards, i.e. every card not held
        in a hand on the table. If even that is empty a full deck is used.
        """
        deck = state.deck
        if deck.is_empty():
            deck = deck_from_discards(state.cards_in_play(), self.rng)
            if deck.is_empty():
                deck = new_deck(self.rng)
            logger.warning(f"Deck exhausted in room {state.id}, reshuffled {deck.size} cards")
            out.emit(EngineEventType.SHUFFLE, {"game_id": state.id, "cards": deck.size})

        card, deck = deck.draw()
        return card, replace(state, deck=deck)

    def _ignore(
        self, state: GameState, command: Command, out: _TransitionBuilder, reason: str
    ) -> GameState:
        logger.debug(
            f"Ignoring {type(command).__name__} from {command.connection_id} "
            f"in room {state.id}: {reason}"
        )
        out.emit(
            EngineEventType.ACTION_IGNORED,
            {
                "game_id": state.id,
                "command": type(command).__name__,
                "connection_id": command.connection_id,
                "reason": reason,
            },
        )
        return state

    @staticmethod
    def _emit_card(
        state: GameState, out: _TransitionBuilder, card: Card, player_id: Optional[str]
    ) -> None:
        out.emit(
            EngineEventType.CARD_DEALT,
            {
                "game_id": state.id,
                "is_dealer": player_id is None,
                "player_id": player_id,
                "card": str(card),
            },
        )

    @staticmethod
    def _emit_action(
        state: GameState, out: _TransitionBuilder, player: PlayerState, action: str
    ) -> None:
        out.emit(
            EngineEventType.PLAYER_ACTION,
            {
                "game_id": state.id,
                "player_id": player.id,
                "player_name": player.name,
                "action": action,
                "score": player.score,
            },
        )

    @staticmethod
    def _emit_bust(state: GameState, out: _TransitionBuilder, player: PlayerState) -> None:
        out.emit(
            EngineEventType.HAND_BUSTED,
            {
                "game_id": state.id,
                "player_id": player.id,
                "player_name": player.name,
                "score": player.score,
            },
        )
