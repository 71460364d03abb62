"""Crazy Eights turn controller with state machine."""

import logging
from random import Random
from typing import Callable

from transitions import Machine, MachineError

from core.cards import Card, Suit, create_deck, shuffle_deck
from core.errors import RuleViolation
from core.game import rules
from core.game.events import EventEmitter, EventType, GameEvent
from core.game.opponent import GreedyOpponent
from core.game.scheduler import ManualScheduler, ScheduledTask, Scheduler
from core.game.state import GameState, Phase, Turn

logger = logging.getLogger(__name__)

# Machine trigger fired for each (from, to) phase change
_PHASE_TRIGGERS: dict[tuple[Phase, Phase], str] = {
    (Phase.DEALING, Phase.PLAYING): "deal",
    (Phase.PLAYING, Phase.PLAYING): "continue_play",
    (Phase.PLAYING, Phase.SELECTING_SUIT): "request_suit",
    (Phase.SELECTING_SUIT, Phase.PLAYING): "suit_chosen",
    (Phase.PLAYING, Phase.GAME_OVER): "finish",
}


class CrazyEightsGame:
    """
    Crazy Eights turn controller.

    Owns the single live GameState and is the only component that applies
    rules transitions. Every accepted action replaces the state wholesale and
    bumps ``version``; when the opponent is due to act, one delayed task is
    scheduled against that version and ignored if the state has moved on.

    This is the core game logic, completely UI-agnostic.
    Communication happens through events and return values only.
    """

    # Set by the state machine
    _machine_state: str

    # State machine states
    STATES = [p.value for p in Phase]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "new_game", "source": "*", "dest": "dealing"},
        {"trigger": "deal", "source": "dealing", "dest": "playing"},
        {"trigger": "continue_play", "source": "playing", "dest": "playing"},
        {"trigger": "request_suit", "source": "playing", "dest": "selecting_suit"},
        {"trigger": "suit_chosen", "source": "selecting_suit", "dest": "playing"},
        {"trigger": "finish", "source": "playing", "dest": "game_over"},
    ]

    def __init__(
        self,
        hand_size: int = rules.HAND_SIZE,
        opponent_delay: float = 1.5,
        fallback_suit: Suit = Suit.HEARTS,
        scheduler: Scheduler | None = None,
        rng: Random | None = None,
        opponent: GreedyOpponent | None = None,
    ) -> None:
        """
        Initialize a game controller. Call ``init_game`` to deal.

        Args:
            hand_size: Cards dealt to each side
            opponent_delay: Seconds the opponent waits before acting
            fallback_suit: Suit the opponent names when it holds no other suit
            scheduler: Runs the opponent's delayed move (frame-driven by default)
            rng: Random number generator for reproducible games
            opponent: Opponent policy
        """
        self.hand_size = hand_size
        self.opponent_delay = opponent_delay
        self.scheduler = scheduler or ManualScheduler()
        self.opponent = opponent or GreedyOpponent(fallback_suit)
        self.events = EventEmitter()

        self._rng = rng or Random()
        self._state = GameState.empty()
        self._version = 0
        self._pending: ScheduledTask | None = None

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="dealing",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> GameState:
        """The current immutable game state."""
        return self._state

    @property
    def phase(self) -> Phase:
        """Get current phase from the state machine."""
        return Phase(self._machine_state)

    @property
    def version(self) -> int:
        """Counter bumped on every committed state."""
        return self._version

    @property
    def opponent_pending(self) -> bool:
        """Check if an opponent move is scheduled."""
        return self._pending is not None and not self._pending.cancelled

    def subscribe(
        self,
        handler: Callable[[GameEvent], None],
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to game events."""
        self.events.subscribe(handler, event_type)

    def init_game(self) -> bool:
        """
        Start a fresh game, discarding the current one.

        Any opponent move still waiting on the old game is cancelled.

        Returns:
            Always True
        """
        self._cancel_pending()
        self.events.clear_history()
        self.new_game()
        self._state = GameState.empty()
        self._version += 1

        deck = shuffle_deck(create_deck(), self._rng)
        self._commit(rules.deal(deck, self.hand_size))

        top = self._state.top_discard
        logger.info("New game started, opening discard %s", top)
        self.events.emit_new(
            EventType.GAME_STARTED,
            discard=str(top),
            deck_remaining=len(self._state.deck),
        )
        self._schedule_opponent()
        return True

    def play_card(self, card: Card, turn: Turn, suit: Suit | None = None) -> bool:
        """
        Play a card for one side.

        Args:
            card: Card from the acting hand
            turn: Acting side
            suit: Suit to declare when playing an eight; the human may leave it
                out and call ``select_wild_suit`` afterwards

        Returns:
            True if the play was accepted
        """
        try:
            new_state = rules.apply_play(self._state, card, turn, suit)
        except RuleViolation as e:
            return self._reject("play", turn, e)

        self._commit(new_state)
        self.events.emit_new(
            EventType.CARD_PLAYED,
            card=str(card),
            card_id=card.id,
            turn=turn.value,
            suit=suit.value if suit else None,
        )

        if new_state.phase == Phase.SELECTING_SUIT:
            self.events.emit_new(EventType.SUIT_REQUESTED, turn=turn.value)
        elif new_state.phase == Phase.GAME_OVER:
            logger.info("Game over, %s wins", turn.value)
            self.events.emit_new(EventType.GAME_ENDED, winner=turn.value)
        self._schedule_opponent()
        return True

    def draw_card(self, turn: Turn) -> bool:
        """
        Draw for one side; on an empty pile the turn passes without a card.

        Returns:
            True if the draw was accepted
        """
        try:
            new_state = rules.apply_draw(self._state, turn)
        except RuleViolation as e:
            return self._reject("draw", turn, e)

        drew = len(new_state.deck) < len(self._state.deck)
        self._commit(new_state)
        if drew:
            self.events.emit_new(
                EventType.CARD_DRAWN,
                turn=turn.value,
                deck_remaining=len(new_state.deck),
            )
        else:
            self.events.emit_new(EventType.TURN_PASSED, turn=turn.value)
        self._schedule_opponent()
        return True

    def select_wild_suit(self, suit: Suit) -> bool:
        """
        Name the wild suit after the human played an eight.

        Returns:
            True if a suit was being waited on
        """
        try:
            new_state = rules.apply_suit_selection(self._state, suit)
        except RuleViolation as e:
            return self._reject("select_suit", Turn.PLAYER, e)

        self._commit(new_state)
        self.events.emit_new(EventType.SUIT_SELECTED, suit=suit.value)
        self._schedule_opponent()
        return True

    def opponent_move(self) -> bool:
        """
        Make the opponent act right now.

        Returns:
            True if it was the opponent's turn and it acted
        """
        if self._state.phase != Phase.PLAYING or self._state.turn != Turn.AI:
            return False

        self._cancel_pending()
        action = self.opponent.choose_action(self._state)
        if action.is_draw:
            return self.draw_card(Turn.AI)
        return self.play_card(action.card, Turn.AI, action.suit)

    def close(self) -> None:
        """Drop any scheduled opponent move; the game is being discarded."""
        self._cancel_pending()

    def last_rejection(self) -> str | None:
        """Message of the most recent rejected action in this game."""
        event = self.events.last(EventType.INVALID_ACTION)
        return event.data["message"] if event else None

    def update(self, dt: float) -> None:
        """Advance a frame-driven scheduler by ``dt`` seconds."""
        if isinstance(self.scheduler, ManualScheduler):
            self.scheduler.advance(dt)

    def is_playable(self, card: Card) -> bool:
        """Check whether a card is a legal play right now."""
        if self._state.top_discard is None:
            return False
        return rules.is_playable(card, self._state)

    def playable_cards(self, turn: Turn = Turn.PLAYER) -> list[Card]:
        """Legal plays from one side's hand, in hand order."""
        if self._state.top_discard is None:
            return []
        return rules.playable_cards(self._state.hand(turn), self._state)

    def find_card(self, card_id: str, turn: Turn = Turn.PLAYER) -> Card | None:
        """Look up a card in a hand by id."""
        return next((c for c in self._state.hand(turn) if c.id == card_id), None)

    @property
    def can_draw(self) -> bool:
        """Check if the human may draw."""
        return self._state.phase == Phase.PLAYING and self._state.turn == Turn.PLAYER

    @property
    def awaiting_suit(self) -> bool:
        """Check if the human must name a wild suit."""
        return self._state.phase == Phase.SELECTING_SUIT

    def _commit(self, new_state: GameState) -> None:
        """Replace the state and move the machine to the matching phase."""
        trigger = _PHASE_TRIGGERS.get((self._state.phase, new_state.phase))
        if trigger is None:
            raise MachineError(
                f"No transition from {self._state.phase.value} to {new_state.phase.value}"
            )
        getattr(self, trigger)()

        self._state = new_state
        self._version += 1
        logger.debug(
            "State v%d: phase=%s turn=%s wild=%s",
            self._version,
            new_state.phase.value,
            new_state.turn.value,
            new_state.wild_suit.value if new_state.wild_suit else None,
        )

    def _schedule_opponent(self) -> None:
        self._cancel_pending()
        state = self._state
        if state.phase != Phase.PLAYING or state.turn != Turn.AI or state.winner is not None:
            return

        version = self._version
        self._pending = self.scheduler.schedule(
            self.opponent_delay,
            lambda: self._run_scheduled_opponent(version),
        )
        self.events.emit_new(
            EventType.OPPONENT_SCHEDULED,
            delay=self.opponent_delay,
            version=version,
        )

    def _run_scheduled_opponent(self, version: int) -> None:
        if version != self._version:
            logger.debug("Dropping stale opponent move for v%d (now v%d)", version, self._version)
            return
        self._pending = None
        self.opponent_move()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _reject(self, action: str, turn: Turn, error: RuleViolation) -> bool:
        logger.warning("Rejected %s by %s: %s", action, turn.value, error.message)
        self.events.emit_new(
            EventType.INVALID_ACTION,
            action=action,
            turn=turn.value,
            code=error.code,
            message=error.message,
        )
        return False
