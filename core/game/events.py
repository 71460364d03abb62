"""Game events emitted by the turn controller."""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable


class EventType(Enum):
    """Kinds of game events."""

    GAME_STARTED = "game_started"
    GAME_ENDED = "game_ended"

    CARD_PLAYED = "card_played"
    CARD_DRAWN = "card_drawn"
    TURN_PASSED = "turn_passed"  # Empty draw pile

    SUIT_REQUESTED = "suit_requested"
    SUIT_SELECTED = "suit_selected"

    OPPONENT_SCHEDULED = "opponent_scheduled"

    INVALID_ACTION = "invalid_action"


@dataclass(frozen=True)
class GameEvent:
    """One thing that happened in a game, as seen by the presentation layer."""

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Fan-out of game events to subscribers.

    Handlers registered for a specific type run before catch-all handlers.
    The most recent events are kept in a bounded log so callers can look back
    at, for example, why the last action was rejected.
    """

    def __init__(self, history_size: int = 200) -> None:
        self._handlers: defaultdict[EventType | None, list[EventHandler]] = defaultdict(list)
        self._history: deque[GameEvent] = deque(maxlen=history_size)

    def subscribe(self, handler: EventHandler, event_type: EventType | None = None) -> None:
        """
        Register a handler.

        Args:
            handler: Called with each matching event
            event_type: Only deliver this type, or None for every event
        """
        self._handlers[event_type].append(handler)

    def unsubscribe(self, handler: EventHandler, event_type: EventType | None = None) -> None:
        """Stop delivering events to a handler; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: GameEvent) -> None:
        self._history.append(event)
        # Copy so handlers may unsubscribe while being called
        for handler in [*self._handlers.get(event.event_type, []), *self._handlers.get(None, [])]:
            handler(event)

    def emit_new(self, event_type: EventType, **data: Any) -> GameEvent:
        """Build an event from keyword data, emit it and return it."""
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    def last(self, event_type: EventType) -> GameEvent | None:
        """The most recent logged event of a type, if any."""
        return next((e for e in reversed(self._history) if e.event_type == event_type), None)

    @property
    def history(self) -> list[GameEvent]:
        """Logged events, oldest first."""
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()
