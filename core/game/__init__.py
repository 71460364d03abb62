"""Game engine and state management."""

from core.game.events import GameEvent, EventType
from core.game.state import GameState, Phase, Turn
from core.game.scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from core.game.opponent import GreedyOpponent, OpponentAction
from core.game.engine import CrazyEightsGame

__all__ = [
    "GameEvent",
    "EventType",
    "GameState",
    "Phase",
    "Turn",
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
    "GreedyOpponent",
    "OpponentAction",
    "CrazyEightsGame",
]
