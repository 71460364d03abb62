"""Pytest fixtures for Crazy Eights tests."""

import pytest
from random import Random

from core.cards import Card, Suit, create_deck
from core.game import CrazyEightsGame, GameState, ManualScheduler, Phase, Turn


def _make_state(
    player: list[str],
    ai: list[str],
    top: str,
    deck: list[str] | None = None,
    turn: Turn = Turn.PLAYER,
    wild_suit: Suit | None = None,
) -> GameState:
    """Build a PLAYING state from card strings like '8H' or '10S'."""
    return GameState(
        deck=tuple(Card.from_string(s) for s in deck or []),
        player_hand=tuple(Card.from_string(s) for s in player),
        ai_hand=tuple(Card.from_string(s) for s in ai),
        discard_pile=(Card.from_string(top),),
        turn=turn,
        phase=Phase.PLAYING,
        wild_suit=wild_suit,
    )


@pytest.fixture
def make_state():
    """Factory building PLAYING states from card strings."""
    return _make_state


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def deck():
    """An unshuffled 52-card deck."""
    return create_deck()


@pytest.fixture
def scheduler():
    """Frame-driven scheduler whose clock only moves when advanced."""
    return ManualScheduler()


@pytest.fixture
def game(rng, scheduler):
    """A freshly dealt game instance."""
    g = CrazyEightsGame(opponent_delay=1.5, scheduler=scheduler, rng=rng)
    g.init_game()
    return g


@pytest.fixture
def rigged_game(scheduler):
    """Factory: a controller whose live state is replaced by a hand-built one."""

    def _rig(state: GameState) -> CrazyEightsGame:
        g = CrazyEightsGame(opponent_delay=1.0, scheduler=scheduler, rng=Random(7))
        g.init_game()
        # Swap in the scenario; the machine is already in the playing phase
        g._state = state
        return g

    return _rig

