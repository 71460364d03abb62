"""Greedy computer opponent."""

from collections import Counter
from dataclasses import dataclass

from core.cards import Card, Suit
from core.game.rules import playable_cards
from core.game.state import GameState, Turn

DEFAULT_FALLBACK_SUIT = Suit.HEARTS


@dataclass(frozen=True)
class OpponentAction:
    """Either a card to play (with a suit for eights) or a draw."""

    card: Card | None = None
    suit: Suit | None = None

    @property
    def is_draw(self) -> bool:
        """Check if the action is a draw."""
        return self.card is None

    @classmethod
    def draw(cls) -> "OpponentAction":
        """The draw action."""
        return cls()


def choose_suit(hand: tuple[Card, ...] | list[Card], fallback: Suit = DEFAULT_FALLBACK_SUIT) -> Suit:
    """
    Pick the suit held most often.

    Ties go to the earlier suit in canonical order (clubs, diamonds, hearts,
    spades). Eights are counted like any other card.

    Args:
        hand: Cards to count
        fallback: Suit returned for an empty hand

    Returns:
        The chosen suit
    """
    counts = Counter(card.suit for card in hand)
    if not counts:
        return fallback
    return max(Suit, key=lambda suit: counts[suit])


def choose_action(state: GameState, fallback_suit: Suit = DEFAULT_FALLBACK_SUIT) -> OpponentAction:
    """
    Choose the opponent's move.

    Plays the first playable non-eight in hand order, otherwise the first
    eight, naming the suit most held by the hand as it stands (the eight
    included). Draws when nothing is playable.
    """
    hand = state.hand(Turn.AI)
    playable = playable_cards(hand, state)
    if not playable:
        return OpponentAction.draw()

    card = next((c for c in playable if not c.is_wild), playable[0])
    if not card.is_wild:
        return OpponentAction(card=card)

    return OpponentAction(card=card, suit=choose_suit(hand, fallback_suit))


class GreedyOpponent:
    """
    Non-lookahead opponent policy.

    Always returns a legal action; it never stalls the game.
    """

    def __init__(self, fallback_suit: Suit = DEFAULT_FALLBACK_SUIT) -> None:
        """
        Initialize the opponent.

        Args:
            fallback_suit: Suit declared for an eight when no other suit signal exists
        """
        self.fallback_suit = fallback_suit

    def choose_action(self, state: GameState) -> OpponentAction:
        """Choose a move for the current state."""
        return choose_action(state, self.fallback_suit)
