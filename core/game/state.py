"""Game state: phases, turns and the immutable state snapshot."""

from dataclasses import dataclass
from enum import Enum

from core.cards import Card, Suit


class Phase(Enum):
    """
    Game state machine phases.

    Flow: DEALING → PLAYING ⇄ SELECTING_SUIT, PLAYING → GAME_OVER
    """

    # No cards dealt yet
    DEALING = "dealing"

    # Normal play/draw turns
    PLAYING = "playing"

    # Human played an eight and must name a suit
    SELECTING_SUIT = "selecting_suit"

    # A hand was emptied
    GAME_OVER = "game_over"

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


class Turn(Enum):
    """Which side is expected to act."""

    PLAYER = "player"
    AI = "ai"

    @property
    def other(self) -> "Turn":
        """The opposing side."""
        return Turn.AI if self == Turn.PLAYER else Turn.PLAYER


@dataclass(frozen=True)
class GameState:
    """
    Immutable snapshot of one game.

    Every rules transition returns a new instance; nothing is mutated in
    place. The draw pile's top is the last element of ``deck``.
    """

    deck: tuple[Card, ...] = ()
    player_hand: tuple[Card, ...] = ()
    ai_hand: tuple[Card, ...] = ()
    discard_pile: tuple[Card, ...] = ()
    turn: Turn = Turn.PLAYER
    phase: Phase = Phase.DEALING
    wild_suit: Suit | None = None
    winner: Turn | None = None

    @classmethod
    def empty(cls) -> "GameState":
        """The pre-deal state."""
        return cls()

    @property
    def top_discard(self) -> Card | None:
        """The active discard face, if any card has been played."""
        return self.discard_pile[-1] if self.discard_pile else None

    @property
    def target_suit(self) -> Suit | None:
        """The suit a non-eight must match: the wild suit, else the face's suit."""
        if self.wild_suit is not None:
            return self.wild_suit
        top = self.top_discard
        return top.suit if top else None

    @property
    def card_count(self) -> int:
        """Total cards across every zone; always 52 for a dealt game."""
        return (
            len(self.deck)
            + len(self.player_hand)
            + len(self.ai_hand)
            + len(self.discard_pile)
        )

    @property
    def is_over(self) -> bool:
        """Check if the game has a winner."""
        return self.phase == Phase.GAME_OVER

    def hand(self, turn: Turn) -> tuple[Card, ...]:
        """Return the hand belonging to one side."""
        return self.player_hand if turn == Turn.PLAYER else self.ai_hand

    def hand_field(self, turn: Turn) -> str:
        """Name of the dataclass field holding a side's hand."""
        return "player_hand" if turn == Turn.PLAYER else "ai_hand"
