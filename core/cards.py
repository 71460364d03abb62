"""Card model and deck construction - immutable card representations."""

from dataclasses import dataclass, field
from enum import Enum
from random import Random
from uuid import uuid4


class Suit(Enum):
    """Card suits, in canonical deck order."""

    CLUBS = "clubs"
    DIAMONDS = "diamonds"
    HEARTS = "hearts"
    SPADES = "spades"

    def __str__(self) -> str:
        symbols = {
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♦",
            Suit.HEARTS: "♥",
            Suit.SPADES: "♠",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks, ordered A, 2..10, J, Q, K."""

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"

    def __str__(self) -> str:
        return self.value

    @property
    def is_wild(self) -> bool:
        """Eights are wild."""
        return self == Rank.EIGHT


_RANK_ALIASES = {"T": Rank.TEN}

_SUIT_ALIASES = {
    "C": Suit.CLUBS,
    "♣": Suit.CLUBS,
    "D": Suit.DIAMONDS,
    "♦": Suit.DIAMONDS,
    "H": Suit.HEARTS,
    "♥": Suit.HEARTS,
    "S": Suit.SPADES,
    "♠": Suit.SPADES,
}


def _new_card_id() -> str:
    return uuid4().hex


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card.

    Identity is the ``id``: two cards compare equal only if they are the same
    physical card, which keeps hand removal unambiguous.
    """

    suit: Suit = field(compare=False)
    rank: Rank = field(compare=False)
    id: str = field(default_factory=_new_card_id)

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name}, id={self.id[:8]})"

    @property
    def is_wild(self) -> bool:
        """Check if this card is an eight."""
        return self.rank.is_wild

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card with a fresh id from a string like '8♥', 'QS', '10d'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        try:
            rank = _RANK_ALIASES.get(rank_str) or Rank(rank_str)
        except ValueError:
            raise ValueError(f"Invalid rank: {rank_str}") from None
        if suit_str not in _SUIT_ALIASES:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(_SUIT_ALIASES[suit_str], rank)


def create_deck() -> tuple[Card, ...]:
    """Build all 52 cards, suit-major, each with a fresh unique id."""
    return tuple(Card(suit, rank) for suit in Suit for rank in Rank)


def shuffle_deck(deck: tuple[Card, ...] | list[Card], rng: Random | None = None) -> tuple[Card, ...]:
    """
    Return a uniformly random permutation of a deck.

    Args:
        deck: Cards to shuffle (left untouched)
        rng: Random number generator for reproducible shuffles

    Returns:
        Shuffled copy of the deck
    """
    cards = list(deck)
    (rng or Random()).shuffle(cards)
    return tuple(cards)
