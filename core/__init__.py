"""Core Crazy Eights engine - 100% UI-agnostic."""

from core.cards import Card, Rank, Suit, create_deck, shuffle_deck
from core.errors import RuleViolation

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "create_deck",
    "shuffle_deck",
    "RuleViolation",
]
