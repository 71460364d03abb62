"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Literal

SuitName = Literal["clubs", "diamonds", "hearts", "spades"]


# Game schemas
class PlayRequest(BaseModel):
    """Request to play a card from the human hand."""

    card_id: str = Field(..., min_length=1, description="Id of the card to play")
    suit: SuitName | None = Field(default=None, description="Wild suit when playing an eight")


class SuitRequest(BaseModel):
    """Request to name the wild suit after playing an eight."""

    suit: SuitName


class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    rank: str
    suit: SuitName
    label: str


class GameStateResponse(BaseModel):
    """Current game state as seen by the human player."""

    phase: Literal["dealing", "playing", "selecting_suit", "game_over"]
    turn: Literal["player", "ai"]
    player_hand: list[CardResponse]
    ai_hand_count: int
    top_discard: CardResponse | None
    discard_count: int
    deck_count: int
    wild_suit: SuitName | None
    winner: Literal["player", "ai"] | None
    playable_card_ids: list[str]
    can_draw: bool
