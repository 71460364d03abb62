"""Game API endpoints."""

import logging
from fastapi import APIRouter, HTTPException, Header
from typing import Annotated

from api.schemas import CardResponse, GameStateResponse, PlayRequest, SuitRequest
from api.session import extract_session_id, get_session_store
from config import config
from core.cards import Card, Suit
from core.game import AsyncioScheduler, CrazyEightsGame, Turn

logger = logging.getLogger(__name__)

router = APIRouter()


def create_game() -> CrazyEightsGame:
    """Build a dealt game using the configured rules and event-loop timing."""
    game = CrazyEightsGame(
        hand_size=config.game.hand_size,
        opponent_delay=config.game.opponent_delay,
        fallback_suit=Suit(config.game.fallback_suit),
        scheduler=AsyncioScheduler(),
    )
    game.init_game()
    return game


def get_game(session_id: str) -> CrazyEightsGame | None:
    """Return the live game for a session token, if any."""
    return get_session_store().get(session_id)


def _card_response(card: Card) -> CardResponse:
    return CardResponse(id=card.id, rank=card.rank.value, suit=card.suit.value, label=str(card))


def game_state_response(game: CrazyEightsGame) -> GameStateResponse:
    """Convert game state to response."""
    state = game.state
    top = state.top_discard
    return GameStateResponse(
        phase=state.phase.value,
        turn=state.turn.value,
        player_hand=[_card_response(c) for c in state.player_hand],
        ai_hand_count=len(state.ai_hand),
        top_discard=_card_response(top) if top else None,
        discard_count=len(state.discard_pile),
        deck_count=len(state.deck),
        wild_suit=state.wild_suit.value if state.wild_suit else None,
        winner=state.winner.value if state.winner else None,
        playable_card_ids=[c.id for c in game.playable_cards(Turn.PLAYER)] if game.can_draw else [],
        can_draw=game.can_draw,
    )


def rejection_message(game: CrazyEightsGame) -> str:
    """Message of the most recent rejected action."""
    return game.last_rejection() or "Action not allowed"


def _require_game(session_id: str) -> CrazyEightsGame:
    """Resolve a signed session token to its live game."""
    if extract_session_id(session_id) is None:
        raise HTTPException(status_code=401, detail="Invalid session token")
    game = get_game(session_id)
    if game is None:
        raise HTTPException(status_code=404, detail="No game for this session")
    return game


@router.post("/new")
async def new_game(
    session_id: Annotated[str | None, Header(alias="X-Session-ID")] = None,
) -> dict[str, str]:
    """Create a new game session, or restart the game of an existing one."""
    game = get_game(session_id) if session_id else None
    if game is None:
        session_id = get_session_store().create(create_game())
        logger.info("Opened session %s", session_id[:8])
    else:
        game.init_game()
        logger.info("Restarted game for session %s", session_id[:8])
    return {"session_id": session_id}


@router.get("/state")
async def get_state(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Get current game state."""
    game = _require_game(session_id)
    return game_state_response(game)


@router.post("/play")
async def play_card(
    request: PlayRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Play a card from the human hand."""
    game = _require_game(session_id)

    card = game.find_card(request.card_id, Turn.PLAYER)
    if card is None:
        raise HTTPException(status_code=400, detail="Card is not in your hand")

    suit = Suit(request.suit) if request.suit else None
    if not game.play_card(card, Turn.PLAYER, suit):
        raise HTTPException(status_code=400, detail=rejection_message(game))

    return game_state_response(game)


@router.post("/draw")
async def draw_card(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Draw a card (or pass when the pile is empty)."""
    game = _require_game(session_id)

    if not game.draw_card(Turn.PLAYER):
        raise HTTPException(status_code=400, detail=rejection_message(game))

    return game_state_response(game)


@router.post("/suit")
async def select_suit(
    request: SuitRequest,
    session_id: Annotated[str, Header(alias="X-Session-ID")],
) -> GameStateResponse:
    """Name the wild suit after playing an eight."""
    game = _require_game(session_id)

    if not game.select_wild_suit(Suit(request.suit)):
        raise HTTPException(status_code=400, detail=rejection_message(game))

    return game_state_response(game)
