"""WebSocket connection management with game engine integration."""

import asyncio
import json
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from typing import Any

from api.routes.game import game_state_response, get_game, rejection_message
from api.session import extract_session_id
from core.cards import Suit
from core.game import CrazyEightsGame, GameEvent, Turn

logger = logging.getLogger(__name__)

router = APIRouter()

# Application close codes, mirroring HTTP 401 and 404
CLOSE_INVALID_TOKEN = 4401
CLOSE_NO_GAME = 4404


class ConnectionManager:
    """Track open sockets and pipe each game's events into a per-session queue."""

    def __init__(self) -> None:
        self._connections: dict[str, WebSocket] = {}
        self._event_queues: dict[str, asyncio.Queue] = {}
        self._handlers: dict[str, tuple[CrazyEightsGame, Any]] = {}

    async def connect(self, websocket: WebSocket, session_id: str, game: CrazyEightsGame) -> None:
        """Register an accepted socket and start forwarding its game's events."""
        self.disconnect(session_id)
        queue: asyncio.Queue = asyncio.Queue()
        self._connections[session_id] = websocket
        self._event_queues[session_id] = queue

        handler = queue.put_nowait
        game.subscribe(handler)
        self._handlers[session_id] = (game, handler)

    def disconnect(self, session_id: str, websocket: WebSocket | None = None) -> None:
        """Forget a connection and stop listening to its game."""
        if websocket is not None and self._connections.get(session_id) is not websocket:
            # A newer socket has taken over this session
            return
        self._connections.pop(session_id, None)
        self._event_queues.pop(session_id, None)
        entry = self._handlers.pop(session_id, None)
        if entry is not None:
            game, handler = entry
            game.events.unsubscribe(handler)

    async def get_event(self, session_id: str) -> GameEvent | None:
        """Next queued event, or None after a short wait."""
        queue = self._event_queues.get(session_id)
        if queue is None:
            return None
        try:
            return await asyncio.wait_for(queue.get(), timeout=0.1)
        except asyncio.TimeoutError:
            return None

    async def send_message(self, session_id: str, message: dict[str, Any]) -> None:
        """Send a message to a specific session."""
        if session_id in self._connections:
            try:
                await self._connections[session_id].send_json(message)
            except (RuntimeError, WebSocketDisconnect):
                logger.debug("Connection %s closed while sending", session_id[:8])


# Global connection manager
manager = ConnectionManager()


def _state_message(game: CrazyEightsGame) -> dict[str, Any]:
    return {"type": "state_update", "state": game_state_response(game).model_dump()}


def _event_to_message(event: GameEvent, game: CrazyEightsGame) -> dict[str, Any]:
    """Convert a game event to a WebSocket message."""
    return {
        "type": "event",
        "event_type": event.event_type.name,
        "data": event.data,
        "state": game_state_response(game).model_dump(),
    }


def _handle_message(game: CrazyEightsGame, message: dict[str, Any]) -> str | None:
    """
    Apply one client message to the game.

    Returns:
        An error message, or None if the message was accepted
    """
    msg_type = message.get("type")

    if msg_type == "play":
        card = game.find_card(str(message.get("card_id", "")), Turn.PLAYER)
        if card is None:
            return "Card is not in your hand"
        suit = message.get("suit")
        try:
            wild = Suit(suit) if suit else None
        except ValueError:
            return f"Unknown suit: {suit}"
        if not game.play_card(card, Turn.PLAYER, wild):
            return rejection_message(game)

    elif msg_type == "draw":
        if not game.draw_card(Turn.PLAYER):
            return rejection_message(game)

    elif msg_type == "select_suit":
        try:
            suit = Suit(message.get("suit"))
        except ValueError:
            return f"Unknown suit: {message.get('suit')}"
        if not game.select_wild_suit(suit):
            return rejection_message(game)

    elif msg_type == "new_game":
        game.init_game()

    elif msg_type != "get_state":
        return f"Unknown message type: {msg_type}"

    return None


async def _reject_connection(websocket: WebSocket, code: int, message: str) -> None:
    await websocket.send_json({"type": "error", "message": message})
    await websocket.close(code=code)


@router.websocket("/game/{session_id}")
async def game_websocket(websocket: WebSocket, session_id: str) -> None:
    """
    WebSocket endpoint for real-time game updates.

    ``session_id`` is the signed token returned by ``POST /api/game/new``.
    Unverifiable tokens close with 4401, unknown or expired sessions with 4404.

    Messages from client:
    - {"type": "play", "card_id": "...", "suit": "hearts"?}
    - {"type": "draw"}
    - {"type": "select_suit", "suit": "spades"}
    - {"type": "new_game"}
    - {"type": "get_state"}

    Messages to client:
    - {"type": "state_update", "state": {...}}
    - {"type": "event", "event_type": "...", "data": {...}, "state": {...}}
    - {"type": "error", "message": "..."}

    The opponent's delayed moves arrive as events without any client message.
    """
    await websocket.accept()

    if extract_session_id(session_id) is None:
        await _reject_connection(websocket, CLOSE_INVALID_TOKEN, "Invalid session token")
        return
    game = get_game(session_id)
    if game is None:
        await _reject_connection(websocket, CLOSE_NO_GAME, "No game for this session")
        return

    await manager.connect(websocket, session_id, game)
    await manager.send_message(session_id, _state_message(game))

    async def process_events():
        """Process game events and send to client."""
        while True:
            event = await manager.get_event(session_id)
            if event:
                await manager.send_message(session_id, _event_to_message(event, game))
            else:
                await asyncio.sleep(0.01)

    event_task = asyncio.create_task(process_events())

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await manager.send_message(session_id, {"type": "error", "message": "Invalid JSON"})
                continue
            if not isinstance(message, dict):
                await manager.send_message(session_id, {"type": "error", "message": "Invalid message"})
                continue

            error = _handle_message(game, message)
            if error is not None:
                await manager.send_message(session_id, {"type": "error", "message": error})
            elif message.get("type") in ("get_state", "new_game"):
                await manager.send_message(session_id, _state_message(game))

    except WebSocketDisconnect:
        logger.debug("Client %s disconnected", session_id[:8])
    finally:
        event_task.cancel()
        try:
            await event_task
        except asyncio.CancelledError:
            pass
        manager.disconnect(session_id, websocket)
