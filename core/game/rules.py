"""Pure rules: legality checks and state transitions for Crazy Eights."""

from dataclasses import replace
from typing import Iterable

from core.cards import Card, Suit
from core.errors import (
    CARD_NOT_IN_HAND,
    EMPTY_DISCARD,
    ILLEGAL_PLAY,
    NOT_YOUR_TURN,
    WRONG_PHASE,
    RuleViolation,
)
from core.game.state import GameState, Phase, Turn

HAND_SIZE = 8


def is_playable(card: Card, state: GameState) -> bool:
    """
    Check whether a card may be played on the current discard face.

    An eight is always playable. Anything else must match the target suit
    (the wild suit if one is declared, otherwise the face's suit) or the
    face's rank.

    Raises:
        RuleViolation: if no card has been discarded yet
    """
    if card.is_wild:
        return True

    top = state.top_discard
    if top is None:
        raise RuleViolation(EMPTY_DISCARD, "No discard face to play on")

    return card.suit == state.target_suit or card.rank == top.rank


def playable_cards(hand: Iterable[Card], state: GameState) -> list[Card]:
    """Return the legal plays from a hand, in hand order."""
    return [card for card in hand if is_playable(card, state)]


def deal(deck: tuple[Card, ...], hand_size: int = HAND_SIZE) -> GameState:
    """
    Deal a new game from a shuffled deck.

    The player receives the first ``hand_size`` cards and the opponent the
    next ``hand_size``. The opening discard is the first non-eight left in
    the pile, so a game never opens on a wild card.

    Args:
        deck: Shuffled deck
        hand_size: Cards dealt to each side

    Returns:
        A state in the PLAYING phase with the player to act
    """
    player_hand = tuple(deck[:hand_size])
    ai_hand = tuple(deck[hand_size:2 * hand_size])
    remaining = list(deck[2 * hand_size:])

    index = next(
        (i for i, card in enumerate(remaining) if not card.is_wild),
        None,
    )
    if index is None:
        raise ValueError("Deck has no non-eight card left for the opening discard")
    first = remaining.pop(index)

    return GameState(
        deck=tuple(remaining),
        player_hand=player_hand,
        ai_hand=ai_hand,
        discard_pile=(first,),
        turn=Turn.PLAYER,
        phase=Phase.PLAYING,
        wild_suit=None,
        winner=None,
    )


def _require_turn(state: GameState, turn: Turn) -> None:
    if state.phase != Phase.PLAYING:
        raise RuleViolation(WRONG_PHASE, f"Cannot act during {state.phase.value}")
    if state.turn != turn:
        raise RuleViolation(NOT_YOUR_TURN, f"It is {state.turn.value}'s turn")


def apply_play(
    state: GameState,
    card: Card,
    turn: Turn,
    chosen_wild_suit: Suit | None = None,
) -> GameState:
    """
    Play a card from one side's hand onto the discard pile.

    Args:
        state: Current state
        card: Card to play (must be in the acting hand and playable)
        turn: Acting side
        chosen_wild_suit: Suit declared with an eight; the human may omit it
            and name it later through ``apply_suit_selection``

    Returns:
        The next state

    Raises:
        RuleViolation: if the play breaks the rules; the input is untouched
    """
    _require_turn(state, turn)

    hand = state.hand(turn)
    if card not in hand:
        raise RuleViolation(CARD_NOT_IN_HAND, f"{card} is not in {turn.value}'s hand")
    if not is_playable(card, state):
        raise RuleViolation(ILLEGAL_PLAY, f"{card} cannot be played on {state.top_discard}")

    new_hand = tuple(c for c in hand if c != card)
    played = {
        state.hand_field(turn): new_hand,
        "discard_pile": state.discard_pile + (card,),
    }

    # Emptying a hand ends the game before any suit is asked for
    if not new_hand:
        return replace(
            state,
            **played,
            phase=Phase.GAME_OVER,
            winner=turn,
            wild_suit=chosen_wild_suit if card.is_wild else None,
        )

    if card.is_wild and turn == Turn.PLAYER and chosen_wild_suit is None:
        return replace(state, **played, phase=Phase.SELECTING_SUIT)

    return replace(
        state,
        **played,
        phase=Phase.PLAYING,
        turn=turn.other,
        wild_suit=chosen_wild_suit if card.is_wild else None,
    )


def apply_suit_selection(state: GameState, suit: Suit) -> GameState:
    """
    Declare the wild suit after the human played an eight.

    Control always passes to the opponent afterwards.

    Raises:
        RuleViolation: outside the SELECTING_SUIT phase
    """
    if state.phase != Phase.SELECTING_SUIT:
        raise RuleViolation(WRONG_PHASE, "No eight is waiting for a suit")

    return replace(state, wild_suit=suit, phase=Phase.PLAYING, turn=Turn.AI)


def apply_draw(state: GameState, turn: Turn) -> GameState:
    """
    Draw the top card of the pile into the acting hand and pass the turn.

    An empty pile is a forced pass: no card moves but the turn still flips.
    Phase and wild suit are never changed.

    Raises:
        RuleViolation: outside PLAYING or out of turn
    """
    _require_turn(state, turn)

    if not state.deck:
        return replace(state, turn=turn.other)

    card = state.deck[-1]
    return replace(
        state,
        deck=state.deck[:-1],
        turn=turn.other,
        **{state.hand_field(turn): state.hand(turn) + (card,)},
    )
