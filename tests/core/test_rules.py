"""Tests for the pure rules engine."""

import pytest
from random import Random

from hypothesis import given, strategies as st

from core.cards import Card, Rank, Suit, create_deck, shuffle_deck
from core.errors import (
    CARD_NOT_IN_HAND,
    EMPTY_DISCARD,
    ILLEGAL_PLAY,
    NOT_YOUR_TURN,
    WRONG_PHASE,
    RuleViolation,
)
from core.game.rules import (
    apply_draw,
    apply_play,
    apply_suit_selection,
    deal,
    is_playable,
    playable_cards,
)
from core.game.state import GameState, Phase, Turn

cards = st.builds(Card, st.sampled_from(list(Suit)), st.sampled_from(list(Rank)))


class TestDeal:
    """Tests for the opening deal."""

    def test_opening_counts(self, rng):
        """Eight cards each, one discard, thirty-five left to draw."""
        state = deal(shuffle_deck(create_deck(), rng))
        assert len(state.player_hand) == 8
        assert len(state.ai_hand) == 8
        assert len(state.discard_pile) == 1
        assert len(state.deck) == 35
        assert state.card_count == 52

    def test_opening_state(self, rng):
        """The player starts with no wild suit and no winner."""
        state = deal(shuffle_deck(create_deck(), rng))
        assert state.phase == Phase.PLAYING
        assert state.turn == Turn.PLAYER
        assert state.wild_suit is None
        assert state.winner is None

    @given(seed=st.integers(min_value=0, max_value=10_000))
    def test_opening_discard_never_eight(self, seed):
        """The first discard face is never wild."""
        state = deal(shuffle_deck(create_deck(), Random(seed)))
        assert state.top_discard.rank != Rank.EIGHT

    def test_skips_leading_eights(self):
        """Eights at the head of the pile stay in the pile."""
        deck = create_deck()
        eights = [c for c in deck if c.is_wild]
        others = [c for c in deck if not c.is_wild]
        ordered = tuple(others[:16] + eights[:2] + others[16:] + eights[2:])

        state = deal(ordered)

        assert state.top_discard == others[16]
        assert eights[0] in state.deck
        assert eights[1] in state.deck
        assert others[16] not in state.deck
        assert state.card_count == 52

    def test_hands_come_from_the_head(self, deck):
        """Player gets the first cards, opponent the next."""
        state = deal(deck, hand_size=5)
        assert state.player_hand == deck[:5]
        assert state.ai_hand == deck[5:10]

    def test_all_eights_left_raises(self):
        """A pile with only eights cannot open."""
        deck = create_deck()
        eights = tuple(c for c in deck if c.is_wild)
        others = tuple(c for c in deck if not c.is_wild)
        with pytest.raises(ValueError):
            deal(others[:4] + eights, hand_size=2)


class TestIsPlayable:
    """Tests for legality checks."""

    def test_matching_suit(self, make_state):
        """A card of the face's suit is playable; an unrelated one is not."""
        state = make_state(["3H", "KS"], ["2C"], top="9H")
        hearts, spade = state.player_hand
        assert is_playable(hearts, state)
        assert not is_playable(spade, state)

    def test_matching_rank(self, make_state):
        """A card of the face's rank is playable in any suit."""
        state = make_state(["9C"], ["2C"], top="9H")
        assert is_playable(state.player_hand[0], state)

    def test_eight_always_playable(self, make_state):
        """Eights ignore the face and the wild suit."""
        state = make_state(["8C"], ["2C"], top="9H", wild_suit=Suit.SPADES)
        assert is_playable(state.player_hand[0], state)

    def test_wild_suit_overrides_face_suit(self, make_state):
        """With a wild suit declared the face's own suit no longer matches."""
        state = make_state(["3H", "3S"], ["2C"], top="8H", wild_suit=Suit.SPADES)
        hearts, spades = state.player_hand
        assert not is_playable(hearts, state)
        assert is_playable(spades, state)

    def test_rank_still_matches_under_wild_suit(self, make_state):
        """Matching the face's rank works even with a wild suit."""
        state = make_state(["KC"], ["2C"], top="KH", wild_suit=Suit.SPADES)
        assert is_playable(state.player_hand[0], state)

    def test_empty_discard_raises(self):
        """Legality is undefined before the first discard."""
        with pytest.raises(RuleViolation) as exc:
            is_playable(Card(Suit.HEARTS, Rank.TWO), GameState.empty())
        assert exc.value.code == EMPTY_DISCARD

    def test_playable_cards_keep_hand_order(self, make_state):
        """Legal plays come back in hand order."""
        state = make_state(["2H", "KS", "8D", "9C"], ["2C"], top="9H")
        assert [str(c) for c in playable_cards(state.player_hand, state)] == ["2♥", "8♦", "9♣"]

    @given(card=cards, top=cards, wild=st.none() | st.sampled_from(list(Suit)))
    def test_playable_definition(self, card, top, wild):
        """Eights always; otherwise target suit or face rank."""
        state = GameState(discard_pile=(top,), phase=Phase.PLAYING, wild_suit=wild)
        target = wild or top.suit
        expected = card.rank == Rank.EIGHT or card.suit == target or card.rank == top.rank
        assert is_playable(card, state) == expected


class TestApplyPlay:
    """Tests for playing a card."""

    def test_moves_card_and_flips_turn(self, make_state):
        """A normal play discards the card and passes the turn."""
        state = make_state(["3H", "KS"], ["2C"], top="9H")
        card = state.player_hand[0]

        new_state = apply_play(state, card, Turn.PLAYER)

        assert card not in new_state.player_hand
        assert new_state.top_discard == card
        assert new_state.turn == Turn.AI
        assert new_state.phase == Phase.PLAYING
        assert len(new_state.discard_pile) == 2

    def test_input_state_untouched(self, make_state):
        """Transitions build a new state."""
        state = make_state(["3H", "KS"], ["2C"], top="9H")
        apply_play(state, state.player_hand[0], Turn.PLAYER)
        assert len(state.player_hand) == 2
        assert len(state.discard_pile) == 1

    def test_hand_order_preserved(self, make_state):
        """Remaining cards keep their order."""
        state = make_state(["KS", "3H", "QD", "2C"], ["2D"], top="9H")
        new_state = apply_play(state, state.player_hand[1], Turn.PLAYER)
        assert [str(c) for c in new_state.player_hand] == ["K♠", "Q♦", "2♣"]

    def test_ai_play_flips_to_player(self, make_state):
        """The opponent's play hands control back."""
        state = make_state(["3H"], ["9C", "KS"], top="9H", turn=Turn.AI)
        new_state = apply_play(state, state.ai_hand[0], Turn.AI)
        assert new_state.turn == Turn.PLAYER
        assert len(new_state.ai_hand) == 1

    def test_human_eight_without_suit_defers(self, make_state):
        """The human's eight waits for a suit without passing the turn."""
        state = make_state(["8C", "KS"], ["2C"], top="9H", wild_suit=Suit.DIAMONDS)
        new_state = apply_play(state, state.player_hand[0], Turn.PLAYER)
        assert new_state.phase == Phase.SELECTING_SUIT
        assert new_state.turn == Turn.PLAYER
        assert new_state.wild_suit == Suit.DIAMONDS

    def test_human_eight_with_suit(self, make_state):
        """A suit supplied with the eight takes effect immediately."""
        state = make_state(["8C", "KS"], ["2C"], top="9H")
        new_state = apply_play(state, state.player_hand[0], Turn.PLAYER, Suit.SPADES)
        assert new_state.phase == Phase.PLAYING
        assert new_state.turn == Turn.AI
        assert new_state.wild_suit == Suit.SPADES

    def test_ai_eight_sets_suit_inline(self, make_state):
        """The opponent names its suit with the eight."""
        state = make_state(["3H"], ["8D", "2C"], top="9H", turn=Turn.AI)
        new_state = apply_play(state, state.ai_hand[0], Turn.AI, Suit.CLUBS)
        assert new_state.wild_suit == Suit.CLUBS
        assert new_state.turn == Turn.PLAYER

    def test_non_eight_clears_wild_suit(self, make_state):
        """A wild suit lasts only until a non-eight is played on it."""
        state = make_state(["3S", "KD"], ["2C"], top="8H", wild_suit=Suit.SPADES)
        new_state = apply_play(state, state.player_hand[0], Turn.PLAYER)
        assert new_state.wild_suit is None

    def test_winning_play(self, make_state):
        """Playing the last card ends the game for the player."""
        state = make_state(["3H"], ["2C", "KS"], top="9H")
        new_state = apply_play(state, state.player_hand[0], Turn.PLAYER)
        assert new_state.phase == Phase.GAME_OVER
        assert new_state.winner == Turn.PLAYER
        assert new_state.turn == Turn.PLAYER
        assert new_state.player_hand == ()

    def test_ai_winning_play(self, make_state):
        """Playing the last card ends the game for the opponent."""
        state = make_state(["3H"], ["2H"], top="9H", turn=Turn.AI)
        new_state = apply_play(state, state.ai_hand[0], Turn.AI)
        assert new_state.phase == Phase.GAME_OVER
        assert new_state.winner == Turn.AI

    def test_last_card_eight_wins_without_suit_prompt(self, make_state):
        """Going out on an eight ends the game instead of asking for a suit."""
        state = make_state(["8S"], ["2C"], top="9H")
        new_state = apply_play(state, state.player_hand[0], Turn.PLAYER)
        assert new_state.phase == Phase.GAME_OVER
        assert new_state.winner == Turn.PLAYER

    def test_illegal_card_rejected(self, make_state):
        """Cards that match neither suit nor rank are refused."""
        state = make_state(["KS"], ["2C"], top="9H")
        with pytest.raises(RuleViolation) as exc:
            apply_play(state, state.player_hand[0], Turn.PLAYER)
        assert exc.value.code == ILLEGAL_PLAY

    def test_card_not_in_hand_rejected(self, make_state):
        """Cards must come from the acting hand."""
        state = make_state(["3H"], ["2H"], top="9H")
        with pytest.raises(RuleViolation) as exc:
            apply_play(state, state.ai_hand[0], Turn.PLAYER)
        assert exc.value.code == CARD_NOT_IN_HAND

    def test_out_of_turn_rejected(self, make_state):
        """Only the side whose turn it is may play."""
        state = make_state(["3H"], ["2H"], top="9H")
        with pytest.raises(RuleViolation) as exc:
            apply_play(state, state.ai_hand[0], Turn.AI)
        assert exc.value.code == NOT_YOUR_TURN

    def test_play_while_selecting_suit_rejected(self, make_state):
        """No plays while a suit is awaited."""
        state = make_state(["8C", "3H"], ["2C"], top="9H")
        waiting = apply_play(state, state.player_hand[0], Turn.PLAYER)
        with pytest.raises(RuleViolation) as exc:
            apply_play(waiting, waiting.player_hand[0], Turn.PLAYER)
        assert exc.value.code == WRONG_PHASE


class TestSuitSelection:
    """Tests for naming the wild suit."""

    def test_selection_sets_suit_and_passes_to_ai(self, make_state):
        """Selecting a suit resumes play with the opponent."""
        state = make_state(["8C", "KS"], ["2C"], top="9H")
        waiting = apply_play(state, state.player_hand[0], Turn.PLAYER)

        new_state = apply_suit_selection(waiting, Suit.SPADES)

        assert new_state.wild_suit == Suit.SPADES
        assert new_state.phase == Phase.PLAYING
        assert new_state.turn == Turn.AI

    def test_selection_outside_phase_rejected(self, make_state):
        """Suit selection only applies after a deferred eight."""
        state = make_state(["3H"], ["2C"], top="9H")
        with pytest.raises(RuleViolation) as exc:
            apply_suit_selection(state, Suit.SPADES)
        assert exc.value.code == WRONG_PHASE


class TestApplyDraw:
    """Tests for drawing."""

    def test_draw_takes_top_of_pile(self, make_state):
        """The last card of the pile moves to the end of the hand."""
        state = make_state(["KS"], ["2C"], top="9H", deck=["4D", "5D"])
        top_of_pile = state.deck[-1]

        new_state = apply_draw(state, Turn.PLAYER)

        assert new_state.player_hand[-1] == top_of_pile
        assert len(new_state.deck) == 1
        assert new_state.turn == Turn.AI

    def test_ai_draw(self, make_state):
        """The opponent's draw goes to its own hand."""
        state = make_state(["KS"], ["2C"], top="9H", deck=["4D"], turn=Turn.AI)
        new_state = apply_draw(state, Turn.AI)
        assert len(new_state.ai_hand) == 2
        assert new_state.turn == Turn.PLAYER

    def test_empty_pile_forces_pass(self, make_state):
        """An empty pile passes the turn without moving cards."""
        state = make_state(["KS"], ["2C"], top="9H", deck=[])
        new_state = apply_draw(state, Turn.PLAYER)
        assert new_state.player_hand == state.player_hand
        assert new_state.turn == Turn.AI

    def test_draw_keeps_phase_and_wild_suit(self, make_state):
        """Drawing never changes phase or wild suit."""
        state = make_state(["KS"], ["2C"], top="8H", deck=["4D"], wild_suit=Suit.CLUBS)
        new_state = apply_draw(state, Turn.PLAYER)
        assert new_state.phase == Phase.PLAYING
        assert new_state.wild_suit == Suit.CLUBS

    def test_draw_out_of_turn_rejected(self, make_state):
        """Only the side to act may draw."""
        state = make_state(["KS"], ["2C"], top="9H", deck=["4D"])
        with pytest.raises(RuleViolation) as exc:
            apply_draw(state, Turn.AI)
        assert exc.value.code == NOT_YOUR_TURN


class TestTurn:
    """Tests for turn alternation."""

    def test_turn_other(self):
        """Turns alternate."""
        assert Turn.PLAYER.other == Turn.AI
        assert Turn.AI.other == Turn.PLAYER
