"""
Tests for the reducer (state transitions).

Tests:
- Phase guards and no-op rejection
- Suit selection and the initial flip
- Main phase plays, discards and end of turn
- Pending lanes and lane resolution
- End of round, game over and sudden death
"""

import random

import pytest

from ..config import RulesConfig
from ..engine_core.action import Action, ActionType
from ..engine_core.cards import DECK_SIZE, STANDARD_SUITS, Suit
from ..engine_core.reducer import (
    Reducer, game_reducer, resolve_lane, check_game_over, process_pending_lanes,
    can_play_card_to_lane, can_discard_card, can_end_turn,
)
from ..engine_core.state import (
    GameState, GamePhase, LaneId, PlayerState, PendingLaneResolution, initialize_new_game,
)
from .conftest import cards, main_state, with_lane


class TestHandlers:
    """Dispatch table and guards."""

    def test_every_action_type_has_handler(self, reducer):
        for action_type in ActionType:
            assert reducer._get_handler(action_type) is not None

    def test_actions_in_wrong_phase_are_noops(self, reducer, rng):
        state = initialize_new_game(rng)
        for action in (
            Action.initial_flip_step(),
            Action.continue_from_flip(),
            Action.end_turn(),
            Action.discard("card-0"),
            Action.resolve_lane(LaneId.LEFT),
            Action.resolve_end_of_round(),
            Action.sudden_death_step(),
        ):
            assert reducer.apply(state, action) is state

    def test_start_new_game(self, reducer):
        state = reducer.apply(main_state(), Action.start_new_game())
        assert state.phase == GamePhase.SUIT_SELECTION
        assert len(state.all_card_ids()) == DECK_SIZE

    def test_game_reducer_convenience(self):
        state = game_reducer(main_state(), Action.start_new_game(skip_suit_selection=True), random.Random(1))
        assert state.phase == GamePhase.INITIAL_FLIP

    def test_game_reducer_uses_given_rules(self):
        state = game_reducer(main_state(), Action.start_new_game(), random.Random(1), RulesConfig(starting_hp=40))
        assert state.player1.hp == state.player2.hp == 40


class TestSuitSelection:
    def test_opponent_gets_different_suit(self, rng):
        for seed in range(20):
            reducer = Reducer(rng=random.Random(seed))
            state = reducer.apply(initialize_new_game(rng), Action.select_suit(Suit.HEARTS))
            assert state.phase == GamePhase.INITIAL_FLIP
            assert state.player1_suit == Suit.HEARTS
            assert state.player2_suit in STANDARD_SUITS
            assert state.player2_suit != Suit.HEARTS

    def test_joker_suit_rejected(self, reducer, rng):
        state = initialize_new_game(rng)
        assert reducer.apply(state, Action.select_suit(Suit.JOKER)) is state


class TestInitialFlip:
    """War flip and the start of the main phase."""

    def _flip_state(self, deck1, deck2, suit1=None, suit2=None):
        return GameState(
            phase=GamePhase.INITIAL_FLIP,
            player1=PlayerState(hp=100, deck=tuple(deck1)),
            player2=PlayerState(hp=100, deck=tuple(deck2)),
            player1_suit=suit1,
            player2_suit=suit2,
        )

    def test_flip_then_continue(self, reducer, rng):
        state = initialize_new_game(rng, skip_suit_selection=True)
        flipped = reducer.apply(state, Action.initial_flip_step())
        assert flipped.phase == GamePhase.INITIAL_FLIP_RESULT
        flip = flipped.flip_result
        assert flip is not None
        assert flip.damage == abs(flip.player1_card.value - flip.player2_card.value)
        assert flipped.all_card_ids() == state.all_card_ids()

        main = reducer.apply(flipped, Action.continue_from_flip())
        assert main.phase == GamePhase.MAIN
        assert main.flip_result is None
        assert main.current_player == flip.winner
        assert len(main.player1.hand) == len(main.player2.hand) == 5
        assert main.get_player(3 - flip.winner).hp == 100 - flip.damage
        assert main.get_player(flip.winner).hp == 100
        assert main.all_card_ids() == state.all_card_ids()

    def test_tied_pairs_are_discarded(self, reducer, filler):
        state = self._flip_state(cards("5h", "9h") + filler, cards("5s", "3s") + filler)
        flipped = reducer.apply(state, Action.initial_flip_step())
        assert [str(c) for c in flipped.discard_pile] == ["5♥", "5♠"]
        assert flipped.flip_result.winner == 1
        assert flipped.flip_result.damage == 6
        assert len(flipped.player1.deck) == len(filler)

    def test_winner_takes_field_control(self, reducer, filler):
        state = self._flip_state(cards("2h") + filler, cards("Kd") + filler, Suit.HEARTS, Suit.DIAMONDS)
        main = reducer.apply(reducer.apply(state, Action.initial_flip_step()), Action.continue_from_flip())
        assert main.current_player == 2
        assert main.field_control_suit == Suit.DIAMONDS
        assert main.player1.hp == 89

    def test_decks_exhausted_on_ties(self, reducer):
        state = self._flip_state(cards("5h"), cards("5s"))
        flipped = reducer.apply(state, Action.initial_flip_step())
        assert flipped.flip_result.winner == 1
        assert flipped.flip_result.damage == 0

    def test_flip_damage_can_end_game(self, reducer, filler):
        state = self._flip_state(cards("2h") + filler, cards("Ad") + filler)
        state = state.with_player(1, state.player1._copy_with(hp=10))
        result = reducer.apply(reducer.apply(state, Action.initial_flip_step()), Action.continue_from_flip())
        assert result.phase == GamePhase.FINISHED
        assert result.winner == 2


class TestPlayCard:
    """Playing cards to lanes."""

    def test_play_moves_card(self, reducer):
        hand = cards("5h", "9h", "3h")
        state = main_state(hand1=hand)
        result = reducer.apply(state, Action.play_card(hand[0].card_id, LaneId.LEFT))
        assert result.get_lane(LaneId.LEFT).player1.cards == (hand[0],)
        assert result.player1.hand == hand[1:]
        assert result.cards_played_this_turn == 1

    def test_lower_card_rejected(self, reducer):
        hand = cards("5h", "3h", "5d")
        state = reducer.apply(main_state(hand1=hand), Action.play_card(hand[0].card_id, LaneId.LEFT))
        assert reducer.apply(state, Action.play_card(hand[1].card_id, LaneId.LEFT)) is state
        equal = reducer.apply(state, Action.play_card(hand[2].card_id, LaneId.LEFT))
        assert equal.get_lane(LaneId.LEFT).player1.count == 2

    def test_unknown_card_or_lane_rejected(self, reducer):
        hand = cards("5h")
        state = main_state(hand1=hand)
        assert reducer.apply(state, Action.play_card("missing", LaneId.LEFT)) is state
        assert reducer.apply(state, Action.play_card(hand[0].card_id, "nowhere")) is state

    def test_opponent_card_rejected(self, reducer):
        hand2 = cards("5h")
        state = main_state(hand2=hand2)
        assert reducer.apply(state, Action.play_card(hand2[0].card_id, LaneId.LEFT)) is state

    def test_full_side_rejected(self, reducer):
        hand = cards("Ah")
        state = with_lane(main_state(hand1=hand), LaneId.LEFT, p1=cards("2h", "3h", "4h"))
        assert not can_play_card_to_lane(state, hand[0].card_id, LaneId.LEFT)
        assert reducer.apply(state, Action.play_card(hand[0].card_id, LaneId.LEFT)) is state

    def test_fourth_play_rejected(self, reducer):
        hand = cards("5h", "6h")
        state = main_state(hand1=hand)._copy_with(cards_played_this_turn=3)
        assert reducer.apply(state, Action.play_card(hand[0].card_id, LaneId.LEFT)) is state
        assert reducer.apply(state, Action.discard(hand[0].card_id)) is state
        assert not can_discard_card(state, hand[0].card_id)

    def test_filling_side_starts_countdown(self, reducer):
        hand = cards("2h", "3h", "4h")
        state = main_state(hand1=hand)
        for card in hand:
            state = reducer.apply(state, Action.play_card(card.card_id, LaneId.MIDDLE))
        assert state.pending_resolution_lanes == (
            PendingLaneResolution(lane_id=LaneId.MIDDLE, filled_by_player=1, turns_until_resolution=2),
        )
        assert state.get_lane(LaneId.MIDDLE).player1.count == 3

    def test_filling_both_sides_resolves_immediately(self, reducer):
        hand = cards("10s")
        state = with_lane(
            main_state(hand1=hand), LaneId.LEFT,
            p1=cards("10h", "10d"), p2=cards("2h", "3d", "7c"),
        )._copy_with(
            pending_resolution_lanes=(PendingLaneResolution(LaneId.LEFT, 2, 1),),
        )
        result = reducer.apply(state, Action.play_card(hand[0].card_id, LaneId.LEFT))
        # 30 + 12 (trips) against 12
        assert result.player2.hp == 70
        assert result.get_lane(LaneId.LEFT).is_empty
        assert len(result.discard_pile) == 6
        assert result.pending_resolution_lanes == ()


class TestDiscard:
    def test_discard_costs_card_value(self, reducer):
        hand = cards("Qd", "2h")
        result = reducer.apply(main_state(hand1=hand), Action.discard(hand[0].card_id))
        assert result.player1.hp == 88
        assert result.discard_pile == (hand[0],)
        assert result.player1.hand == (hand[1],)
        assert result.cards_played_this_turn == 1

    def test_discard_can_lose_game(self, reducer):
        hand = cards("Ks")
        result = reducer.apply(main_state(hand1=hand, hp1=5), Action.discard(hand[0].card_id))
        assert result.phase == GamePhase.FINISHED
        assert result.winner == 2

    def test_discard_joker_costs_15(self, reducer):
        hand = cards("JK")
        result = reducer.apply(main_state(hand1=hand), Action.discard(hand[0].card_id))
        assert result.player1.hp == 85


class TestEndTurn:
    """Draw step and turn handover."""

    def test_requires_all_plays(self, reducer, filler):
        state = main_state(deck1=filler)._copy_with(cards_played_this_turn=2)
        assert not can_end_turn(state)
        assert reducer.apply(state, Action.end_turn()) is state

    def test_draws_and_switches_player(self, reducer, filler):
        state = main_state(deck1=filler)._copy_with(cards_played_this_turn=3)
        result = reducer.apply(state, Action.end_turn())
        assert result.current_player == 2
        assert result.cards_played_this_turn == 0
        assert len(result.player1.hand) == 3
        assert len(result.player1.deck) == len(filler) - 3
        assert not result.player1_final_turn_done

    def test_short_deck_is_discarded_without_damage(self, reducer):
        deck = cards("Ah", "Kh")
        state = main_state(deck1=deck)._copy_with(cards_played_this_turn=3)
        result = reducer.apply(state, Action.end_turn())
        assert result.player1.deck == ()
        assert result.player1.hand == ()
        assert result.discard_pile == deck
        assert result.player1.hp == 100
        assert result.player1_final_turn_done
        assert result.current_player == 2

    def test_both_final_turns_end_round(self, reducer):
        state = main_state()._copy_with(
            cards_played_this_turn=3,
            player2_final_turn_done=True,
            pending_resolution_lanes=(PendingLaneResolution(LaneId.LEFT, 2, 2),),
        )
        result = reducer.apply(state, Action.end_turn())
        assert result.phase == GamePhase.END_OF_ROUND_RESOLVING
        assert result.pending_resolution_lanes == ()


class TestPendingLanes:
    """Countdown of one-sided lanes."""

    def _pending_state(self, turns, filler):
        state = with_lane(
            main_state(deck2=filler, current_player=2), LaneId.RIGHT,
            p1=cards("9h", "9d", "9s"), p2=cards("4c"),
        )
        return state._copy_with(
            cards_played_this_turn=3,
            pending_resolution_lanes=(PendingLaneResolution(LaneId.RIGHT, 1, turns),),
        )

    def test_countdown_ticks_on_owner_turn(self, reducer, filler):
        result = reducer.apply(self._pending_state(2, filler), Action.end_turn())
        assert result.current_player == 1
        assert result.pending_resolution_lanes == (PendingLaneResolution(LaneId.RIGHT, 1, 1),)
        assert result.get_lane(LaneId.RIGHT).player1.count == 3

    def test_lane_resolves_at_zero(self, reducer, filler):
        result = reducer.apply(self._pending_state(1, filler), Action.end_turn())
        assert result.pending_resolution_lanes == ()
        assert result.get_lane(LaneId.RIGHT).is_empty
        # 27 + 12 (trips) against 4
        assert result.player2.hp == 100 - 35

    def test_other_players_entries_untouched(self):
        state = main_state()._copy_with(
            pending_resolution_lanes=(PendingLaneResolution(LaneId.LEFT, 2, 2),),
        )
        assert process_pending_lanes(state, 1).pending_resolution_lanes == state.pending_resolution_lanes

    def test_filled_lane_resolves_after_two_turn_cycles(self, reducer):
        """Fill, opponent turn, own turn, opponent turn, then resolve at the start of the next own turn."""
        hand1 = cards("9h", "9d", "9s")
        hand2 = cards("2c", "2d", "2s")
        state = with_lane(
            main_state(
                hand1=hand1, hand2=hand2,
                deck1=cards(*["2h"] * 10), deck2=cards(*["2h"] * 10),
            ),
            LaneId.MIDDLE, p2=cards("4c"),
        )

        def take_turn(state, *actions):
            for action in actions:
                after = reducer.apply(state, action)
                assert after is not state
                state = after
            return reducer.apply(state, Action.end_turn())

        state = take_turn(state, *(Action.play_card(c.card_id, LaneId.MIDDLE) for c in hand1))
        assert state.pending_resolution_lanes == (PendingLaneResolution(LaneId.MIDDLE, 1, 2),)

        state = take_turn(
            state,
            Action.play_card(hand2[0].card_id, LaneId.LEFT),
            Action.play_card(hand2[1].card_id, LaneId.RIGHT),
            Action.discard(hand2[2].card_id),
        )
        assert state.current_player == 1
        assert state.pending_resolution_lanes == (PendingLaneResolution(LaneId.MIDDLE, 1, 1),)

        drawn1 = state.player1.hand
        state = take_turn(
            state,
            Action.play_card(drawn1[0].card_id, LaneId.LEFT),
            Action.play_card(drawn1[1].card_id, LaneId.LEFT),
            Action.play_card(drawn1[2].card_id, LaneId.RIGHT),
        )
        assert state.get_lane(LaneId.MIDDLE).player1.count == 3

        drawn2 = state.player2.hand
        state = take_turn(
            state,
            Action.play_card(drawn2[0].card_id, LaneId.LEFT),
            Action.play_card(drawn2[1].card_id, LaneId.RIGHT),
            Action.discard(drawn2[2].card_id),
        )
        assert state.current_player == 1
        assert state.pending_resolution_lanes == ()
        assert state.get_lane(LaneId.MIDDLE).is_empty
        # Two discarded 2s, then 27 + 12 (trips) against 4
        assert state.player2.hp == 100 - 4 - 35
        assert state.player1.hp == 100


class TestResolveLane:
    """Lane scoring with suit effects."""

    def test_winner_damage_and_loser_healing(self):
        state = with_lane(
            main_state(suit1=Suit.SPADES, suit2=Suit.HEARTS), LaneId.MIDDLE,
            p1=cards("Qs", "Ks", "As"), p2=cards("2h", "4h", "9c"),
        )
        result = resolve_lane(state, LaneId.MIDDLE)
        # 59 vs 15, +9 spades damage, -14 hearts healing
        assert result.player2.hp == 100 - 39
        assert result.player1.hp == 100
        assert result.get_lane(LaneId.MIDDLE).is_empty
        assert len(result.discard_pile) == 6

    def test_healing_overflow_raises_hp(self):
        state = with_lane(
            main_state(suit1=Suit.SPADES, suit2=Suit.HEARTS), LaneId.LEFT,
            p1=cards("5c", "9d", "Kc"), p2=cards("4h", "8h", "Qs"),
        )
        result = resolve_lane(state, LaneId.LEFT)
        assert result.player2.hp == 109

    def test_tie_deals_nothing(self):
        state = with_lane(main_state(), LaneId.LEFT, p1=cards("9h"), p2=cards("9s"))
        result = resolve_lane(state, LaneId.LEFT)
        assert result.player1.hp == result.player2.hp == 100
        assert result.get_lane(LaneId.LEFT).is_empty

    def test_resolve_lane_action_drops_pending(self, reducer):
        state = with_lane(main_state(), LaneId.LEFT, p1=cards("2h", "3h", "4h"), p2=cards("Ks"))._copy_with(
            pending_resolution_lanes=(PendingLaneResolution(LaneId.LEFT, 1, 2),),
        )
        result = reducer.apply(state, Action.resolve_lane(LaneId.LEFT))
        assert result.pending_resolution_lanes == ()
        # 9 + 20 (straight flush) against 13
        assert result.player2.hp == 84
        assert result.get_lane(LaneId.LEFT).is_empty


class TestEndOfRound:
    """Board resolution and round transitions."""

    def _eor(self, hp1=100, hp2=100):
        return main_state(hp1=hp1, hp2=hp2)._copy_with(phase=GamePhase.END_OF_ROUND_RESOLVING)

    def test_higher_hp_wins_when_both_fall(self, reducer):
        state = with_lane(self._eor(5, 10), LaneId.LEFT, p1=cards("10h", "10d", "10s"), p2=cards("2h", "3d", "7c"))
        state = with_lane(state, LaneId.RIGHT, p1=cards("2c"), p2=cards("Ks"))
        result = reducer.apply(state, Action.resolve_end_of_round())
        assert result.phase == GamePhase.FINISHED
        assert result.winner == 1
        assert result.player1.hp == -6
        assert result.player2.hp == -20

    def test_both_at_zero_goes_to_sudden_death(self, reducer):
        state = with_lane(self._eor(10, 10), LaneId.LEFT, p1=cards("Qs"), p2=cards("2h"))
        state = with_lane(state, LaneId.RIGHT, p1=cards("2c"), p2=cards("Qd"))
        result = reducer.apply(state, Action.resolve_end_of_round())
        assert result.player1.hp == result.player2.hp == 0
        assert result.phase == GamePhase.SUDDEN_DEATH

    def test_level_hp_goes_to_sudden_death(self, reducer):
        result = reducer.apply(self._eor(50, 50), Action.resolve_end_of_round())
        assert result.phase == GamePhase.SUDDEN_DEATH

    def test_next_round_keeps_hp_and_suits(self, reducer, rng):
        state = initialize_new_game(rng)._copy_with(
            phase=GamePhase.END_OF_ROUND_RESOLVING,
            player1_suit=Suit.CLUBS,
            player2_suit=Suit.SPADES,
        )
        state = state.with_player(2, state.player2._copy_with(hp=70))
        result = reducer.apply(state, Action.resolve_end_of_round())
        assert result.phase == GamePhase.INITIAL_FLIP
        assert result.round_number == 2
        assert (result.player1.hp, result.player2.hp) == (100, 70)
        assert (result.player1_suit, result.player2_suit) == (Suit.CLUBS, Suit.SPADES)
        assert result.all_card_ids() == state.all_card_ids()


class TestGameOver:
    @pytest.mark.parametrize(
        "hp1, hp2, phase, winner",
        [
            (10, 10, None, None),
            (0, 10, GamePhase.FINISHED, 2),
            (10, -3, GamePhase.FINISHED, 1),
            (-5, -2, GamePhase.FINISHED, 2),
            (0, 0, GamePhase.SUDDEN_DEATH, None),
        ],
    )
    def test_check_game_over(self, hp1, hp2, phase, winner):
        result = check_game_over(main_state(hp1=hp1, hp2=hp2))
        if phase is None:
            assert result is None
        else:
            assert result.phase == phase
            assert result.winner == winner

    def test_sudden_death_finishes_match(self, reducer):
        state = main_state(hand1=cards("5h"), deck2=cards("6h"))._copy_with(phase=GamePhase.SUDDEN_DEATH)
        result = reducer.apply(state, Action.sudden_death_step())
        assert result.phase == GamePhase.FINISHED
        assert result.winner in (1, 2)
        assert result.player1.hand == result.player2.deck == ()
        ids = result.all_card_ids()
        assert len(ids) == DECK_SIZE
        assert set(ids.values()) == {1}

    def test_finished_state_ignores_actions(self, reducer):
        state = main_state(hand1=cards("5h"))._copy_with(phase=GamePhase.FINISHED, winner=1)
        assert reducer.apply(state, Action.play_card(state.player1.hand[0].card_id, LaneId.LEFT)) is state
        assert reducer.apply(state, Action.sudden_death_step()) is state
