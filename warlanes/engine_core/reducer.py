"""
Reducer - Applies actions to game state.

The reducer is the single point of state transition.
All state changes must go through Reducer.apply() / game_reducer().

Design principles:
- Pure function: (state, action) -> new_state
- Every handler guards on phase first
- Illegal actions are no-ops: the input state is returned unchanged
- No exceptions in normal play; degenerate cases fall back to player 1

Phase flow:
    SUIT_SELECTION -> INITIAL_FLIP -> INITIAL_FLIP_RESULT -> MAIN
    MAIN -> END_OF_ROUND_RESOLVING -> INITIAL_FLIP (next round) | SUDDEN_DEATH
    any HP-affecting step -> FINISHED | SUDDEN_DEATH
    SUDDEN_DEATH -> FINISHED
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging
import random

from .action import Action, ActionType
from .cards import Suit, STANDARD_SUITS, card_value, create_deck, find_card_by_id, remove_card_by_id, shuffle
from .poker import calculate_lane_total
from .state import (
    GameState, GamePhase, LaneId, FlipResult, PendingLaneResolution,
    apply_damage, heal, create_empty_lanes, draw_cards, find_lane,
    initialize_new_game, start_new_round, opponent_of, LANE_IDS,
)
from .suit_effects import apply_suit_effects_to_lane_damage, calculate_lane_suit_effects
from ..config import RulesConfig, DEFAULT_RULES

logger = logging.getLogger(__name__)

Handler = Callable[[GameState, Action], GameState]


# =============================================================================
# Game over
# =============================================================================

def check_game_over(state: GameState) -> GameState | None:
    """
    Return the finished (or sudden-death) state if HP ends the game.

    - exactly one player at or below 0 loses
    - both at or below 0: the higher HP wins
    - both at or below 0 and equal: sudden death
    Returns None while both players are alive.
    """
    hp1 = state.player1.hp
    hp2 = state.player2.hp
    if hp1 > 0 and hp2 > 0:
        return None

    if hp1 > hp2:
        winner = 1
    elif hp2 > hp1:
        winner = 2
    else:
        logger.info("Both players fell to %d HP, sudden death", hp1)
        return state._copy_with(phase=GamePhase.SUDDEN_DEATH)

    logger.info("Game over: player %d wins (hp %d / %d)", winner, hp1, hp2)
    return state._copy_with(phase=GamePhase.FINISHED, winner=winner)


# =============================================================================
# Lane resolution
# =============================================================================

def resolve_lane(state: GameState, lane_id: LaneId | str) -> GameState:
    """
    Resolve one lane: compare totals, apply suit effects, clear to discard.

    The lane winner deals (difference + own damage bonus - loser healing)
    to the loser; a negative result heals the loser instead. Ties deal
    nothing. Does not check for game over; callers do.
    """
    lane = find_lane(state.lanes, lane_id)
    if lane is None:
        logger.debug("resolve_lane: unknown lane %r", lane_id)
        return state

    totals = {1: calculate_lane_total(lane.player1.cards), 2: calculate_lane_total(lane.player2.cards)}
    effects = {
        1: calculate_lane_suit_effects(lane.player1.cards, state.player1_suit),
        2: calculate_lane_suit_effects(lane.player2.cards, state.player2_suit),
    }

    new_state = state
    if totals[1] != totals[2]:
        winner = 1 if totals[1] > totals[2] else 2
        loser = opponent_of(winner)
        outcome = apply_suit_effects_to_lane_damage(
            totals[winner] - totals[loser],
            effects[winner].damage,
            effects[loser].healing,
        )
        loser_state = state.get_player(loser)
        if outcome.final_damage > 0:
            loser_state = apply_damage(loser_state, outcome.final_damage)
        if outcome.healing_overflow > 0:
            loser_state = heal(loser_state, outcome.healing_overflow)
        new_state = new_state.with_player(loser, loser_state)
        logger.debug(
            "Lane %s: %d vs %d, player %d takes %d (healed %d)",
            lane.lane_id.value, totals[1], totals[2], loser,
            outcome.final_damage, outcome.healing_overflow,
        )
    else:
        logger.debug("Lane %s tied at %d", lane.lane_id.value, totals[1])

    lane_cards = lane.player1.cards + lane.player2.cards
    return new_state.with_lane(lane.cleared())._copy_with(
        discard_pile=new_state.discard_pile + lane_cards,
    )


def _drop_pending(state: GameState, lane_id: LaneId | str) -> GameState:
    return state._copy_with(
        pending_resolution_lanes=tuple(
            p for p in state.pending_resolution_lanes if p.lane_id != lane_id
        ),
    )


def _resolve_and_check(state: GameState, lane_id: LaneId | str) -> GameState:
    new_state = _drop_pending(resolve_lane(state, lane_id), lane_id)
    return check_game_over(new_state) or new_state


# =============================================================================
# Legality (shared by the reducer, the query helpers and the planner)
# =============================================================================

def _illegal_play_reason(
    state: GameState, card_id: str, lane_id: LaneId | str, rules: RulesConfig
) -> str | None:
    if state.phase != GamePhase.MAIN:
        return f"not in main phase ({state.phase.value})"
    if state.cards_played_this_turn >= rules.cards_per_turn:
        return "turn already has all its plays"
    player = state.get_player(state.current_player)
    card = find_card_by_id(player.hand, card_id)
    if card is None:
        return f"card {card_id} not in hand"
    lane = find_lane(state.lanes, lane_id)
    if lane is None:
        return f"unknown lane {lane_id!r}"
    side = lane.side(state.current_player)
    if side.count >= rules.max_cards_per_lane:
        return f"lane {lane.lane_id.value} is full"
    if side.last_card is not None and card_value(card) < card_value(side.last_card):
        return f"{card} is lower than {side.last_card}"
    return None


def can_play_card_to_lane(
    state: GameState, card_id: str, lane_id: LaneId | str, rules: RulesConfig = DEFAULT_RULES
) -> bool:
    return _illegal_play_reason(state, card_id, lane_id, rules) is None


def can_discard_card(state: GameState, card_id: str, rules: RulesConfig = DEFAULT_RULES) -> bool:
    if state.phase != GamePhase.MAIN:
        return False
    if state.cards_played_this_turn >= rules.cards_per_turn:
        return False
    hand = state.get_player(state.current_player).hand
    return find_card_by_id(hand, card_id) is not None


def can_end_turn(state: GameState, rules: RulesConfig = DEFAULT_RULES) -> bool:
    return state.phase == GamePhase.MAIN and state.cards_played_this_turn == rules.cards_per_turn


# =============================================================================
# Main-phase primitives
# =============================================================================

def play_card_to_lane(
    state: GameState, card_id: str, lane_id: LaneId | str, rules: RulesConfig = DEFAULT_RULES
) -> GameState:
    """
    Move a card from the current player's hand to their side of a lane.

    Filling a side to 3 either resolves the lane now (both sides full)
    or starts a pending countdown for it.
    """
    reason = _illegal_play_reason(state, card_id, lane_id, rules)
    if reason:
        logger.debug("Rejected play of %s to %s: %s", card_id, lane_id, reason)
        return state

    actor = state.current_player
    player = state.get_player(actor)
    card = find_card_by_id(player.hand, card_id)
    lane = find_lane(state.lanes, lane_id)
    side = lane.side(actor).add(card)
    lane = lane.with_side(actor, side)

    new_state = state.with_player(
        actor, player._copy_with(hand=remove_card_by_id(player.hand, card_id))
    ).with_lane(lane)._copy_with(cards_played_this_turn=state.cards_played_this_turn + 1)

    if side.count < rules.max_cards_per_lane:
        return new_state

    if lane.side(opponent_of(actor)).count == rules.max_cards_per_lane:
        return _resolve_and_check(new_state, lane.lane_id)

    already_pending = any(p.lane_id == lane.lane_id for p in new_state.pending_resolution_lanes)
    if already_pending:
        logger.warning("Lane %s was already pending when player %d filled it",
                       lane.lane_id.value, actor)
        return _resolve_and_check(new_state, lane.lane_id)

    pending = PendingLaneResolution(
        lane_id=lane.lane_id,
        filled_by_player=actor,
        turns_until_resolution=rules.pending_turns,
    )
    return new_state._copy_with(
        pending_resolution_lanes=new_state.pending_resolution_lanes + (pending,),
    )


def discard_card(state: GameState, card_id: str, rules: RulesConfig = DEFAULT_RULES) -> GameState:
    """Discard from hand; the discarding player takes the card's value as damage."""
    if not can_discard_card(state, card_id, rules):
        logger.debug("Rejected discard of %s", card_id)
        return state

    actor = state.current_player
    player = state.get_player(actor)
    card = find_card_by_id(player.hand, card_id)
    player = apply_damage(player._copy_with(hand=remove_card_by_id(player.hand, card_id)), card_value(card))

    new_state = state.with_player(actor, player)._copy_with(
        discard_pile=state.discard_pile + (card,),
        cards_played_this_turn=state.cards_played_this_turn + 1,
    )
    return check_game_over(new_state) or new_state


def process_pending_lanes(state: GameState, player: int) -> GameState:
    """
    Start-of-turn countdown for the lanes `player` filled.

    Entries owned by the other player are left alone. Lanes whose
    countdown reaches zero resolve in the order they were queued, with a
    game-over check after each.
    """
    owned = [p for p in state.pending_resolution_lanes if p.filled_by_player == player]
    others = [p for p in state.pending_resolution_lanes if p.filled_by_player != player]

    to_resolve: list[PendingLaneResolution] = []
    to_keep: list[PendingLaneResolution] = []
    for pending in owned:
        turns = pending.turns_until_resolution - 1
        if turns <= 0:
            to_resolve.append(pending)
        else:
            to_keep.append(PendingLaneResolution(pending.lane_id, pending.filled_by_player, turns))

    new_state = state._copy_with(pending_resolution_lanes=tuple(others + to_keep))
    for pending in to_resolve:
        logger.debug("Pending lane %s resolves for player %d", pending.lane_id.value, player)
        new_state = resolve_lane(new_state, pending.lane_id)
        game_over = check_game_over(new_state)
        if game_over:
            return game_over
    return new_state


# =============================================================================
# Reducer
# =============================================================================

@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless apart from its random source, which drives shuffles and the
    opponent's suit. Seed it for reproducible matches.
    """
    rng: random.Random = field(default_factory=random.Random)
    rules: RulesConfig = DEFAULT_RULES

    def apply(self, state: GameState, action: Action) -> GameState:
        """Apply an action. Unknown or illegal actions return `state` unchanged."""
        handler = self._get_handler(action.action_type)
        if handler is None:
            logger.debug("No handler for action type %s", action.action_type)
            return state
        return handler(state, action)

    def _get_handler(self, action_type: ActionType) -> Handler | None:
        """Get the handler function for an action type."""
        handlers: dict[ActionType, Handler] = {
            ActionType.START_NEW_GAME: self._handle_start_new_game,
            ActionType.SELECT_SUIT: self._handle_select_suit,
            ActionType.INITIAL_FLIP_STEP: self._handle_initial_flip_step,
            ActionType.CONTINUE_FROM_FLIP: self._handle_continue_from_flip,
            ActionType.PLAY_CARD_TO_LANE: self._handle_play_card_to_lane,
            ActionType.DISCARD_CARD: self._handle_discard_card,
            ActionType.END_TURN: self._handle_end_turn,
            ActionType.RESOLVE_LANE: self._handle_resolve_lane,
            ActionType.RESOLVE_END_OF_ROUND: self._handle_resolve_end_of_round,
            ActionType.SUDDEN_DEATH_STEP: self._handle_sudden_death_step,
        }
        return handlers.get(action_type)

    def _handle_start_new_game(self, state: GameState, action: Action) -> GameState:
        return initialize_new_game(self.rng, self.rules, action.skip_suit_selection)

    def _handle_select_suit(self, state: GameState, action: Action) -> GameState:
        """Record player 1's suit; player 2 gets a random different one."""
        if state.phase != GamePhase.SUIT_SELECTION:
            return state
        if action.suit not in STANDARD_SUITS:
            logger.debug("Rejected suit %r", action.suit)
            return state

        opponent_suit = self.rng.choice([s for s in STANDARD_SUITS if s != action.suit])
        return state._copy_with(
            phase=GamePhase.INITIAL_FLIP,
            player1_suit=Suit(action.suit),
            player2_suit=opponent_suit,
        )

    def _handle_initial_flip_step(self, state: GameState, action: Action) -> GameState:
        """
        War flip: reveal the top card of each deck until the values differ.

        Tied pairs go to the discard pile. The deciding pair is held in
        flip_result until CONTINUE_FROM_FLIP. If the decks run out on a
        tie, player 1 wins with zero damage.
        """
        if state.phase != GamePhase.INITIAL_FLIP:
            return state

        deck1 = list(state.player1.deck)
        deck2 = list(state.player2.deck)
        set_aside = []
        revealed = None
        winner = None
        damage = 0

        while winner is None and deck1 and deck2:
            if revealed is not None:
                set_aside.extend(revealed)
            revealed = (deck1.pop(0), deck2.pop(0))
            value1, value2 = card_value(revealed[0]), card_value(revealed[1])
            if value1 != value2:
                winner = 1 if value1 > value2 else 2
                damage = abs(value1 - value2)

        if revealed is None:
            logger.debug("Initial flip with an empty deck")
            return state
        if winner is None:
            logger.info("Initial flip exhausted both decks on ties, player 1 wins by default")
            winner = 1

        flip = FlipResult(player1_card=revealed[0], player2_card=revealed[1], winner=winner, damage=damage)
        logger.debug("Initial flip: %s vs %s, player %d wins for %d",
                     flip.player1_card, flip.player2_card, winner, damage)
        return state._copy_with(
            phase=GamePhase.INITIAL_FLIP_RESULT,
            player1=state.player1._copy_with(deck=tuple(deck1)),
            player2=state.player2._copy_with(deck=tuple(deck2)),
            discard_pile=state.discard_pile + tuple(set_aside),
            flip_result=flip,
        )

    def _handle_continue_from_flip(self, state: GameState, action: Action) -> GameState:
        """Apply flip damage, hand out opening hands, start the main phase."""
        if state.phase != GamePhase.INITIAL_FLIP_RESULT or state.flip_result is None:
            return state

        flip = state.flip_result
        loser = opponent_of(flip.winner)
        new_state = state.with_player(loser, apply_damage(state.get_player(loser), flip.damage))
        new_state = new_state._copy_with(
            discard_pile=state.discard_pile + (flip.player1_card, flip.player2_card),
            flip_result=None,
            field_control_suit=state.get_suit(flip.winner),
        )

        game_over = check_game_over(new_state)
        if game_over:
            return game_over

        hand_size = self.rules.initial_hand_size
        return new_state._copy_with(
            phase=GamePhase.MAIN,
            player1=draw_cards(new_state.player1, hand_size),
            player2=draw_cards(new_state.player2, hand_size),
            current_player=flip.winner,
            cards_played_this_turn=0,
            pending_resolution_lanes=(),
        )

    def _handle_play_card_to_lane(self, state: GameState, action: Action) -> GameState:
        if action.card_id is None or action.lane_id is None:
            return state
        return play_card_to_lane(state, action.card_id, action.lane_id, self.rules)

    def _handle_discard_card(self, state: GameState, action: Action) -> GameState:
        if action.card_id is None:
            return state
        return discard_card(state, action.card_id, self.rules)

    def _handle_end_turn(self, state: GameState, action: Action) -> GameState:
        """
        Draw step, then hand the turn over.

        deck >= 3: draw 3. deck 1-2: those cards are discarded and this is
        the player's final turn. deck 0: final turn. Once both players have
        had their final turn the round moves to full resolution.
        """
        if not can_end_turn(state, self.rules):
            logger.debug("Rejected END_TURN after %d plays", state.cards_played_this_turn)
            return state

        actor = state.current_player
        player = state.get_player(actor)
        discard_pile = state.discard_pile
        final_turn = state.final_turn_done(actor)

        if len(player.deck) >= self.rules.cards_to_draw:
            player = draw_cards(player, self.rules.cards_to_draw)
        else:
            discard_pile = discard_pile + player.deck
            player = player._copy_with(deck=())
            final_turn = True

        new_state = state.with_player(actor, player)._copy_with(
            discard_pile=discard_pile,
            cards_played_this_turn=0,
        )
        if actor == 1:
            new_state = new_state._copy_with(player1_final_turn_done=final_turn)
        else:
            new_state = new_state._copy_with(player2_final_turn_done=final_turn)

        if new_state.player1_final_turn_done and new_state.player2_final_turn_done:
            logger.info("Round %d: both final turns done, resolving board", state.round_number)
            return new_state._copy_with(
                phase=GamePhase.END_OF_ROUND_RESOLVING,
                pending_resolution_lanes=(),
            )

        next_player = opponent_of(actor)
        new_state = new_state._copy_with(current_player=next_player)
        return process_pending_lanes(new_state, next_player)

    def _handle_resolve_lane(self, state: GameState, action: Action) -> GameState:
        if state.phase not in (GamePhase.MAIN, GamePhase.END_OF_ROUND_RESOLVING):
            return state
        if action.lane_id is None or find_lane(state.lanes, action.lane_id) is None:
            return state
        return _resolve_and_check(state, action.lane_id)

    def _handle_resolve_end_of_round(self, state: GameState, action: Action) -> GameState:
        """Resolve every non-empty lane left to right, then decide the round."""
        if state.phase != GamePhase.END_OF_ROUND_RESOLVING:
            return state

        new_state = state
        for lane_id in LANE_IDS:
            lane = find_lane(new_state.lanes, lane_id)
            if lane is not None and not lane.is_empty:
                new_state = resolve_lane(new_state, lane_id)

        game_over = check_game_over(new_state)
        if game_over:
            return game_over

        if new_state.player1.hp == new_state.player2.hp:
            logger.info("Round %d ended level at %d HP, sudden death",
                        state.round_number, new_state.player1.hp)
            return new_state._copy_with(phase=GamePhase.SUDDEN_DEATH)

        return start_new_round(new_state, self.rng, self.rules)

    def _handle_sudden_death_step(self, state: GameState, action: Action) -> GameState:
        """
        One flip decides the match.

        A fresh deck is shuffled and compared two adjacent cards at a time
        until a pair differs. The whole deck ends in the discard pile.
        """
        if state.phase != GamePhase.SUDDEN_DEATH:
            return state

        cards = shuffle(create_deck(), self.rng)
        winner = None
        index = 0
        while winner is None and index + 1 < len(cards):
            value1 = card_value(cards[index])
            value2 = card_value(cards[index + 1])
            index += 2
            if value1 != value2:
                winner = 1 if value1 > value2 else 2

        if winner is None:
            winner = 1
        logger.info("Sudden death: player %d wins", winner)

        return state._copy_with(
            phase=GamePhase.FINISHED,
            winner=winner,
            player1=state.player1._copy_with(deck=(), hand=()),
            player2=state.player2._copy_with(deck=(), hand=()),
            lanes=create_empty_lanes(),
            discard_pile=tuple(cards),
            flip_result=None,
            pending_resolution_lanes=(),
        )


def game_reducer(
    state: GameState,
    action: Action,
    rng: random.Random | None = None,
    rules: RulesConfig = DEFAULT_RULES,
) -> GameState:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(rng=rng or random.Random(), rules=rules)
    return reducer.apply(state, action)
