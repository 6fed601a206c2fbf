"""
Priority Planner - The opponent AI.

Moves are chosen by category; the first category with a legal play wins:
1. Urgency: the opponent's side is full and ours is not
2. Complete: our side has 2 cards
3. Build: our side has 1 card (contested lanes first)
4. Start: our side is empty (contested lanes first)
5. Discard: no legal lane play anywhere, throw the lowest card

Inside a category cards are tried lowest value first against the
candidate lanes in order. Equal-value cards are ranked by the heuristic
evaluator.
"""

from __future__ import annotations
from enum import Enum
from itertools import groupby
import logging

from .evaluator import HeuristicEvaluator
from .policy import AIMove, BotPolicy
from ..config import RulesConfig, DEFAULT_RULES
from ..engine_core.cards import Card, card_value
from ..engine_core.reducer import can_discard_card, can_play_card_to_lane
from ..engine_core.state import GameState, GamePhase, LaneId, LANE_IDS, opponent_of

logger = logging.getLogger(__name__)


class MoveCategory(Enum):
    """Planner categories, highest priority first."""
    URGENCY = "urgency"
    COMPLETE = "complete"
    BUILD = "build"
    START = "start"
    DISCARD = "discard"


class PriorityPlanner(BotPolicy):
    """
    Category-ordered heuristic planner.

    Usage:
        planner = PriorityPlanner()
        moves = planner.plan_turn(state, player=2)
        for move in moves:
            state = reducer.apply(state, move.to_action())
    """

    def __init__(
        self,
        evaluator: HeuristicEvaluator | None = None,
        rules: RulesConfig = DEFAULT_RULES,
    ):
        super().__init__(rules)
        self.evaluator = evaluator or HeuristicEvaluator()

    def select_move(self, state: GameState, player: int = 2) -> AIMove | None:
        if state.phase != GamePhase.MAIN or state.current_player != player:
            return None
        if state.cards_played_this_turn >= self.rules.cards_per_turn:
            return None
        hand = sorted(state.get_player(player).hand, key=card_value)
        if not hand:
            return None

        for category, tiers in self._candidate_lanes(state, player):
            for lanes in tiers:
                move = self._first_legal(state, player, hand, lanes, category)
                if move is not None:
                    logger.debug("Player %d plays %s to %s (%s)",
                                 player, move.card_id, move.lane_id.value, category.value)
                    return move

        lowest = hand[0]
        if not can_discard_card(state, lowest.card_id, self.rules):
            return None
        logger.debug("Player %d has no lane play, discards %s", player, lowest)
        return AIMove.discard(lowest.card_id, explanation=MoveCategory.DISCARD.value)

    def _candidate_lanes(
        self, state: GameState, player: int
    ) -> list[tuple[MoveCategory, list[list[LaneId]]]]:
        """Lanes per category, split into preference tiers."""
        full = self.rules.max_cards_per_lane
        opponent = opponent_of(player)
        urgency: list[LaneId] = []
        complete: list[LaneId] = []
        # (contested, uncontested) for sides holding 1 and 0 cards
        build: tuple[list[LaneId], list[LaneId]] = ([], [])
        start: tuple[list[LaneId], list[LaneId]] = ([], [])

        for lane_id in LANE_IDS:
            lane = state.get_lane(lane_id)
            own = lane.side(player).count
            theirs = lane.side(opponent).count
            if theirs == full and own < full:
                urgency.append(lane_id)
            if own == full - 1:
                complete.append(lane_id)
            elif own in (0, 1):
                contested, uncontested = start if own == 0 else build
                (contested if theirs > 0 else uncontested).append(lane_id)

        return [
            (MoveCategory.URGENCY, [urgency]),
            (MoveCategory.COMPLETE, [complete]),
            (MoveCategory.BUILD, list(build)),
            (MoveCategory.START, list(start)),
        ]

    def _first_legal(
        self,
        state: GameState,
        player: int,
        hand: list[Card],
        lanes: list[LaneId],
        category: MoveCategory,
    ) -> AIMove | None:
        if not lanes:
            return None
        for _, group in groupby(hand, key=card_value):
            same_value = list(group)
            for lane_id in lanes:
                legal = [
                    c for c in same_value
                    if can_play_card_to_lane(state, c.card_id, lane_id, self.rules)
                ]
                if legal:
                    best = max(
                        legal,
                        key=lambda c: self.evaluator.score_lane_play(state, c, lane_id, player),
                    )
                    return AIMove.lane(best.card_id, lane_id, explanation=category.value)
        return None


_DEFAULT_PLANNER = PriorityPlanner()


def get_ai_move(state: GameState, player: int = 2) -> AIMove | None:
    """Next move for the AI player, or None if it has nothing to play."""
    return _DEFAULT_PLANNER.select_move(state, player)


def execute_ai_turn(state: GameState, player: int = 2) -> list[AIMove]:
    """
    Plan the AI's whole turn.

    Returns the moves in order; the caller dispatches each through the
    reducer and then ends the turn. `state` is not modified.
    """
    return _DEFAULT_PLANNER.plan_turn(state, player)
