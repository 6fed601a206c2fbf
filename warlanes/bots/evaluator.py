"""
Heuristic Evaluator - Scores a single lane play for the AI.

The planner's category order decides *what kind* of move to make; the
evaluator only breaks ties between equally valued cards inside a
category. The score combines:
- Card value and lane investment
- Lane completion
- Poker bonus formed by the play
- Comparison against the opponent's side
- Pair / straight / flush potential

Weights can be adjusted to create different play styles.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..engine_core.cards import Card, card_value
from ..engine_core.poker import calculate_lane_total
from ..engine_core.state import LaneId, opponent_of

if TYPE_CHECKING:
    from ..engine_core.state import GameState


@dataclass
class EvaluationWeights:
    """
    Weights for the heuristic evaluator.

    Higher values = more importance.
    """
    card_value: float = 1.0
    invested_per_card: float = 5.0
    completes_lane: float = 15.0
    bonus_formed: float = 2.0  # Multiplier on bonus points gained
    winning_lane: float = 10.0
    losing_lane: float = -5.0
    fresh_lane: float = 3.0  # Both sides empty
    middle_lane: float = 2.0
    pair_potential: float = 8.0
    straight_potential: float = 10.0
    flush_potential: float = 8.0
    urgency: float = 20.0  # Opponent side already full


class HeuristicEvaluator:
    """Scores candidate lane plays from one player's perspective."""

    def __init__(self, weights: EvaluationWeights | None = None):
        self.weights = weights or EvaluationWeights()

    def score_lane_play(self, state: GameState, card: Card, lane_id: LaneId, player: int) -> float:
        """
        Score playing `card` to `player`'s side of `lane_id`.

        Does not check legality.
        """
        lane = state.get_lane(lane_id)
        if lane is None:
            return float("-inf")
        w = self.weights
        own = lane.side(player).cards
        theirs = lane.side(opponent_of(player)).cards
        value = card_value(card)
        after = own + (card,)

        score = value * w.card_value
        score += len(own) * w.invested_per_card
        if len(own) == 2:
            score += w.completes_lane
        if len(theirs) == 3:
            score += w.urgency

        total_before = calculate_lane_total(own)
        total_after = calculate_lane_total(after)
        score += (total_after - total_before - value) * w.bonus_formed

        if theirs:
            opponent_total = calculate_lane_total(theirs)
            if total_after > opponent_total:
                score += w.winning_lane
            elif total_after < opponent_total:
                score += w.losing_lane
        elif not own:
            score += w.fresh_lane

        if lane_id == LaneId.MIDDLE:
            score += w.middle_lane

        if own:
            if any(c.rank == card.rank for c in own):
                score += w.pair_potential
            values = sorted(card_value(c) for c in after)
            if all(b == a + 1 for a, b in zip(values, values[1:])):
                score += w.straight_potential
            if all(c.suit == card.suit for c in own):
                score += w.flush_potential

        return score
