"""
Engine Core - Deterministic game state management and lane resolution.

The engine is the runtime that:
1. Builds and shuffles the 56-card deck
2. Manages GameState snapshots
3. Evaluates poker bonuses and suit effects
4. Applies actions via the reducer
"""

from .cards import Card, Suit, Rank, create_deck, shuffle, card_value, rank_value, is_joker
from .state import (
    GameState, GamePhase, PlayerState, Lane, LaneSide, LaneId,
    PendingLaneResolution, FlipResult, initialize_new_game, start_new_round,
)
from .action import Action, ActionType
from .poker import evaluate_lane_bonus, calculate_base_sum, calculate_lane_total, BonusType
from .suit_effects import calculate_lane_suit_effects, apply_suit_effects_to_lane_damage
from .reducer import (
    Reducer, game_reducer, resolve_lane, check_game_over,
    can_play_card_to_lane, can_discard_card, can_end_turn,
)

__all__ = [
    "Card",
    "Suit",
    "Rank",
    "create_deck",
    "shuffle",
    "card_value",
    "rank_value",
    "is_joker",
    "GameState",
    "GamePhase",
    "PlayerState",
    "Lane",
    "LaneSide",
    "LaneId",
    "PendingLaneResolution",
    "FlipResult",
    "initialize_new_game",
    "start_new_round",
    "Action",
    "ActionType",
    "evaluate_lane_bonus",
    "calculate_base_sum",
    "calculate_lane_total",
    "BonusType",
    "calculate_lane_suit_effects",
    "apply_suit_effects_to_lane_damage",
    "Reducer",
    "game_reducer",
    "resolve_lane",
    "check_game_over",
    "can_play_card_to_lane",
    "can_discard_card",
    "can_end_turn",
]
