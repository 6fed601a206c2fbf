"""
Action System - The closed set of commands the reducer accepts.

Actions represent:
1. Player actions (choose suit, play to lane, discard, end turn)
2. Flow actions the caller dispatches to step through the round
   (flip, continue, end-of-round resolution, sudden death)

All state changes flow through actions. Each ActionType maps to exactly
one reducer handler.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .cards import Suit
from .state import LaneId


class ActionType(Enum):
    """Types of actions in the system."""
    # Lifecycle
    START_NEW_GAME = "START_NEW_GAME"
    SELECT_SUIT = "SELECT_SUIT"

    # Round flow
    INITIAL_FLIP_STEP = "INITIAL_FLIP_STEP"
    CONTINUE_FROM_FLIP = "CONTINUE_FROM_FLIP"
    RESOLVE_END_OF_ROUND = "RESOLVE_END_OF_ROUND"
    SUDDEN_DEATH_STEP = "SUDDEN_DEATH_STEP"

    # Main-phase player actions
    PLAY_CARD_TO_LANE = "PLAY_CARD_TO_LANE"
    DISCARD_CARD = "DISCARD_CARD"
    END_TURN = "END_TURN"

    # Direct lane resolution
    RESOLVE_LANE = "RESOLVE_LANE"


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the game state.

    Only the fields relevant to action_type are set; the reducer
    ignores the rest.
    """
    action_type: ActionType
    card_id: str | None = None
    lane_id: LaneId | None = None
    suit: Suit | None = None
    skip_suit_selection: bool = False

    @classmethod
    def start_new_game(cls, skip_suit_selection: bool = False) -> Action:
        return cls(ActionType.START_NEW_GAME, skip_suit_selection=skip_suit_selection)

    @classmethod
    def select_suit(cls, suit: Suit) -> Action:
        return cls(ActionType.SELECT_SUIT, suit=suit)

    @classmethod
    def initial_flip_step(cls) -> Action:
        return cls(ActionType.INITIAL_FLIP_STEP)

    @classmethod
    def continue_from_flip(cls) -> Action:
        return cls(ActionType.CONTINUE_FROM_FLIP)

    @classmethod
    def play_card(cls, card_id: str, lane_id: LaneId) -> Action:
        """Factory for play-to-lane action."""
        return cls(ActionType.PLAY_CARD_TO_LANE, card_id=card_id, lane_id=lane_id)

    @classmethod
    def discard(cls, card_id: str) -> Action:
        """Factory for discard action."""
        return cls(ActionType.DISCARD_CARD, card_id=card_id)

    @classmethod
    def end_turn(cls) -> Action:
        return cls(ActionType.END_TURN)

    @classmethod
    def resolve_lane(cls, lane_id: LaneId) -> Action:
        return cls(ActionType.RESOLVE_LANE, lane_id=lane_id)

    @classmethod
    def resolve_end_of_round(cls) -> Action:
        return cls(ActionType.RESOLVE_END_OF_ROUND)

    @classmethod
    def sudden_death_step(cls) -> Action:
        return cls(ActionType.SUDDEN_DEATH_STEP)
