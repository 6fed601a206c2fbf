"""
Bot Policy - Interface for AI move selection.

A BotPolicy reads a state snapshot and returns moves; it never changes
the real state. The caller dispatches each move through the reducer,
exactly like a human move.

Planning a whole turn works on a scratch copy: every chosen move is
applied with the reducer's own primitives so the next choice sees the
hand, lanes, HP and play counter the real dispatch would produce.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
import random

from ..config import RulesConfig, DEFAULT_RULES
from ..engine_core.action import Action
from ..engine_core.reducer import can_discard_card, can_play_card_to_lane, discard_card, play_card_to_lane
from ..engine_core.state import GameState, GamePhase, LaneId, LANE_IDS


class MoveType(Enum):
    LANE = "lane"
    DISCARD = "discard"


@dataclass(frozen=True)
class AIMove:
    """
    A move chosen by a bot.

    explanation is for logging/UI only and does not take part in equality.
    """
    move_type: MoveType
    card_id: str
    lane_id: LaneId | None = None
    explanation: str = field(default="", compare=False)

    @classmethod
    def lane(cls, card_id: str, lane_id: LaneId, explanation: str = "") -> AIMove:
        return cls(MoveType.LANE, card_id, lane_id, explanation)

    @classmethod
    def discard(cls, card_id: str, explanation: str = "") -> AIMove:
        return cls(MoveType.DISCARD, card_id, None, explanation)

    def to_action(self) -> Action:
        """The reducer action that carries out this move."""
        if self.move_type == MoveType.LANE:
            return Action.play_card(self.card_id, self.lane_id)
        return Action.discard(self.card_id)


def legal_moves(state: GameState, player: int, rules: RulesConfig = DEFAULT_RULES) -> list[AIMove]:
    """All legal lane plays and discards for `player`; empty when it is not their turn."""
    if state.phase != GamePhase.MAIN or state.current_player != player:
        return []
    moves: list[AIMove] = []
    hand = state.get_player(player).hand
    for card in hand:
        for lane_id in LANE_IDS:
            if can_play_card_to_lane(state, card.card_id, lane_id, rules):
                moves.append(AIMove.lane(card.card_id, lane_id))
    for card in hand:
        if can_discard_card(state, card.card_id, rules):
            moves.append(AIMove.discard(card.card_id))
    return moves


def simulate_move(state: GameState, move: AIMove, rules: RulesConfig = DEFAULT_RULES) -> GameState:
    """Apply a move to a scratch copy through the reducer primitives."""
    if move.move_type == MoveType.LANE:
        return play_card_to_lane(state, move.card_id, move.lane_id, rules)
    return discard_card(state, move.card_id, rules)


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    Subclasses choose one move at a time; plan_turn() chains the
    choices over a simulated copy of the state.
    """

    def __init__(self, rules: RulesConfig = DEFAULT_RULES):
        self.rules = rules

    @abstractmethod
    def select_move(self, state: GameState, player: int = 2) -> AIMove | None:
        """
        Select the next move for `player`.

        Returns None when the player has nothing to do (wrong phase,
        not their turn, empty hand, or the turn's plays are used up).
        """

    def plan_turn(self, state: GameState, player: int = 2) -> list[AIMove]:
        """Choose the full turn: one move per required play, in order."""
        moves: list[AIMove] = []
        scratch = state
        for _ in range(self.rules.cards_per_turn):
            move = self.select_move(scratch, player)
            if move is None:
                break
            moves.append(move)
            scratch = simulate_move(scratch, move, self.rules)
        return moves

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - picks uniformly among legal moves.

    Used for:
    - Testing
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None, rules: RulesConfig = DEFAULT_RULES):
        super().__init__(rules)
        self.rng = random.Random(seed)

    def select_move(self, state: GameState, player: int = 2) -> AIMove | None:
        moves = legal_moves(state, player, self.rules)
        lane_moves = [m for m in moves if m.move_type == MoveType.LANE]
        # Discarding hurts; only do it when nothing else is legal
        candidates = lane_moves or moves
        if not candidates:
            return None
        return self.rng.choice(candidates)
