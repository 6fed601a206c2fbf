"""
Bots module - AI opponent implementations.

Provides:
- BotPolicy: Interface for move selection
- PriorityPlanner: Category-ordered planner (the default opponent)
- RandomPolicy: Uniform baseline
- HeuristicEvaluator: Scores lane plays for tie-breaking
"""

from .policy import BotPolicy, AIMove, MoveType, RandomPolicy, legal_moves, simulate_move
from .evaluator import HeuristicEvaluator, EvaluationWeights
from .planner import PriorityPlanner, MoveCategory, get_ai_move, execute_ai_turn

__all__ = [
    "BotPolicy",
    "AIMove",
    "MoveType",
    "RandomPolicy",
    "legal_moves",
    "simulate_move",
    "HeuristicEvaluator",
    "EvaluationWeights",
    "PriorityPlanner",
    "MoveCategory",
    "get_ai_move",
    "execute_ai_turn",
]
