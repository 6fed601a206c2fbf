"""
Session Module - Drives a match from the caller's side.

A session represents one play-through:
- Created when the user starts a game
- Holds the current game state
- Runs AI turns through the same dispatch path as human moves
- Ephemeral: nothing is persisted
"""

from .game_loop import GameLoop, LoopState, TurnResult

__all__ = [
    "GameLoop",
    "LoopState",
    "TurnResult",
]
