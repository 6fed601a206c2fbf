"""
API module - Boundary models for a presentation layer.

The engine has no network surface; these pydantic models are what a UI
(or any other caller) uses to send actions in and read state out.
"""

from .schemas import (
    ActionRequest,
    CardView,
    LaneSideView,
    LaneView,
    PlayerView,
    FlipResultView,
    GameStateView,
)

__all__ = [
    "ActionRequest",
    "CardView",
    "LaneSideView",
    "LaneView",
    "PlayerView",
    "FlipResultView",
    "GameStateView",
]
