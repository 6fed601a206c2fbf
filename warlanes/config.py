"""
Rules configuration.

All numeric rule constants live in one frozen dataclass so tests and
variants can tweak them without touching the reducer.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
import os


@dataclass(frozen=True)
class RulesConfig:
    """Numeric rules of a War-Lanes match."""
    starting_hp: int = 100
    cards_per_player: int = 28
    initial_hand_size: int = 5
    cards_to_draw: int = 3  # End-of-turn draw
    cards_per_turn: int = 3  # Exact plays required before END_TURN
    max_cards_per_lane: int = 3
    pending_turns: int = 2  # Countdown for a lane filled on one side only


DEFAULT_RULES = RulesConfig()


def rules_from_env(base: RulesConfig = DEFAULT_RULES) -> RulesConfig:
    """
    Build rules with environment overrides.

    Recognised variables:
        WARLANES_STARTING_HP
        WARLANES_INITIAL_HAND_SIZE
    """
    overrides = {}
    starting_hp = os.getenv("WARLANES_STARTING_HP")
    if starting_hp:
        overrides["starting_hp"] = int(starting_hp)
    hand_size = os.getenv("WARLANES_INITIAL_HAND_SIZE")
    if hand_size:
        overrides["initial_hand_size"] = int(hand_size)
    return replace(base, **overrides) if overrides else base
