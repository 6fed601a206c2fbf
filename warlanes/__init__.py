"""
War-Lanes Poker - Rules Engine

A deterministic, reducer-driven engine for the two-player lane card battle.
The engine provides:
- Card/deck model and poker bonus evaluation with wildcard jokers
- Suit effects (damage bonus / healing)
- A pure state machine: (state, action) -> new state
- A priority planner for the AI opponent
"""

__version__ = "0.1.0"
