"""
Pytest fixtures for War-Lanes tests.
"""

import itertools
import random

import pytest

from ..engine_core.cards import Card, Rank, Suit, create_deck
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameState, GamePhase, PlayerState, Lane, LaneSide, LaneId, create_empty_lanes

_ids = itertools.count()

_SUIT_LETTERS = {"h": Suit.HEARTS, "d": Suit.DIAMONDS, "c": Suit.CLUBS, "s": Suit.SPADES}


def C(code: str) -> Card:
    """
    Build a test card from a short code.

    "5h" -> 5 of hearts, "10s" -> 10 of spades, "Qd" -> queen of diamonds,
    "JK" -> joker. Every call gets a fresh unique id.
    """
    card_id = f"t-{next(_ids)}"
    if code == "JK":
        return Card(card_id=card_id, suit=Suit.JOKER, rank=Rank.JOKER)
    return Card(card_id=card_id, suit=_SUIT_LETTERS[code[-1]], rank=Rank(code[:-1]))


def cards(*codes: str) -> tuple[Card, ...]:
    return tuple(C(code) for code in codes)


def with_lane(state: GameState, lane_id: LaneId, p1=(), p2=()) -> GameState:
    """Replace a lane's contents."""
    lane = Lane(lane_id=lane_id, player1=LaneSide(tuple(p1)), player2=LaneSide(tuple(p2)))
    return state.with_lane(lane)


def main_state(
    hand1=(),
    hand2=(),
    deck1=(),
    deck2=(),
    hp1: int = 100,
    hp2: int = 100,
    current_player: int = 1,
    suit1: Suit | None = None,
    suit2: Suit | None = None,
) -> GameState:
    """A hand-built MAIN-phase state (card conservation is not enforced)."""
    return GameState(
        phase=GamePhase.MAIN,
        player1=PlayerState(hp=hp1, deck=tuple(deck1), hand=tuple(hand1)),
        player2=PlayerState(hp=hp2, deck=tuple(deck2), hand=tuple(hand2)),
        lanes=create_empty_lanes(),
        current_player=current_player,
        player1_suit=suit1,
        player2_suit=suit2,
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def reducer(rng) -> Reducer:
    """Seeded reducer."""
    return Reducer(rng=rng)


@pytest.fixture
def full_deck() -> list[Card]:
    return create_deck()


@pytest.fixture
def filler() -> tuple[Card, ...]:
    """A supply of low cards for decks that only need a length."""
    return cards(*["2h"] * 10)
