"""
Poker Bonus - Best bonus for one player's side of a lane.

Bonuses:
- Pair: 3
- Three of a kind: 12
- Straight: 10
- Flush: 8
- Straight flush: 20

Two-card sides can only score a pair. Jokers are wildcards: for three-card
sides every (rank, suit) assignment of each joker is searched and the
best bonus wins. The search stops early once a straight flush is found.
"""

from __future__ import annotations
from enum import Enum
from itertools import product
from typing import Sequence

from .cards import Card, Rank, Suit, STANDARD_RANKS, STANDARD_SUITS, is_joker, rank_value, card_value


BONUS_PAIR = 3
BONUS_THREE_OF_A_KIND = 12
BONUS_STRAIGHT = 10
BONUS_FLUSH = 8
BONUS_STRAIGHT_FLUSH = 20


class BonusType(Enum):
    """Named lane bonuses, with their point values."""
    NONE = 0
    PAIR = BONUS_PAIR
    FLUSH = BONUS_FLUSH
    STRAIGHT = BONUS_STRAIGHT
    THREE_OF_A_KIND = BONUS_THREE_OF_A_KIND
    STRAIGHT_FLUSH = BONUS_STRAIGHT_FLUSH


# Every (rank, suit) a joker may stand in for
_WILDCARDS: tuple[tuple[Rank, Suit], ...] = tuple(product(STANDARD_RANKS, STANDARD_SUITS))


def is_pair(ranks: Sequence[Rank]) -> bool:
    if len(ranks) < 2:
        return False
    if len(ranks) == 2:
        return ranks[0] == ranks[1]
    return ranks[0] == ranks[1] or ranks[1] == ranks[2] or ranks[0] == ranks[2]


def is_three_of_a_kind(ranks: Sequence[Rank]) -> bool:
    if len(ranks) != 3:
        return False
    return ranks[0] == ranks[1] == ranks[2]


def is_straight(ranks: Sequence[Rank]) -> bool:
    """Three consecutive values. No wraparound: Q-K-A is a straight, K-A-2 is not."""
    if len(ranks) != 3:
        return False
    low, mid, high = sorted(rank_value(r) for r in ranks)
    return mid == low + 1 and high == mid + 1


def is_flush(suits: Sequence[Suit]) -> bool:
    if len(suits) != 3:
        return False
    return suits[0] == suits[1] == suits[2]


def _evaluate_ranks_and_suits(ranks: Sequence[Rank], suits: Sequence[Suit]) -> int:
    # Three of a kind is checked ahead of plain straight/flush; the two
    # can never coincide so only the code path differs.
    straight = is_straight(ranks)
    flush = is_flush(suits)
    if straight and flush:
        return BONUS_STRAIGHT_FLUSH
    if is_three_of_a_kind(ranks):
        return BONUS_THREE_OF_A_KIND
    if straight:
        return BONUS_STRAIGHT
    if flush:
        return BONUS_FLUSH
    if is_pair(ranks):
        return BONUS_PAIR
    return 0


def _evaluate_two_cards(cards: Sequence[Card]) -> int:
    if any(is_joker(c) for c in cards):
        return BONUS_PAIR
    return BONUS_PAIR if cards[0].rank == cards[1].rank else 0


def _evaluate_with_one_joker(fixed: Sequence[Card]) -> int:
    best = 0
    first, second = fixed
    for rank, suit in _WILDCARDS:
        bonus = _evaluate_ranks_and_suits(
            (first.rank, second.rank, rank),
            (first.suit, second.suit, suit),
        )
        if bonus > best:
            best = bonus
            if best == BONUS_STRAIGHT_FLUSH:
                return best
    return best


def _evaluate_with_two_jokers(fixed: Card) -> int:
    best = 0
    for (rank1, suit1), (rank2, suit2) in product(_WILDCARDS, _WILDCARDS):
        bonus = _evaluate_ranks_and_suits(
            (fixed.rank, rank1, rank2),
            (fixed.suit, suit1, suit2),
        )
        if bonus > best:
            best = bonus
            if best == BONUS_STRAIGHT_FLUSH:
                return best
    return best


def _evaluate_three_cards(cards: Sequence[Card]) -> int:
    fixed = [c for c in cards if not is_joker(c)]
    jokers = len(cards) - len(fixed)

    if jokers == 3:
        return BONUS_STRAIGHT_FLUSH
    if jokers == 2:
        return _evaluate_with_two_jokers(fixed[0])
    if jokers == 1:
        return _evaluate_with_one_joker(fixed)
    return _evaluate_ranks_and_suits(
        [c.rank for c in cards],
        [c.suit for c in cards],
    )


def evaluate_lane_bonus(cards: Sequence[Card]) -> int:
    """Best bonus obtainable by a 0-3 card lane side."""
    if len(cards) <= 1:
        return 0
    if len(cards) == 2:
        return _evaluate_two_cards(cards)
    if len(cards) == 3:
        return _evaluate_three_cards(cards)
    return 0


def best_bonus_type(cards: Sequence[Card]) -> BonusType:
    """Name of the bonus evaluate_lane_bonus() awards."""
    return BonusType(evaluate_lane_bonus(cards))


def calculate_base_sum(cards: Sequence[Card]) -> int:
    """Sum of card values. Jokers always count 15."""
    return sum(card_value(c) for c in cards)


def calculate_lane_total(cards: Sequence[Card]) -> int:
    return calculate_base_sum(cards) + evaluate_lane_bonus(cards)
