"""
Cards - Card model, deck construction and helpers.

A card is an immutable value object. Cards are moved between zones
(deck, hand, lane side, discard) but never recreated during a round;
only a fresh deck construction creates new instances.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence
import random


class Suit(str, Enum):
    """Card suits. JOKER is the suit tag carried by the four jokers."""
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"
    JOKER = "joker"


class Rank(str, Enum):
    """Card ranks, lowest to highest."""
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"
    JOKER = "JOKER"


STANDARD_SUITS: tuple[Suit, ...] = (Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES)
STANDARD_RANKS: tuple[Rank, ...] = tuple(r for r in Rank if r is not Rank.JOKER)
JOKER_COUNT = 4
DECK_SIZE = 56

_RANK_VALUES: dict[Rank, int] = {
    **{rank: index + 2 for index, rank in enumerate(STANDARD_RANKS)},
    Rank.JOKER: 15,
}

_SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}


@dataclass(frozen=True)
class Card:
    """
    A physical card.

    card_id is unique and stable for the lifetime of the deck.
    """
    card_id: str
    suit: Suit
    rank: Rank

    @property
    def value(self) -> int:
        return _RANK_VALUES[self.rank]

    def __str__(self) -> str:
        return card_to_string(self)


def rank_value(rank: Rank) -> int:
    """Numeric value of a rank: 2-10 face value, J=11 .. A=14, JOKER=15."""
    return _RANK_VALUES[rank]


def card_value(card: Card) -> int:
    return _RANK_VALUES[card.rank]


def is_joker(card: Card) -> bool:
    return card.rank is Rank.JOKER


def create_deck() -> list[Card]:
    """Create the 56-card deck: 4 suits x 13 ranks, then 4 jokers."""
    cards: list[Card] = []
    index = 0
    for suit in STANDARD_SUITS:
        for rank in STANDARD_RANKS:
            cards.append(Card(card_id=f"card-{index}", suit=suit, rank=rank))
            index += 1
    for _ in range(JOKER_COUNT):
        cards.append(Card(card_id=f"card-{index}", suit=Suit.JOKER, rank=Rank.JOKER))
        index += 1
    return cards


def shuffle(cards: Iterable[Card], rng: random.Random | None = None) -> list[Card]:
    """
    Return a new, uniformly shuffled list (Fisher-Yates).

    Pass a seeded random.Random for reproducible games.
    """
    rng = rng or random.Random()
    result = list(cards)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


def find_card_by_id(cards: Sequence[Card], card_id: str) -> Card | None:
    for card in cards:
        if card.card_id == card_id:
            return card
    return None


def remove_card_by_id(cards: Sequence[Card], card_id: str) -> tuple[Card, ...]:
    """Return the cards without card_id, keeping the order of the rest."""
    return tuple(c for c in cards if c.card_id != card_id)


def card_to_string(card: Card) -> str:
    if is_joker(card):
        return "\U0001F0CF"
    return f"{card.rank.value}{_SUIT_SYMBOLS[card.suit]}"
