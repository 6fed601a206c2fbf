"""
Suit Effects - Damage bonus and healing from a player's chosen suit.

A card is active for its owner when it is a joker or matches the owner's
suit. Active cards contribute a flat effect based on their value:
- high (J, Q, K, A, Joker): 3
- mid (6-10): 5
- low (2-5): 7

Diamonds and spades add damage to lanes the owner wins.
Hearts and clubs heal: they mitigate damage on lanes the owner loses,
and any excess becomes healing.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

from .cards import Card, Suit, card_value, is_joker


EFFECT_HIGH = 3
EFFECT_MID = 5
EFFECT_LOW = 7

DAMAGE_SUITS = frozenset({Suit.DIAMONDS, Suit.SPADES})
HEALING_SUITS = frozenset({Suit.HEARTS, Suit.CLUBS})


@dataclass(frozen=True)
class SuitEffects:
    """Aggregate effects of one lane side."""
    damage: int = 0
    healing: int = 0


@dataclass(frozen=True)
class LaneDamage:
    """Damage actually dealt to a lane loser after suit effects."""
    final_damage: int
    healing_overflow: int


def effect_tier(card: Card) -> int:
    value = card_value(card)
    if value >= 11:
        return EFFECT_HIGH
    if value >= 6:
        return EFFECT_MID
    return EFFECT_LOW


def is_card_active(card: Card, owner_suit: Suit | None) -> bool:
    if owner_suit is None:
        return False
    if is_joker(card):
        return True
    return card.suit == owner_suit


def get_suit_effect_value(card: Card, owner_suit: Suit | None) -> SuitEffects:
    """Effect of a single card; at most one of damage/healing is non-zero."""
    if not is_card_active(card, owner_suit):
        return SuitEffects()
    amount = effect_tier(card)
    if owner_suit in DAMAGE_SUITS:
        return SuitEffects(damage=amount)
    if owner_suit in HEALING_SUITS:
        return SuitEffects(healing=amount)
    return SuitEffects()


def calculate_lane_suit_effects(cards: Sequence[Card], owner_suit: Suit | None) -> SuitEffects:
    damage = 0
    healing = 0
    for card in cards:
        effect = get_suit_effect_value(card, owner_suit)
        damage += effect.damage
        healing += effect.healing
    return SuitEffects(damage=damage, healing=healing)


def apply_suit_effects_to_lane_damage(
    base_damage: int,
    winner_damage_bonus: int,
    loser_healing: int,
) -> LaneDamage:
    """
    Combine the lane difference with both players' effects.

    Returns the damage for the loser, or zero damage plus the healing
    overflow when the loser's healing exceeds everything dealt.
    """
    after_healing = base_damage + winner_damage_bonus - loser_healing
    if after_healing < 0:
        return LaneDamage(final_damage=0, healing_overflow=-after_healing)
    return LaneDamage(final_damage=after_healing, healing_overflow=0)
