"""
Game State - Immutable snapshot of a War-Lanes match.

Design principles:
- Immutable: every dataclass is frozen, sequences are tuples
- All mutations return new state (copy-on-write helpers below)
- Card conservation: within a round, the 56 card ids are spread over
  decks, hands, lane sides and the discard pile exactly once each
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable
import logging
import random

from .cards import Card, Suit, DECK_SIZE, create_deck, shuffle
from ..config import RulesConfig, DEFAULT_RULES

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    """Match phases, in play order."""
    SUIT_SELECTION = "suit_selection"
    INITIAL_FLIP = "initial_flip"
    INITIAL_FLIP_RESULT = "initial_flip_result"
    MAIN = "main"
    END_OF_ROUND_RESOLVING = "end_of_round_resolving"
    SUDDEN_DEATH = "sudden_death"
    FINISHED = "finished"


class LaneId(str, Enum):
    """The three lanes, in resolution order."""
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"


LANE_IDS: tuple[LaneId, ...] = (LaneId.LEFT, LaneId.MIDDLE, LaneId.RIGHT)


def opponent_of(player: int) -> int:
    return 2 if player == 1 else 1


@dataclass(frozen=True)
class LaneSide:
    """One player's cards in a lane, in play order (max 3)."""
    cards: tuple[Card, ...] = ()

    @property
    def count(self) -> int:
        return len(self.cards)

    @property
    def is_empty(self) -> bool:
        return len(self.cards) == 0

    @property
    def last_card(self) -> Card | None:
        return self.cards[-1] if self.cards else None

    def add(self, card: Card) -> LaneSide:
        """Return new side with card appended."""
        return LaneSide(cards=self.cards + (card,))


@dataclass(frozen=True)
class Lane:
    lane_id: LaneId
    player1: LaneSide = field(default_factory=LaneSide)
    player2: LaneSide = field(default_factory=LaneSide)

    def side(self, player: int) -> LaneSide:
        return self.player1 if player == 1 else self.player2

    def with_side(self, player: int, side: LaneSide) -> Lane:
        if player == 1:
            return replace(self, player1=side)
        return replace(self, player2=side)

    @property
    def is_empty(self) -> bool:
        return self.player1.is_empty and self.player2.is_empty

    def cleared(self) -> Lane:
        return Lane(lane_id=self.lane_id)


@dataclass(frozen=True)
class PlayerState:
    """
    State for a single player.

    hp may drop below zero; clamping is a game-over concern, not a
    mutation concern.
    """
    hp: int
    deck: tuple[Card, ...] = ()
    hand: tuple[Card, ...] = ()

    def _copy_with(self, **kwargs: Any) -> PlayerState:
        return replace(self, **kwargs)


@dataclass(frozen=True)
class PendingLaneResolution:
    """
    A lane filled on one side only.

    The countdown ticks at the start of each turn of the filling player;
    the lane resolves when it reaches zero.
    """
    lane_id: LaneId
    filled_by_player: int
    turns_until_resolution: int


@dataclass(frozen=True)
class FlipResult:
    """Outcome of the war flip at the start of a round."""
    player1_card: Card
    player2_card: Card
    winner: int
    damage: int


@dataclass(frozen=True)
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical state that the engine operates on.
    All state changes go through the reducer.
    """
    phase: GamePhase
    player1: PlayerState
    player2: PlayerState
    lanes: tuple[Lane, ...] = field(default_factory=lambda: create_empty_lanes())
    discard_pile: tuple[Card, ...] = ()
    current_player: int = 1
    round_number: int = 1
    player1_final_turn_done: bool = False
    player2_final_turn_done: bool = False
    cards_played_this_turn: int = 0
    winner: int | None = None
    player1_suit: Suit | None = None
    player2_suit: Suit | None = None
    flip_result: FlipResult | None = None
    field_control_suit: Suit | None = None
    pending_resolution_lanes: tuple[PendingLaneResolution, ...] = ()

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.FINISHED

    def get_player(self, player: int) -> PlayerState:
        return self.player1 if player == 1 else self.player2

    def get_suit(self, player: int) -> Suit | None:
        return self.player1_suit if player == 1 else self.player2_suit

    def final_turn_done(self, player: int) -> bool:
        return self.player1_final_turn_done if player == 1 else self.player2_final_turn_done

    def get_lane(self, lane_id: LaneId | str) -> Lane | None:
        return find_lane(self.lanes, lane_id)

    def with_player(self, player: int, state: PlayerState) -> GameState:
        """Return new state with updated player."""
        if player == 1:
            return self._copy_with(player1=state)
        return self._copy_with(player2=state)

    def with_lane(self, lane: Lane) -> GameState:
        return self._copy_with(lanes=update_lane(self.lanes, lane))

    def all_card_ids(self) -> Counter:
        """Multiset of card ids across every zone."""
        ids: Counter = Counter()
        for player in (self.player1, self.player2):
            ids.update(c.card_id for c in player.deck)
            ids.update(c.card_id for c in player.hand)
        for lane in self.lanes:
            ids.update(c.card_id for c in lane.player1.cards)
            ids.update(c.card_id for c in lane.player2.cards)
        ids.update(c.card_id for c in self.discard_pile)
        if self.flip_result is not None:
            ids.update((self.flip_result.player1_card.card_id, self.flip_result.player2_card.card_id))
        return ids

    def _copy_with(self, **kwargs: Any) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)


# =============================================================================
# Lane helpers
# =============================================================================

def create_empty_lanes() -> tuple[Lane, ...]:
    return tuple(Lane(lane_id=lane_id) for lane_id in LANE_IDS)


def find_lane(lanes: Iterable[Lane], lane_id: LaneId | str) -> Lane | None:
    for lane in lanes:
        if lane.lane_id == lane_id:
            return lane
    return None


def update_lane(lanes: Iterable[Lane], updated: Lane) -> tuple[Lane, ...]:
    """Copy-on-write replacement of the lane with the same id."""
    return tuple(updated if lane.lane_id == updated.lane_id else lane for lane in lanes)


def is_lane_ready_to_resolve(lane: Lane, rules: RulesConfig = DEFAULT_RULES) -> bool:
    return (
        lane.player1.count == rules.max_cards_per_lane
        and lane.player2.count == rules.max_cards_per_lane
    )


# =============================================================================
# Player helpers
# =============================================================================

def draw_cards(player: PlayerState, count: int) -> PlayerState:
    """Move min(count, len(deck)) cards from the head of the deck to the hand."""
    n = min(count, len(player.deck))
    return player._copy_with(
        deck=player.deck[n:],
        hand=player.hand + player.deck[:n],
    )


def apply_damage(player: PlayerState, amount: int) -> PlayerState:
    return player._copy_with(hp=player.hp - amount)


def heal(player: PlayerState, amount: int) -> PlayerState:
    return player._copy_with(hp=player.hp + amount)


# =============================================================================
# Lifecycle
# =============================================================================

def _deal(cards: list[Card], hp1: int, hp2: int, rules: RulesConfig) -> tuple[PlayerState, PlayerState]:
    per_player = rules.cards_per_player
    return (
        PlayerState(hp=hp1, deck=tuple(cards[:per_player])),
        PlayerState(hp=hp2, deck=tuple(cards[per_player:per_player * 2])),
    )


def initialize_new_game(
    rng: random.Random | None = None,
    rules: RulesConfig = DEFAULT_RULES,
    skip_suit_selection: bool = False,
) -> GameState:
    """
    Create a fresh match: shuffled 56-card deck split 28/28, full HP.

    Starts in SUIT_SELECTION, or directly in INITIAL_FLIP when suit
    selection is skipped (no suit effects for either player).
    """
    deck = shuffle(create_deck(), rng)
    player1, player2 = _deal(deck, rules.starting_hp, rules.starting_hp, rules)
    phase = GamePhase.INITIAL_FLIP if skip_suit_selection else GamePhase.SUIT_SELECTION
    logger.info("New game started (phase=%s)", phase.value)
    return GameState(phase=phase, player1=player1, player2=player2)


def collect_all_cards(state: GameState) -> list[Card]:
    cards: list[Card] = [
        *state.player1.deck, *state.player1.hand,
        *state.player2.deck, *state.player2.hand,
        *state.discard_pile,
    ]
    for lane in state.lanes:
        cards.extend(lane.player1.cards)
        cards.extend(lane.player2.cards)
    if state.flip_result is not None:
        cards.extend((state.flip_result.player1_card, state.flip_result.player2_card))
    return cards


def start_new_round(
    prev: GameState,
    rng: random.Random | None = None,
    rules: RulesConfig = DEFAULT_RULES,
) -> GameState:
    """
    Gather every card from every zone, reshuffle and deal a new round.

    HP and chosen suits carry over; everything else per-round resets.
    """
    cards = collect_all_cards(prev)
    if len(cards) != DECK_SIZE:
        logger.warning("Round %d ended with %d cards in play, expected %d",
                       prev.round_number, len(cards), DECK_SIZE)
    player1, player2 = _deal(shuffle(cards, rng), prev.player1.hp, prev.player2.hp, rules)
    logger.info("Round %d starting (hp %d / %d)",
                prev.round_number + 1, player1.hp, player2.hp)
    return GameState(
        phase=GamePhase.INITIAL_FLIP,
        player1=player1,
        player2=player2,
        round_number=prev.round_number + 1,
        player1_suit=prev.player1_suit,
        player2_suit=prev.player2_suit,
    )
