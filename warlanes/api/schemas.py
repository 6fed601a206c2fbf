"""
Pydantic Schemas - Contract between the presentation layer and the engine.

Two directions:
- ActionRequest: raw action payloads from the UI, validated and turned
  into engine Actions. Bad payloads fail here with a ValidationError;
  the reducer itself never raises.
- GameStateView: a display snapshot of a GameState from one player's
  seat (the opponent's hand is reduced to a count).

Field names are snake_case; camelCase aliases are accepted on input.
"""

from typing import Optional
from pydantic import BaseModel, Field, model_validator

from ..config import RulesConfig, DEFAULT_RULES
from ..engine_core.action import Action, ActionType
from ..engine_core.cards import Card, Suit
from ..engine_core.poker import best_bonus_type, calculate_lane_total
from ..engine_core.reducer import can_end_turn
from ..engine_core.state import GameState, GamePhase, LaneId, LaneSide


# =============================================================================
# Requests
# =============================================================================

class ActionRequest(BaseModel):
    """
    An action as sent by the UI.

    Example:
        {"type": "PLAY_CARD_TO_LANE", "cardId": "card-12", "laneId": "left"}
    """
    type: ActionType
    card_id: Optional[str] = Field(default=None, alias="cardId")
    lane_id: Optional[LaneId] = Field(default=None, alias="laneId")
    suit: Optional[Suit] = None
    skip_suit_selection: bool = Field(default=False, alias="skipSuitSelection")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _check_required_fields(self) -> "ActionRequest":
        if self.type in (ActionType.PLAY_CARD_TO_LANE, ActionType.DISCARD_CARD) and not self.card_id:
            raise ValueError(f"{self.type.value} requires cardId")
        if self.type in (ActionType.PLAY_CARD_TO_LANE, ActionType.RESOLVE_LANE) and self.lane_id is None:
            raise ValueError(f"{self.type.value} requires laneId")
        if self.type == ActionType.SELECT_SUIT:
            if self.suit is None:
                raise ValueError("SELECT_SUIT requires suit")
            if self.suit == Suit.JOKER:
                raise ValueError("joker is not a selectable suit")
        return self

    def to_action(self) -> Action:
        return Action(
            action_type=self.type,
            card_id=self.card_id,
            lane_id=self.lane_id,
            suit=self.suit,
            skip_suit_selection=self.skip_suit_selection,
        )


# =============================================================================
# Views
# =============================================================================

class CardView(BaseModel):
    """Card information for display."""
    card_id: str
    suit: Suit
    rank: str
    value: int
    label: str

    @classmethod
    def from_card(cls, card: Card) -> "CardView":
        return cls(
            card_id=card.card_id,
            suit=card.suit,
            rank=card.rank.value,
            value=card.value,
            label=str(card),
        )


class LaneSideView(BaseModel):
    cards: list[CardView] = Field(default_factory=list)
    total: int = 0
    bonus: str = Field(default="none", description="Name of the poker bonus currently held")

    @classmethod
    def from_side(cls, side: LaneSide) -> "LaneSideView":
        return cls(
            cards=[CardView.from_card(c) for c in side.cards],
            total=calculate_lane_total(side.cards),
            bonus=best_bonus_type(side.cards).name.lower(),
        )


class LaneView(BaseModel):
    lane_id: LaneId
    player1: LaneSideView
    player2: LaneSideView
    pending_owner: Optional[int] = None
    turns_until_resolution: Optional[int] = None


class PlayerView(BaseModel):
    """Player information for display."""
    player: int
    hp: int
    suit: Optional[Suit] = None
    deck_count: int = 0
    hand_count: int = 0
    hand: Optional[list[CardView]] = Field(
        default=None, description="Only filled for the viewing player"
    )
    final_turn_done: bool = False


class FlipResultView(BaseModel):
    player1_card: CardView
    player2_card: CardView
    winner: int
    damage: int


class GameStateView(BaseModel):
    """Complete display snapshot from one player's seat."""
    phase: GamePhase
    round_number: int
    current_player: int
    viewer: int
    cards_played_this_turn: int
    can_end_turn: bool
    winner: Optional[int] = None
    field_control_suit: Optional[Suit] = None
    discard_count: int = 0
    players: list[PlayerView]
    lanes: list[LaneView]
    flip_result: Optional[FlipResultView] = None

    @classmethod
    def from_state(
        cls, state: GameState, viewer: int = 1, rules: RulesConfig = DEFAULT_RULES
    ) -> "GameStateView":
        players = []
        for number in (1, 2):
            player = state.get_player(number)
            players.append(PlayerView(
                player=number,
                hp=player.hp,
                suit=state.get_suit(number),
                deck_count=len(player.deck),
                hand_count=len(player.hand),
                hand=[CardView.from_card(c) for c in player.hand] if number == viewer else None,
                final_turn_done=state.final_turn_done(number),
            ))

        pending = {p.lane_id: p for p in state.pending_resolution_lanes}
        lanes = []
        for lane in state.lanes:
            entry = pending.get(lane.lane_id)
            lanes.append(LaneView(
                lane_id=lane.lane_id,
                player1=LaneSideView.from_side(lane.player1),
                player2=LaneSideView.from_side(lane.player2),
                pending_owner=entry.filled_by_player if entry else None,
                turns_until_resolution=entry.turns_until_resolution if entry else None,
            ))

        flip = None
        if state.flip_result is not None:
            flip = FlipResultView(
                player1_card=CardView.from_card(state.flip_result.player1_card),
                player2_card=CardView.from_card(state.flip_result.player2_card),
                winner=state.flip_result.winner,
                damage=state.flip_result.damage,
            )

        return cls(
            phase=state.phase,
            round_number=state.round_number,
            current_player=state.current_player,
            viewer=viewer,
            cards_played_this_turn=state.cards_played_this_turn,
            can_end_turn=can_end_turn(state, rules),
            winner=state.winner,
            field_control_suit=state.field_control_suit,
            discard_count=len(state.discard_pile),
            players=players,
            lanes=lanes,
            flip_result=flip,
        )