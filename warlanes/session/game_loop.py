"""
Game Loop - Caller-side driver around the reducer.

The loop:
1. Holds the current GameState
2. Validates and dispatches human actions
3. Steps through phases that need no decision (flip, continue,
   end-of-round resolution, sudden death)
4. Plays AI turns by dispatching the planner's moves, then END_TURN
5. Repeats until a human decision is needed or the game is finished

Everything is synchronous. Pacing, animation and "thinking" delays are
the presentation layer's business.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging

from pydantic import ValidationError

from ..api.schemas import ActionRequest
from ..bots.policy import BotPolicy
from ..engine_core.action import Action
from ..engine_core.cards import STANDARD_SUITS
from ..engine_core.reducer import Reducer, can_end_turn
from ..engine_core.state import GameState, GamePhase, initialize_new_game

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the game loop."""
    WAITING_HUMAN_ACTION = "waiting_human_action"
    RUNNING_AI = "running_ai"
    GAME_OVER = "game_over"


@dataclass
class TurnResult:
    """
    Result of processing input or an AI turn.
    """
    success: bool
    loop_state: LoopState
    state: GameState | None = None

    # AI moves dispatched, human readable
    ai_moves: list[str] = field(default_factory=list)

    # Errors/warnings
    errors: list[str] = field(default_factory=list)

    # Game over info
    winner: int | None = None


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(seats={2: PriorityPlanner()})
        loop.advance()                       # runs until player 1 must act

        result = loop.submit({"type": "PLAY_CARD_TO_LANE",
                              "cardId": "card-3", "laneId": "left"})
        ...
        loop.submit({"type": "END_TURN"})    # AI replies inside advance()
    """

    def __init__(
        self,
        reducer: Reducer | None = None,
        seats: dict[int, BotPolicy] | None = None,
        state: GameState | None = None,
        on_state: Callable[[GameState], None] | None = None,
    ):
        self.reducer = reducer or Reducer()
        self.seats = seats or {}
        self.on_state = on_state
        self.state = state or initialize_new_game(self.reducer.rng, self.reducer.rules)
        self.history: list[Action] = []

    @property
    def loop_state(self) -> LoopState:
        if self.state.phase == GamePhase.FINISHED:
            return LoopState.GAME_OVER
        if self._needs_human():
            return LoopState.WAITING_HUMAN_ACTION
        return LoopState.RUNNING_AI

    def dispatch(self, action: Action) -> GameState:
        """Apply an action through the reducer and record it if it changed anything."""
        new_state = self.reducer.apply(self.state, action)
        if new_state is not self.state:
            self.history.append(action)
            self.state = new_state
            if self.on_state is not None:
                self.on_state(new_state)
        return self.state

    def submit(self, payload: dict[str, Any]) -> TurnResult:
        """
        Validate a raw action from the UI, dispatch it, then advance.

        Invalid payloads and rejected actions come back as unsuccessful
        results; the game state is left as it was.
        """
        try:
            request = ActionRequest.model_validate(payload)
        except ValidationError as e:
            return TurnResult(
                success=False,
                loop_state=self.loop_state,
                state=self.state,
                errors=[err["msg"] for err in e.errors()],
            )

        before = self.state
        self.dispatch(request.to_action())
        if self.state is before:
            return TurnResult(
                success=False,
                loop_state=self.loop_state,
                state=self.state,
                errors=[f"{request.type.value} is not legal now"],
            )

        ai_moves = self.advance()
        return TurnResult(
            success=True,
            loop_state=self.loop_state,
            state=self.state,
            ai_moves=ai_moves,
            winner=self.state.winner,
        )

    def advance(self, max_steps: int = 1000) -> list[str]:
        """
        Step forward until a human must act or the game ends.

        Returns the AI moves played along the way.
        """
        ai_moves: list[str] = []
        for _ in range(max_steps):
            if self.state.phase == GamePhase.FINISHED or self._needs_human():
                break
            before = self.state
            ai_moves.extend(self._step())
            if self.state is before:
                logger.warning("Game loop stalled in phase %s", self.state.phase.value)
                break
        return ai_moves

    def run_ai_turn(self) -> TurnResult:
        """Plan and dispatch the current AI player's turn, then end it."""
        player = self.state.current_player
        policy = self.seats.get(player)
        if policy is None or self.state.phase != GamePhase.MAIN:
            return TurnResult(
                success=False,
                loop_state=self.loop_state,
                state=self.state,
                errors=[f"player {player} is not an AI seat in the main phase"],
            )

        played: list[str] = []
        for move in policy.plan_turn(self.state, player):
            self.dispatch(move.to_action())
            target = move.lane_id.value if move.lane_id else "discard"
            played.append(f"P{player} {move.card_id} -> {target}")
        if can_end_turn(self.state, self.reducer.rules):
            self.dispatch(Action.end_turn())

        return TurnResult(
            success=True,
            loop_state=self.loop_state,
            state=self.state,
            ai_moves=played,
            winner=self.state.winner,
        )

    def play_out(self, max_steps: int = 10000) -> GameState:
        """Run an all-AI match to the end (or until max_steps)."""
        self.advance(max_steps)
        return self.state

    def _needs_human(self) -> bool:
        phase = self.state.phase
        if phase == GamePhase.SUIT_SELECTION:
            return 1 not in self.seats
        if phase == GamePhase.MAIN:
            return self.state.current_player not in self.seats
        return False

    def _step(self) -> list[str]:
        phase = self.state.phase
        if phase == GamePhase.SUIT_SELECTION:
            self.dispatch(Action.select_suit(self.reducer.rng.choice(STANDARD_SUITS)))
        elif phase == GamePhase.INITIAL_FLIP:
            self.dispatch(Action.initial_flip_step())
        elif phase == GamePhase.INITIAL_FLIP_RESULT:
            self.dispatch(Action.continue_from_flip())
        elif phase == GamePhase.END_OF_ROUND_RESOLVING:
            self.dispatch(Action.resolve_end_of_round())
        elif phase == GamePhase.SUDDEN_DEATH:
            self.dispatch(Action.sudden_death_step())
        elif phase == GamePhase.MAIN:
            return self.run_ai_turn().ai_moves
        return []
