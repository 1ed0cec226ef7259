"""
Game Loop - Drives the AI seats between human decisions.

The loop:
1. A human action is dispatched (or the game has just started)
2. While the seat to play is an AI seat, its bot picks from the legal
   actions and the choice is dispatched like any human input
3. Control returns when a human must decide, the game ends, or the
   step limit is reached

The step limit counts single actions, not turns: one AI turn is usually
two actions (select a card, then use it).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import TYPE_CHECKING

from ..engine_core.action import ActionType
from ..engine_core.action_generator import legal_actions
from ..engine_core.reducer import INVALID_ACTION

if TYPE_CHECKING:
    from .manager import Session
    from ..engine_core.action import Action

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 200


class LoopState(Enum):
    """State of the game loop."""
    RUNNING_AI = "running_ai"
    WAITING_HUMAN_ACTION = "waiting_human_action"
    STEP_LIMIT = "step_limit"
    GAME_OVER = "game_over"


@dataclass
class TurnResult:
    """
    Result of processing a human action and the AI turns after it.
    """
    success: bool
    loop_state: LoopState

    # Log lines appended while processing, in order
    changes: list[str] = field(default_factory=list)

    # AI actions taken, "<name>: <action type>"
    ai_actions: list[str] = field(default_factory=list)

    errors: list[str] = field(default_factory=list)
    error_code: str | None = None

    steps: int = 0
    winner: str | None = None


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(session)

        result = loop.apply_human_action(Action.select_card(card_id))
        if not result.success:
            show_errors(result.errors)

        # AI seats have moved; show the new state to the human
    """

    def __init__(self, session: Session, max_steps: int = DEFAULT_MAX_STEPS):
        self.session = session
        self.max_steps = max_steps
        self.state = LoopState.WAITING_HUMAN_ACTION

    def apply_human_action(self, action: Action) -> TurnResult:
        """
        Dispatch a human action, then let the AI seats play.

        A rejected action returns immediately; no AI turns are run. Only a
        reset is accepted while an AI seat is to play.
        """
        if self.session.is_ai_turn() and action.action_type != ActionType.RESET_GAME:
            player = self.session.game_state.current_player
            return TurnResult(
                success=False,
                loop_state=self.state,
                errors=[f"Waiting for {player.name} to play"],
                error_code=INVALID_ACTION,
            )

        result = self.session.dispatch(action)
        if not result.success:
            return TurnResult(
                success=False,
                loop_state=self.state,
                errors=[result.error or "Action rejected"],
                error_code=result.error_code,
            )

        turn = self.run_ai_turns()
        turn.changes = list(result.state_changes) + turn.changes
        return turn

    def run_ai_turns(self, max_steps: int | None = None) -> TurnResult:
        """
        Play AI seats until a human must act, the game ends, or
        max_steps actions have been dispatched.
        """
        limit = self.max_steps if max_steps is None else max_steps
        changes: list[str] = []
        ai_actions: list[str] = []
        steps = 0

        self.state = LoopState.RUNNING_AI
        while True:
            game_state = self.session.game_state
            if game_state.is_over:
                self.state = LoopState.GAME_OVER
                break

            if not self.session.is_ai_turn():
                self.state = LoopState.WAITING_HUMAN_ACTION
                break

            if steps >= limit:
                logger.warning("AI step limit %d reached in session %s", limit, self.session.session_id)
                self.state = LoopState.STEP_LIMIT
                break

            player = game_state.current_player
            legal = legal_actions(game_state)
            if not legal:
                # Shouldn't happen: a live game always offers something
                return TurnResult(
                    success=False,
                    loop_state=self.state,
                    changes=changes,
                    ai_actions=ai_actions,
                    errors=[f"No legal actions for {player.name}"],
                    steps=steps,
                )

            decision = self.session.bots[player.player_id].select_action(game_state, legal)
            result = self.session.dispatch(decision.action)
            steps += 1

            if not result.success:
                logger.error(
                    "Bot for %s chose a rejected action %s: %s",
                    player.name, decision.action.action_type.value, result.error,
                )
                return TurnResult(
                    success=False,
                    loop_state=self.state,
                    changes=changes,
                    ai_actions=ai_actions,
                    errors=[result.error or "Action rejected"],
                    error_code=result.error_code,
                    steps=steps,
                )

            changes.extend(result.state_changes)
            ai_actions.append(f"{player.name}: {decision.action.action_type.value}")

        return TurnResult(
            success=True,
            loop_state=self.state,
            changes=changes,
            ai_actions=ai_actions,
            steps=steps,
            winner=self.session.game_state.winner,
        )
