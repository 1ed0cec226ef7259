"""
Action System - Actions, payloads, and results.

Actions are a closed set of kinds (ActionType) with one shared payload
shape. Human input, AI policies and the HTTP surface all build the same
Action objects and hand them to the reducer.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .board import PlayerColor, Position
from .state import SupportType


class ActionType(str, Enum):
    """Types of actions in the system."""
    # Card selection
    SELECT_CARD = "select_card"
    UNSELECT_CARD = "unselect_card"

    # Card-consuming moves
    ENTER_PIECE = "enter_piece"
    MOVE_PIECE = "move_piece"
    SUMMON_SUPPORT = "summon_support"

    # Portals
    CLAIM_PORTAL = "claim_portal"
    SKIP_PORTAL = "skip_portal"
    STEAL_PORTAL = "steal_portal"

    # Pusher ability
    ACTIVATE_PUSHER = "activate_pusher"
    EXECUTE_PUSH = "execute_push"
    CANCEL_ABILITY = "cancel_ability"

    # Turn flow
    END_TURN = "end_turn"
    START_TURN = "start_turn"
    REFRESH_HAND = "refresh_hand"

    # System
    RESET_GAME = "reset_game"


@dataclass(frozen=True)
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields.
    This is a generic container; validation happens in the reducer.
    """
    card_id: str | None = None
    piece_id: str | None = None
    use_portal: bool = False
    position: Position | None = None
    support_type: SupportType | None = None

    # For RESET_GAME
    player_count: int | None = None
    human_color: PlayerColor | None = None
    is_hotseat: bool = False
    seed: int | None = None


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the game state.

    Actions are applied atomically by the reducer: either the whole
    transition happens or nothing does.
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def select_card(cls, card_id: str) -> Action:
        return cls(ActionType.SELECT_CARD, ActionPayload(card_id=card_id))

    @classmethod
    def unselect_card(cls) -> Action:
        return cls(ActionType.UNSELECT_CARD)

    @classmethod
    def enter_piece(cls, piece_id: str, use_portal: bool = False) -> Action:
        return cls(ActionType.ENTER_PIECE, ActionPayload(piece_id=piece_id, use_portal=use_portal))

    @classmethod
    def move_piece(cls, piece_id: str) -> Action:
        return cls(ActionType.MOVE_PIECE, ActionPayload(piece_id=piece_id))

    @classmethod
    def summon_support(cls, support_type: SupportType, use_portal: bool = False) -> Action:
        return cls(
            ActionType.SUMMON_SUPPORT,
            ActionPayload(support_type=support_type, use_portal=use_portal),
        )

    @classmethod
    def claim_portal(cls) -> Action:
        return cls(ActionType.CLAIM_PORTAL)

    @classmethod
    def skip_portal(cls) -> Action:
        return cls(ActionType.SKIP_PORTAL)

    @classmethod
    def steal_portal(cls, position: Position) -> Action:
        return cls(ActionType.STEAL_PORTAL, ActionPayload(position=position))

    @classmethod
    def activate_pusher(cls, piece_id: str) -> Action:
        return cls(ActionType.ACTIVATE_PUSHER, ActionPayload(piece_id=piece_id))

    @classmethod
    def execute_push(cls, target_piece_id: str) -> Action:
        return cls(ActionType.EXECUTE_PUSH, ActionPayload(piece_id=target_piece_id))

    @classmethod
    def cancel_ability(cls) -> Action:
        return cls(ActionType.CANCEL_ABILITY)

    @classmethod
    def end_turn(cls) -> Action:
        return cls(ActionType.END_TURN)

    @classmethod
    def start_turn(cls) -> Action:
        return cls(ActionType.START_TURN)

    @classmethod
    def refresh_hand(cls) -> Action:
        return cls(ActionType.REFRESH_HAND)

    @classmethod
    def reset_game(
        cls,
        player_count: int = 4,
        human_color: PlayerColor = PlayerColor.RED,
        is_hotseat: bool = False,
        seed: int | None = None,
    ) -> Action:
        return cls(
            ActionType.RESET_GAME,
            ActionPayload(
                player_count=player_count,
                human_color=human_color,
                is_hotseat=is_hotseat,
                seed=seed,
            ),
        )


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (the unchanged prior state on failure)
    - Error message and code (if failed)
    - Human-readable changes (the log lines the action appended)
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None, state: Any = None) -> ActionResult:
        """Create a failure result carrying the unchanged state."""
        return cls(success=False, new_state=state, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
        )
