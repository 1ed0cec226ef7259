"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a local UI client and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- INVALID_ACTION: The engine rejected the action (wrong phase, not your
  piece, blocked move, ...)
- VALIDATION_ERROR: The request body does not describe an action
- INTERNAL_ERROR: Unexpected failure inside the engine
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field, model_validator

from ..engine_core.action import Action, ActionPayload, ActionType
from ..engine_core.board import PlayerColor, Position
from ..engine_core.state import GamePhase, LogAction, SupportType


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    YOUR_TURN = "your_turn"
    AI_THINKING = "ai_thinking"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_ACTION = "INVALID_ACTION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class PositionModel(BaseModel):
    """A board cell."""
    row: int = Field(..., ge=0, le=6)
    col: int = Field(..., ge=0, le=6)

    model_config = {"from_attributes": True}

    def to_position(self) -> Position:
        return Position(self.row, self.col)


class CardInfo(BaseModel):
    """A card in a hand."""
    card_id: str
    value: int = Field(..., ge=1, le=6)

    model_config = {"from_attributes": True}


class HandInfo(BaseModel):
    """A player's cards. Only the current player's cards are listed."""
    player_id: str
    cards: list[CardInfo] = Field(default_factory=list)
    card_count: int = 0
    deck_count: int = 0
    discard_count: int = 0


class RosterInfo(BaseModel):
    """Which supports a player can still summon."""
    player_id: str
    available: list[SupportType] = Field(default_factory=list)
    on_field: list[str] = Field(default_factory=list)
    lost: list[SupportType] = Field(default_factory=list)


class PieceInfo(BaseModel):
    """A hero or support piece."""
    piece_id: str
    player_id: str
    color: PlayerColor
    kind: str = Field(description="hero or support")
    support_type: Optional[SupportType] = None
    position: Optional[PositionModel] = None
    path_index: int = Field(-1, description="-1 at home, 48 is the center")
    is_finished: bool = False


class PlayerInfo(BaseModel):
    """Player information for display."""
    player_id: str
    name: str
    color: PlayerColor
    is_ai: bool
    is_current_turn: bool = False
    portal: Optional[PositionModel] = None

    model_config = {"from_attributes": True}


class LogEntryInfo(BaseModel):
    """One line of the game log."""
    entry_id: str
    player_name: str
    player_color: PlayerColor
    action: LogAction
    card_value: Optional[int] = None
    target_player: Optional[str] = None
    piece_type: Optional[SupportType] = None
    text: str = ""


class ActionInfo(BaseModel):
    """A legal action, in the same shape ActionRequest accepts."""
    action_type: ActionType
    card_id: Optional[str] = None
    piece_id: Optional[str] = None
    use_portal: bool = False
    position: Optional[PositionModel] = None
    support_type: Optional[SupportType] = None


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new game session."""
    player_count: int = Field(4, ge=2, le=4, description="Seats at the table")
    human_color: PlayerColor = Field(PlayerColor.RED, description="Color of the first seat")
    is_hotseat: bool = Field(False, description="All seats human, passing one device")
    ai_only: bool = Field(False, description="Every seat played by the built-in bot")
    random_seed: Optional[int] = Field(None, description="Seed for reproducible games")


class ActionRequest(BaseModel):
    """
    An action to dispatch.

    Only the fields the action type uses need to be set; the engine
    rejects anything that does not fit the current phase.
    """
    action_type: ActionType
    card_id: Optional[str] = None
    piece_id: Optional[str] = None
    use_portal: bool = False
    position: Optional[PositionModel] = None
    support_type: Optional[SupportType] = None

    # For RESET_GAME
    player_count: Optional[int] = Field(None, ge=2, le=4)
    human_color: Optional[PlayerColor] = None
    is_hotseat: bool = False
    seed: Optional[int] = None

    @model_validator(mode="after")
    def _check_required_fields(self):
        required = {
            ActionType.SELECT_CARD: "card_id",
            ActionType.ENTER_PIECE: "piece_id",
            ActionType.MOVE_PIECE: "piece_id",
            ActionType.ACTIVATE_PUSHER: "piece_id",
            ActionType.EXECUTE_PUSH: "piece_id",
            ActionType.SUMMON_SUPPORT: "support_type",
            ActionType.STEAL_PORTAL: "position",
        }.get(self.action_type)
        if required and getattr(self, required) is None:
            raise ValueError(f"{self.action_type.value} requires {required}")
        return self

    def to_action(self) -> Action:
        """Convert to an engine Action."""
        return Action(
            action_type=self.action_type,
            payload=ActionPayload(
                card_id=self.card_id,
                piece_id=self.piece_id,
                use_portal=self.use_portal,
                position=self.position.to_position() if self.position else None,
                support_type=self.support_type,
                player_count=self.player_count,
                human_color=self.human_color,
                is_hotseat=self.is_hotseat,
                seed=self.seed,
            ),
        )


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Complete game state for display."""
    session_id: str
    status: SessionStatus
    phase: GamePhase
    turn_number: int
    current_player_id: str
    is_hotseat: bool = False
    turn_ready: bool = True
    players: list[PlayerInfo] = Field(default_factory=list)
    pieces: list[PieceInfo] = Field(default_factory=list)
    hand: Optional[HandInfo] = None
    roster: Optional[RosterInfo] = None
    selected_card: Optional[CardInfo] = None
    pending_portal: Optional[PositionModel] = None
    ability_piece_id: Optional[str] = None
    pusher_used_this_turn: bool = False
    log: list[LogEntryInfo] = Field(default_factory=list)
    legal_actions: list[ActionInfo] = Field(default_factory=list)
    winner: Optional[PlayerInfo] = None
    api_version: str = "v1"


class SessionResponse(BaseModel):
    """Response containing session information."""
    session_id: str
    status: SessionStatus
    players: list[PlayerInfo] = Field(default_factory=list)
    current_player_id: Optional[str] = None
    turn_number: int = 0
    random_seed: int = 0
    created_at: float = 0.0
    api_version: str = "v1"


class DispatchResponse(BaseModel):
    """Response after dispatching an action (and any AI turns after it)."""
    session_id: str
    success: bool
    status: SessionStatus
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
    changes: list[str] = Field(default_factory=list, description="Log lines, in order")
    ai_actions: list[str] = Field(default_factory=list, description="AI actions taken")
    game_state: Optional[GameStateResponse] = None
    api_version: str = "v1"


class ValidMovesResponse(BaseModel):
    """What the selected card lets a piece do."""
    piece_id: str
    can_move: bool = False
    can_enter_start: bool = False
    can_enter_portal: bool = False
    effective_distance: int = 0


class PushTargetsResponse(BaseModel):
    """Pieces a Pusher can push."""
    pusher_id: str
    can_activate: bool = False
    targets: list[PieceInfo] = Field(default_factory=list)


class StealablePortalsResponse(BaseModel):
    """Opponent portals the current player can steal."""
    positions: list[PositionModel] = Field(default_factory=list)


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
