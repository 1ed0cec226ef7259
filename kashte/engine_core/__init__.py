"""
Engine Core - Deterministic game state management for Kashte.

The engine is the runtime that:
1. Builds the opening GameState
2. Generates legal actions
3. Applies actions via the reducer
4. Answers read-only queries for UIs and bots
"""

from .board import PlayerColor, Position
from .rules import GameRules, DEFAULT_RULES
from .state import (
    Card,
    GamePhase,
    GameState,
    LogAction,
    LogEntry,
    Piece,
    PieceKind,
    Player,
    PlayerHand,
    SupportRoster,
    SupportType,
)
from .action import Action, ActionType, ActionPayload, ActionResult
from .setup import create_initial_state
from .reducer import Reducer, apply_action, game_reducer
from .action_generator import ActionGenerator, legal_actions, is_legal
from .queries import ValidMoves, get_valid_moves

__all__ = [
    "PlayerColor",
    "Position",
    "GameRules",
    "DEFAULT_RULES",
    "Card",
    "GamePhase",
    "GameState",
    "LogAction",
    "LogEntry",
    "Piece",
    "PieceKind",
    "Player",
    "PlayerHand",
    "SupportRoster",
    "SupportType",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "create_initial_state",
    "Reducer",
    "apply_action",
    "game_reducer",
    "ActionGenerator",
    "legal_actions",
    "is_legal",
    "ValidMoves",
    "get_valid_moves",
]
