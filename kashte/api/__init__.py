"""
API Module - Local HTTP interface.

Exposes the engine via a REST API for a single UI client:
1. Create game sessions
2. Read game state, legal actions and query answers
3. Dispatch actions; AI seats answer before the response returns

All state is session-scoped and in-memory.
"""

from .schemas import (
    # Requests
    ActionRequest,
    CreateSessionRequest,
    # Responses
    DispatchResponse,
    ErrorResponse,
    GameStateResponse,
    SessionResponse,
    # Shared
    CardInfo,
    PieceInfo,
    PlayerInfo,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "ActionRequest",
    "CreateSessionRequest",
    # Responses
    "DispatchResponse",
    "ErrorResponse",
    "GameStateResponse",
    "SessionResponse",
    # Shared
    "CardInfo",
    "PieceInfo",
    "PlayerInfo",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
