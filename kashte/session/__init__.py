"""
Session Module - Manages in-memory game sessions.

A session represents one play-through of a game:
- Created when a caller starts a game
- Holds the one mutable reference to the current GameState
- Runs the AI seats through their bots
- Dropped when the game ends

Sessions are EPHEMERAL: nothing is persisted.
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import GameLoop, LoopState, TurnResult, DEFAULT_MAX_STEPS

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
    "LoopState",
    "TurnResult",
    "DEFAULT_MAX_STEPS",
]
