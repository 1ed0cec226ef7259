"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Caller starts a session → fresh GameState, one bot per AI seat
2. During game:
   - Human actions are dispatched through the session
   - AI seats are played by their BotPolicy (see GameLoop)
   - Every dispatch replaces the session's GameState wholesale
3. Game ends or caller quits → session removed, state dropped

PERSISTENCE RULES:
- Sessions are in-memory only
- The GameState is the only source of truth; the session holds the one
  mutable reference to it
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging
import time
import uuid

from ..engine_core.action import Action, ActionType, ActionResult
from ..engine_core.board import PlayerColor
from ..engine_core.reducer import apply_action
from ..engine_core.rules import GameRules, DEFAULT_RULES
from ..engine_core.setup import create_initial_state
from ..engine_core.state import GameState
from ..bots import BotPolicy, SimpleBot

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # A hero reached the center
    ABANDONED = "abandoned"  # Caller quit


@dataclass
class Session:
    """
    One play-through of a game.

    Contains:
    - Current canonical game state
    - Bots for the AI seats, keyed by player id
    - Session metadata
    """
    session_id: str
    game_state: GameState
    created_at: float

    state: SessionState = SessionState.ACTIVE
    bots: dict[str, BotPolicy] = field(default_factory=dict)
    bot_factory: Callable[[], BotPolicy] = SimpleBot

    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.bots:
            self.assign_bots()

    def assign_bots(self):
        """Give every AI seat a fresh bot."""
        self.bots = {
            p.player_id: self.bot_factory()
            for p in self.game_state.players
            if p.is_ai
        }

    def is_active(self) -> bool:
        """Check if session is still active."""
        return self.state == SessionState.ACTIVE

    def is_ai_turn(self) -> bool:
        """Check if the seat to play is an AI seat with a bot."""
        if self.game_state.is_over:
            return False
        player = self.game_state.current_player
        return player is not None and player.is_ai and player.player_id in self.bots

    def is_human_turn(self) -> bool:
        if self.game_state.is_over:
            return False
        player = self.game_state.current_player
        return player is not None and not player.is_ai

    def dispatch(self, action: Action) -> ActionResult:
        """
        Apply an action and replace the current state with the result.

        A rejected action leaves the state as it was.
        """
        result = apply_action(self.game_state, action)
        if not result.success:
            return result

        self.game_state = result.new_state
        if action.action_type == ActionType.RESET_GAME:
            self.assign_bots()
            self.state = SessionState.ACTIVE
        elif self.game_state.is_over:
            self.state = SessionState.GAME_OVER
            logger.info("Session %s finished, winner %s", self.session_id, self.game_state.winner)
        return result


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with their opening state and bots
    - Track active sessions
    - Clean up ended sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        player_count: int = 4,
        human_color: PlayerColor = PlayerColor.RED,
        is_hotseat: bool = False,
        seed: int | None = None,
        ai_only: bool = False,
        rules: GameRules = DEFAULT_RULES,
        bot_factory: Callable[[], BotPolicy] = SimpleBot,
    ) -> Session:
        """
        Create a new game session.

        Args:
            player_count: Seats at the table (2-4)
            human_color: Color of the first seat
            is_hotseat: All seats human, each starting their own turn
            seed: Game seed; a random one is drawn when omitted
            ai_only: Every seat is played by a bot
            rules: Rule knobs for this game
            bot_factory: Builds the bot for each AI seat

        Raises:
            ValueError: for a player count outside 2-4
        """
        session_id = str(uuid.uuid4())
        if seed is None:
            seed = uuid.uuid4().int % (2 ** 31)

        game_state = create_initial_state(
            player_count=player_count,
            human_color=human_color,
            is_hotseat=is_hotseat,
            seed=seed,
            rules=rules,
            ai_only=ai_only,
        )
        session = Session(
            session_id=session_id,
            game_state=game_state,
            created_at=time.time(),
            bot_factory=bot_factory,
        )

        self._sessions[session_id] = session
        logger.debug("Created session %s (%d players, seed %d)", session_id, player_count, seed)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed"):
        """
        End a session and remove it from memory.

        Called when the game is completed or the caller abandons it.
        """
        session = self._sessions.pop(session_id, None)
        if session:
            if reason == "completed" and session.game_state.is_over:
                session.state = SessionState.GAME_OVER
            else:
                session.state = SessionState.ABANDONED
            session.bots.clear()

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600):
        """
        Remove finished sessions older than max_age.

        Called periodically to free memory.
        """
        current_time = time.time()
        to_remove = [
            session_id
            for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.is_active()
        ]

        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
