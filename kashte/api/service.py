"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine Actions
2. Manages sessions and their game loops
3. Formats GameState snapshots and query answers for the client

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .schemas import (
    # Requests
    ActionRequest,
    CreateSessionRequest,
    # Responses
    DispatchResponse,
    ErrorResponse,
    GameStateResponse,
    PushTargetsResponse,
    SessionResponse,
    StealablePortalsResponse,
    ValidMovesResponse,
    # Shared
    ActionInfo,
    CardInfo,
    HandInfo,
    LogEntryInfo,
    PieceInfo,
    PlayerInfo,
    PositionModel,
    RosterInfo,
    # Enums
    ErrorCode,
    SessionStatus,
)
from ..engine_core.action import Action
from ..engine_core.action_generator import legal_actions
from ..engine_core.reducer import HANDLER_ERROR
from ..engine_core.state import GameState, Piece, Player
from ..engine_core import queries
from ..session import SessionManager, Session, SessionState, GameLoop, DEFAULT_MAX_STEPS

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service for a local UI client.

    Usage:
        service = APIService()

        # Create session
        session_response = service.create_session(CreateSessionRequest())

        # Play
        response = service.dispatch(session_id, ActionRequest(...))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    ai_step_limit: int = DEFAULT_MAX_STEPS

    # Game loops per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """
        Create a new game session and play any AI seats that open the game.

        Raises:
            ValueError: for a player count outside 2-4
        """
        session = self.session_manager.create_session(
            player_count=request.player_count,
            human_color=request.human_color,
            is_hotseat=request.is_hotseat,
            seed=request.random_seed,
            ai_only=request.ai_only,
        )

        game_loop = GameLoop(session, max_steps=self.ai_step_limit)
        self._game_loops[session.session_id] = game_loop
        game_loop.run_ai_turns()

        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """
        Get session status.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        return self._session_to_response(session)

    def get_game_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        """
        Get current game state.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)
        return self._build_game_state(session)

    def dispatch(self, session_id: str, request: ActionRequest) -> DispatchResponse | ErrorResponse:
        """
        Dispatch a human action, then run the AI seats.

        A rejected action is reported in the response, not raised; the
        game state is unchanged.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)

        game_loop = self._game_loops.get(session_id)
        if not game_loop:
            game_loop = GameLoop(session, max_steps=self.ai_step_limit)
            self._game_loops[session_id] = game_loop

        result = game_loop.apply_human_action(request.to_action())

        error_code = None
        if not result.success:
            error_code = (
                ErrorCode.INTERNAL_ERROR
                if result.error_code == HANDLER_ERROR
                else ErrorCode.INVALID_ACTION
            )

        return DispatchResponse(
            session_id=session_id,
            success=result.success,
            status=self._session_status(session),
            error="; ".join(result.errors) or None,
            error_code=error_code,
            changes=result.changes,
            ai_actions=result.ai_actions,
            game_state=self._build_game_state(session),
        )

    def get_valid_moves(self, session_id: str, piece_id: str) -> ValidMovesResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)

        state = session.game_state
        moves = queries.get_valid_moves(state, piece_id)
        return ValidMovesResponse(
            piece_id=piece_id,
            can_move=moves.can_move,
            can_enter_start=moves.can_enter_start,
            can_enter_portal=moves.can_enter_portal,
            effective_distance=queries.get_effective_move_distance(state, piece_id),
        )

    def get_push_targets(self, session_id: str, pusher_id: str) -> PushTargetsResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)

        state = session.game_state
        return PushTargetsResponse(
            pusher_id=pusher_id,
            can_activate=queries.can_activate_pusher(state, pusher_id),
            targets=[_piece_info(p) for p in queries.get_push_targets(state, pusher_id)],
        )

    def get_stealable_portals(self, session_id: str) -> StealablePortalsResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return _session_not_found(session_id)

        return StealablePortalsResponse(
            positions=[
                PositionModel(row=pos.row, col=pos.col)
                for pos in queries.get_stealable_portals(session.game_state)
            ],
        )

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        """
        End a game session. Returns False if there was no such session.
        """
        existed = self.session_manager.get_session(session_id) is not None
        self.session_manager.end_session(session_id, reason)
        self._game_loops.pop(session_id, None)
        return existed

    def list_sessions(self) -> list[str]:
        """
        List active session IDs.
        """
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _session_to_response(self, session: Session) -> SessionResponse:
        """Convert Session to SessionResponse."""
        state = session.game_state
        return SessionResponse(
            session_id=session.session_id,
            status=self._session_status(session),
            players=[_player_info(state, p) for p in state.players],
            current_player_id=state.current_player_id,
            turn_number=state.turn_number,
            random_seed=state.random_seed,
            created_at=session.created_at,
        )

    def _session_status(self, session: Session) -> SessionStatus:
        """Convert session state to API status."""
        if session.state == SessionState.ABANDONED:
            return SessionStatus.ABANDONED
        if session.state == SessionState.GAME_OVER or session.game_state.is_over:
            return SessionStatus.GAME_OVER
        if session.is_ai_turn():
            return SessionStatus.AI_THINKING
        return SessionStatus.YOUR_TURN

    def _build_game_state(self, session: Session) -> GameStateResponse:
        """Build complete game state response."""
        state = session.game_state

        winner = None
        if state.winner:
            winner_player = state.get_player(state.winner)
            if winner_player:
                winner = _player_info(state, winner_player)

        return GameStateResponse(
            session_id=session.session_id,
            status=self._session_status(session),
            phase=state.phase,
            turn_number=state.turn_number,
            current_player_id=state.current_player_id,
            is_hotseat=state.is_hotseat,
            turn_ready=state.turn_ready,
            players=[_player_info(state, p) for p in state.players],
            pieces=[_piece_info(p) for p in state.pieces],
            hand=_hand_info(state),
            roster=_roster_info(state),
            selected_card=(
                CardInfo(card_id=state.selected_card.card_id, value=state.selected_card.value)
                if state.selected_card else None
            ),
            pending_portal=_position_model(state.pending_portal),
            ability_piece_id=state.ability_piece_id,
            pusher_used_this_turn=state.pusher_used_this_turn,
            log=[
                LogEntryInfo(
                    entry_id=entry.entry_id,
                    player_name=entry.player_name,
                    player_color=entry.player_color,
                    action=entry.action,
                    card_value=entry.card_value,
                    target_player=entry.target_player,
                    piece_type=entry.piece_type,
                    text=entry.describe(),
                )
                for entry in state.log
            ],
            legal_actions=(
                [_action_info(a) for a in legal_actions(state)]
                if session.is_human_turn() else []
            ),
            winner=winner,
        )


def _session_not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error="Session not found",
        error_code=ErrorCode.SESSION_NOT_FOUND,
        details={"session_id": session_id},
    )


def _position_model(position) -> PositionModel | None:
    if position is None:
        return None
    return PositionModel(row=position.row, col=position.col)


def _player_info(state: GameState, player: Player) -> PlayerInfo:
    return PlayerInfo(
        player_id=player.player_id,
        name=player.name,
        color=player.color,
        is_ai=player.is_ai,
        is_current_turn=player.player_id == state.current_player_id,
        portal=_position_model(state.claimed_portals.get(player.color)),
    )


def _piece_info(piece: Piece) -> PieceInfo:
    return PieceInfo(
        piece_id=piece.piece_id,
        player_id=piece.player_id,
        color=piece.color,
        kind=piece.kind.value,
        support_type=piece.support_type,
        position=_position_model(piece.position),
        path_index=piece.path_index,
        is_finished=piece.is_finished,
    )


def _hand_info(state: GameState) -> HandInfo | None:
    """
    The current player's hand.

    Card faces are hidden during AI turns and before a hotseat player has
    started their turn; the pile sizes are always shown.
    """
    hand = state.get_hand(state.current_player_id)
    player = state.current_player
    if hand is None or player is None:
        return None

    show_cards = state.turn_ready and not player.is_ai
    return HandInfo(
        player_id=hand.player_id,
        cards=[CardInfo(card_id=c.card_id, value=c.value) for c in hand.cards] if show_cards else [],
        card_count=len(hand.cards),
        deck_count=len(hand.deck),
        discard_count=len(hand.discard),
    )


def _roster_info(state: GameState) -> RosterInfo | None:
    roster = queries.get_current_roster(state)
    if roster is None:
        return None
    return RosterInfo(
        player_id=roster.player_id,
        available=sorted(roster.available, key=lambda t: t.value),
        on_field=list(roster.on_field),
        lost=sorted(roster.lost, key=lambda t: t.value),
    )


def _action_info(action: Action) -> ActionInfo:
    payload = action.payload
    return ActionInfo(
        action_type=action.action_type,
        card_id=payload.card_id,
        piece_id=payload.piece_id,
        use_portal=payload.use_portal,
        position=_position_model(payload.position),
        support_type=payload.support_type,
    )
