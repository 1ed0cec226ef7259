"""
FastAPI Application - Local HTTP surface for a UI client.

Endpoints:
    POST   /api/v1/sessions                                  Create game session
    GET    /api/v1/sessions                                  List active sessions
    GET    /api/v1/sessions/{id}                             Get session status
    DELETE /api/v1/sessions/{id}                             End session
    GET    /api/v1/sessions/{id}/state                       Get game state
    POST   /api/v1/sessions/{id}/actions                     Dispatch an action
    GET    /api/v1/sessions/{id}/pieces/{piece_id}/moves     Valid moves for a piece
    GET    /api/v1/sessions/{id}/pieces/{piece_id}/push-targets  Pusher targets
    GET    /api/v1/sessions/{id}/portals/stealable           Stealable portals

AI Execution Flow:
    1. POST /actions dispatches the human action
    2. If it was accepted, AI seats play until a human must decide again
       (or KASHTE_AI_STEP_LIMIT actions have been taken)
    3. The response carries the log lines, the AI actions and the new state

This is a single-process surface for one local client; there are no
accounts and no cross-client synchronisation.
"""

from typing import Annotated, Union
import logging
import os

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .service import APIService
from .schemas import (
    # Request models
    ActionRequest,
    CreateSessionRequest,
    # Response models
    DispatchResponse,
    EndSessionResponse,
    ErrorResponse,
    GameStateResponse,
    HealthResponse,
    PushTargetsResponse,
    SessionListResponse,
    SessionResponse,
    StealablePortalsResponse,
    ValidMovesResponse,
    # Enums
    ErrorCode,
)
from .. import __version__

logger = logging.getLogger(__name__)

# Environment configuration
KASHTE_ENV = os.getenv("KASHTE_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
KASHTE_AI_STEP_LIMIT = int(os.getenv("KASHTE_AI_STEP_LIMIT", "200"))


def create_app(service: APIService | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Kashte Engine API",
        description="""
Rules engine for a card-driven race board game with heroes, supports and portals.

## Playing

1. `POST /api/v1/sessions` to start a game
2. `GET /state` lists the legal actions for the seat to play
3. `POST /actions` with one of them; AI seats answer before the response returns

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `INVALID_ACTION` | The engine rejected the action; state unchanged |
| `VALIDATION_ERROR` | Malformed request body |
| `INTERNAL_ERROR` | Unexpected engine failure |
        """,
        version=__version__,
        docs_url="/api/docs" if KASHTE_ENV != "production" else None,
        redoc_url="/api/redoc" if KASHTE_ENV != "production" else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService(ai_step_limit=KASHTE_AI_STEP_LIMIT)

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: dict | None = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def not_found(response: ErrorResponse) -> JSONResponse:
        return make_error_response(
            ErrorCode.SESSION_NOT_FOUND,
            response.error,
            status_code=404,
            details=response.details,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            status_code=422,
            details={"errors": [str(e.get("msg", e)) for e in exc.errors()]},
        )

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid parameters"}},
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(
        request: CreateSessionRequest,
    ) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new game session.

        If the first seat is an AI seat, the AI turns are played before the
        response returns.
        """
        try:
            return api_service.create_session(request)
        except ValueError as e:
            return make_error_response(ErrorCode.VALIDATION_ERROR, str(e))

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current status of a game session."""
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a game session and release resources."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get current game state",
    )
    async def get_game_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        """Get the complete current game state, with the legal actions for a human seat."""
        response = api_service.get_game_state(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/actions",
        response_model=DispatchResponse,
        responses={
            400: {"model": DispatchResponse, "description": "Action rejected"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Game"],
        summary="Dispatch an action",
    )
    async def dispatch_action(
        session_id: str,
        request: ActionRequest,
    ) -> Union[DispatchResponse, JSONResponse]:
        """
        Dispatch one action for the seat to play.

        A rejected action leaves the game unchanged and returns 400 with the
        reason. An accepted one is followed by any AI turns.
        """
        response = api_service.dispatch(session_id, request)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        if not response.success:
            status_code = 500 if response.error_code == ErrorCode.INTERNAL_ERROR else 400
            return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/pieces/{piece_id}/moves",
        response_model=ValidMovesResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Queries"],
        summary="What the selected card lets a piece do",
    )
    async def get_valid_moves(session_id: str, piece_id: str) -> Union[ValidMovesResponse, JSONResponse]:
        response = api_service.get_valid_moves(session_id, piece_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/pieces/{piece_id}/push-targets",
        response_model=PushTargetsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Queries"],
        summary="Pieces a Pusher can push",
    )
    async def get_push_targets(session_id: str, piece_id: str) -> Union[PushTargetsResponse, JSONResponse]:
        response = api_service.get_push_targets(session_id, piece_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    @app.get(
        "/api/v1/sessions/{session_id}/portals/stealable",
        response_model=StealablePortalsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Queries"],
        summary="Opponent portals the current player can steal",
    )
    async def get_stealable_portals(session_id: str) -> Union[StealablePortalsResponse, JSONResponse]:
        response = api_service.get_stealable_portals(session_id)
        if isinstance(response, ErrorResponse):
            return not_found(response)
        return response

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            service="kashte-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Kashte Engine API",
            "version": __version__,
            "env": KASHTE_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    logger.debug("Created app (env=%s, origins=%s)", KASHTE_ENV, ALLOWED_ORIGINS)
    return app
