"""
FastAPI Application - REST and WebSocket API for two-player rooms.

Endpoints:
    POST   /api/v1/rooms                        Create a room (seat 0)
    GET    /api/v1/rooms                        List open rooms
    GET    /api/v1/rooms/{code}                 Get room status
    POST   /api/v1/rooms/{code}/join            Take seat 1 and start the game
    GET    /api/v1/rooms/{code}/state?seat=     Redacted game state for a seat
    GET    /api/v1/rooms/{code}/actions?seat=   Legal actions for a seat
    POST   /api/v1/rooms/{code}/actions         Submit an action
    POST   /api/v1/rooms/{code}/rematch         Ask for a rematch
    DELETE /api/v1/rooms/{code}/seats/{seat}    Leave the room
    GET    /api/v1/rooms/{code}/score           Final scores and winner
    WS     /api/v1/rooms/{code}/ws?seat=        Real-time play
    GET    /health                              Health check

WebSocket messages (client -> server):
    {"type": "ping"}
    {"type": "action", "action": {"type": "build_mountain", "cardId": ..., "mandalaIndex": 0}}
    {"type": "rematch"}
    {"type": "leave"}

WebSocket messages (server -> client):
    pong, game_state (redacted per seat), game_ended, error,
    rematch_requested, player_disconnected, player_left, room_closed

Sockets are tracked per player, not per seat: a rematch swaps seats and a
leave moves the remaining player down, and every send uses the seat held now.

Every accepted action, from either transport, is followed by a per-seat
game_state broadcast.
"""

from typing import Annotated, Optional, Union
import json
import logging

from fastapi import FastAPI, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .service import APIService
from .schemas import (
    # Request models
    CreateRoomRequest,
    JoinRoomRequest,
    SeatRequest,
    SubmitActionRequest,
    # Response models
    ActionResponse,
    ErrorResponse,
    GameStateView,
    HealthResponse,
    LeaveRoomResponse,
    RematchResponse,
    RoomListResponse,
    RoomResponse,
    ScoreResponse,
    ValidActionsResponse,
    # Enums
    ErrorCode,
)
from ..config import Settings
from ..logging_config import room_code_var
from ..session import RoomError, RoomPlayer
from .. import __version__

logger = logging.getLogger(__name__)

STATUS_CODES = {
    ErrorCode.ROOM_NOT_FOUND: 404,
    ErrorCode.ROOM_FULL: 409,
    ErrorCode.GAME_IN_PROGRESS: 409,
    ErrorCode.GAME_NOT_STARTED: 409,
    ErrorCode.NOT_YOUR_TURN: 409,
    ErrorCode.REMATCH_UNAVAILABLE: 409,
    ErrorCode.INVALID_SEAT: 400,
    ErrorCode.INVALID_ACTION: 400,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.INTERNAL_ERROR: 500,
}


def create_app(service: Optional[APIService] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Mandala API",
        description="""
Two-player Mandala card game server.

## Flow

1. `POST /api/v1/rooms` returns a 4-letter room code (you are seat 0)
2. The opponent calls `POST /api/v1/rooms/{code}/join` (seat 1); the game starts
3. Each seat reads its redacted state and submits actions, over REST or the WebSocket
4. When the game ends, both seats may call `POST /rematch`; seats swap

## Error Codes

| Code | Description |
|------|-------------|
| `ROOM_NOT_FOUND` | No room with that code |
| `ROOM_FULL` | Both seats are taken |
| `GAME_IN_PROGRESS` | The room already has a game |
| `GAME_NOT_STARTED` | Waiting for a second player |
| `INVALID_SEAT` | Seat is not occupied |
| `NOT_YOUR_TURN` | Another seat must act |
| `INVALID_ACTION` | Rejected by the rules; see `details.reason` |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()

    # WebSocket connections per room: (player, socket).
    # Seats move on rematch and leave, so the seat is looked up on every send.
    ws_connections: dict[str, list[tuple[RoomPlayer, WebSocket]]] = {}

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code or STATUS_CODES.get(error_code, 400),
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def from_error(response: ErrorResponse) -> JSONResponse:
        return make_error_response(response.error_code, response.error, details=response.details)

    def current_seat(code: str, player: RoomPlayer) -> Optional[int]:
        """Seat the player holds now, or None if they left or the room is gone."""
        try:
            room = api_service.room_manager.get_room(code)
        except RoomError:
            return None
        return room.seat_of(player)

    def seated_player(code: str, seat: int) -> Optional[RoomPlayer]:
        try:
            room = api_service.room_manager.get_room(code)
        except RoomError:
            return None
        return room.players[seat] if 0 <= seat < len(room.players) else None

    async def close_player_sockets(code: str, player: RoomPlayer) -> None:
        """Close the sockets of a player who no longer holds a seat."""
        for seated, ws in list(ws_connections.get(code, [])):
            if seated is not player:
                continue
            drop_connection(code, seated, ws)
            try:
                await ws.close()
            except (RuntimeError, WebSocketDisconnect):
                logger.debug(f"Socket in room {code} already closed")

    def drop_connection(code: str, player: RoomPlayer, websocket: WebSocket) -> None:
        connections = ws_connections.get(code, [])
        ws_connections[code] = [
            (p, ws) for p, ws in connections if not (p is player and ws is websocket)
        ]
        if not ws_connections[code]:
            del ws_connections[code]

    async def close_room_sockets(code: str, reason: str) -> None:
        """Close every socket of a room that no longer exists."""
        for _, ws in ws_connections.pop(code, []):
            try:
                await ws.send_json({"type": "room_closed", "reason": reason})
                await ws.close(code=4000, reason=reason)
            except (RuntimeError, WebSocketDisconnect):
                logger.debug(f"Socket in room {code} already closed")

    async def send_to_room(code: str, message: dict, exclude: Optional[RoomPlayer] = None):
        """Send the same message to every socket in a room."""
        dead_connections = []
        for player, ws in list(ws_connections.get(code, [])):
            if player is exclude:
                continue
            try:
                await ws.send_json(message)
            except (RuntimeError, WebSocketDisconnect):
                dead_connections.append((player, ws))
        for player, ws in dead_connections:
            drop_connection(code, player, ws)

    async def broadcast_game_state(code: str):
        """Send each connected player the redacted state of the seat they hold now."""
        try:
            room = api_service.room_manager.get_room(code)
        except RoomError:
            return
        if room.game_state is None:
            return

        dead_connections = []
        for player, ws in list(ws_connections.get(room.code, [])):
            seat = room.seat_of(player)
            if seat is None:
                continue
            try:
                state = api_service.seat_state(room.code, seat)
                await ws.send_json({"type": "game_state", "state": state.model_dump(mode="json")})
                if state.winner is not None:
                    await ws.send_json({
                        "type": "game_ended",
                        "winner": state.winner.model_dump(mode="json"),
                    })
            except (RuntimeError, WebSocketDisconnect):
                dead_connections.append((player, ws))
        for player, ws in dead_connections:
            drop_connection(room.code, player, ws)

    # =========================================================================
    # Room Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/rooms",
        response_model=RoomResponse,
        tags=["Rooms"],
        summary="Create a new room",
    )
    async def create_room(request: CreateRoomRequest) -> RoomResponse:
        """
        Create a room and take seat 0.

        Stale rooms are swept on each creation.
        """
        for stale_code in api_service.cleanup_stale_rooms(settings.room_max_age_seconds):
            await close_room_sockets(stale_code, "Room expired")
        return api_service.create_room(request)

    @app.get(
        "/api/v1/rooms",
        response_model=RoomListResponse,
        tags=["Rooms"],
        summary="List open rooms",
    )
    async def list_rooms() -> RoomListResponse:
        rooms = api_service.list_rooms()
        return RoomListResponse(rooms=rooms, count=len(rooms))

    @app.get(
        "/api/v1/rooms/{code}",
        response_model=RoomResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Get room status",
    )
    async def get_room(code: str) -> Union[RoomResponse, JSONResponse]:
        response = api_service.get_room(code)
        if isinstance(response, ErrorResponse):
            return from_error(response)
        return response

    @app.post(
        "/api/v1/rooms/{code}/join",
        response_model=RoomResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Room not found"},
            409: {"model": ErrorResponse, "description": "Room full or game in progress"},
        },
        tags=["Rooms"],
        summary="Join a room as seat 1",
    )
    async def join_room(code: str, request: JoinRoomRequest) -> Union[RoomResponse, JSONResponse]:
        response = api_service.join_room(code, request)
        if isinstance(response, ErrorResponse):
            return from_error(response)
        await broadcast_game_state(response.code)
        return response

    @app.post(
        "/api/v1/rooms/{code}/rematch",
        response_model=RematchResponse,
        responses={409: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Ask for a rematch",
    )
    async def request_rematch(code: str, request: SeatRequest) -> Union[RematchResponse, JSONResponse]:
        """The new game starts once both seats have asked. Seats are swapped."""
        response = api_service.request_rematch(code, request.seat)
        if isinstance(response, ErrorResponse):
            return from_error(response)
        if response.started:
            await broadcast_game_state(response.room_code)
        return response

    @app.delete(
        "/api/v1/rooms/{code}/seats/{seat}",
        response_model=LeaveRoomResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Leave a room",
    )
    async def leave_room(code: str, seat: int) -> Union[LeaveRoomResponse, JSONResponse]:
        """Leaving abandons any game in progress. Later seats move down."""
        leaving = seated_player(code.upper(), seat)
        response = api_service.leave_room(code, seat)
        if isinstance(response, ErrorResponse):
            return from_error(response)
        if response.room_deleted:
            await close_room_sockets(response.room_code, "Room deleted")
        else:
            await close_player_sockets(response.room_code, leaving)
            await send_to_room(response.room_code, {"type": "player_left", "seat": seat})
        return response

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/rooms/{code}/state",
        response_model=GameStateView,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get the game state for a seat",
    )
    async def get_game_state(
        code: str,
        seat: Annotated[int, Query(ge=0, le=1, description="Viewing seat")],
    ) -> Union[GameStateView, JSONResponse]:
        """Hidden cards (opponent hand, face-down cups, deck) come back as `hidden`."""
        response = api_service.get_game_state(code, seat)
        if isinstance(response, ErrorResponse):
            return from_error(response)
        return response

    @app.get(
        "/api/v1/rooms/{code}/actions",
        response_model=ValidActionsResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game"],
        summary="List legal actions for a seat",
    )
    async def get_valid_actions(
        code: str,
        seat: Annotated[int, Query(ge=0, le=1, description="Acting seat")],
    ) -> Union[ValidActionsResponse, JSONResponse]:
        response = api_service.get_valid_actions(code, seat)
        if isinstance(response, ErrorResponse):
            return from_error(response)
        return response

    @app.post(
        "/api/v1/rooms/{code}/actions",
        response_model=ActionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Rejected by the rules"},
            409: {"model": ErrorResponse, "description": "Not your turn"},
        },
        tags=["Game"],
        summary="Submit an action",
    )
    async def submit_action(code: str, request: SubmitActionRequest) -> Union[ActionResponse, JSONResponse]:
        response = api_service.submit_action(code, request.seat, request.action.to_action())
        if isinstance(response, ErrorResponse):
            return from_error(response)
        await broadcast_game_state(code.upper())
        return response

    @app.get(
        "/api/v1/rooms/{code}/score",
        response_model=ScoreResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get final scores",
    )
    async def get_scores(code: str) -> Union[ScoreResponse, JSONResponse]:
        response = api_service.get_scores(code)
        if isinstance(response, ErrorResponse):
            return from_error(response)
        return response

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/rooms/{code}/ws")
    async def websocket_endpoint(websocket: WebSocket, code: str, seat: int = 0):
        """
        WebSocket for real-time play.

        The seat must already be occupied (create or join over REST first).
        """
        code = code.upper()
        await websocket.accept()

        try:
            room = api_service.room_manager.get_room(code)
            api_service.room_manager.mark_connected(code, seat)
        except RoomError as e:
            await websocket.send_json({"type": "error", "error": e.message, "error_code": e.error_code})
            await websocket.close(code=4004, reason=e.message)
            return

        room_code_var.set(code)
        player = room.players[seat]
        ws_connections.setdefault(code, []).append((player, websocket))
        logger.debug(f"{player.name} connected on seat {seat}")

        if room.game_state is not None:
            state = api_service.seat_state(code, seat)
            await websocket.send_json({"type": "game_state", "state": state.model_dump(mode="json")})

        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({"type": "error", "error": "Invalid JSON"})
                    continue
                if not isinstance(message, dict):
                    await websocket.send_json({"type": "error", "error": "Message must be an object"})
                    continue

                seat = current_seat(code, player)
                if seat is None:
                    await websocket.send_json({
                        "type": "error",
                        "error": "You no longer hold a seat in this room",
                        "error_code": ErrorCode.INVALID_SEAT.value,
                    })
                    drop_connection(code, player, websocket)
                    await websocket.close()
                    return

                msg_type = message.get("type")
                if msg_type == "ping":
                    await websocket.send_json({"type": "pong"})

                elif msg_type == "action":
                    response = api_service.submit_action(code, seat, message.get("action") or {})
                    if isinstance(response, ErrorResponse):
                        await websocket.send_json({"type": "error", **response.model_dump(mode="json")})
                    else:
                        await broadcast_game_state(code)

                elif msg_type == "rematch":
                    response = api_service.request_rematch(code, seat)
                    if isinstance(response, ErrorResponse):
                        await websocket.send_json({"type": "error", **response.model_dump(mode="json")})
                    elif response.started:
                        await broadcast_game_state(code)
                    else:
                        await send_to_room(code, {"type": "rematch_requested", "seat": seat})

                elif msg_type == "leave":
                    response = api_service.leave_room(code, seat)
                    drop_connection(code, player, websocket)
                    await websocket.close()
                    if isinstance(response, LeaveRoomResponse) and response.room_deleted:
                        await close_room_sockets(code, "Room deleted")
                    else:
                        await send_to_room(code, {"type": "player_left", "seat": seat})
                    return

                else:
                    await websocket.send_json({"type": "error", "error": f"Unknown message type: {msg_type}"})

        except WebSocketDisconnect:
            logger.debug(f"{player.name} disconnected")
            drop_connection(code, player, websocket)
            seat = current_seat(code, player)
            if seat is not None:
                api_service.room_manager.mark_disconnected(code, seat)
                await send_to_room(code, {"type": "player_disconnected", "seat": seat})

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
        return HealthResponse(
            status="ok",
            service="mandala",
            version=__version__,
            rooms=len(api_service.list_rooms()),
        )

    return app


# For running directly: uvicorn mandala.api.app:app
app = create_app()
