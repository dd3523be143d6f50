"""
API Module - Network interface for two-player rooms.

Exposes the engine via REST and WebSocket:
1. A player creates a room and shares the code
2. The opponent joins; the game starts
3. Both seats read their redacted state and submit actions
4. Either seat may ask for a rematch once the game ends

All state is room-scoped and in memory. No accounts.
"""

from .schemas import (
    # Requests
    ActionRequest,
    CreateRoomRequest,
    JoinRoomRequest,
    SeatRequest,
    SubmitActionRequest,
    # Responses
    ActionResponse,
    ErrorResponse,
    GameStateView,
    RoomResponse,
    ScoreResponse,
    ValidActionsResponse,
    # Enums
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "ActionRequest",
    "CreateRoomRequest",
    "JoinRoomRequest",
    "SeatRequest",
    "SubmitActionRequest",
    # Responses
    "ActionResponse",
    "ErrorResponse",
    "GameStateView",
    "RoomResponse",
    "ScoreResponse",
    "ValidActionsResponse",
    # Enums
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
