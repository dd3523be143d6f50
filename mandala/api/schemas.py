"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between clients and the engine.
Action payloads use the same camelCase field names as the engine's
transport records (cardId, cardIds, mandalaIndex); snake_case is also
accepted on input.

Error Codes:
- ROOM_NOT_FOUND: No room with that code
- ROOM_FULL: Both seats are taken
- GAME_IN_PROGRESS: The room already has a running game
- GAME_NOT_STARTED: The room is still waiting for a second player
- INVALID_SEAT: Seat index is not occupied
- NOT_YOUR_TURN: Another seat must act
- INVALID_ACTION: The engine rejected the action (details.reason)
- REMATCH_UNAVAILABLE: Rematch requested before the game ended
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, Field

from ..engine_core.action import Action, BuildMountain, ClaimColor, DiscardRedraw, GrowField


API_VERSION = "v1"


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    ROOM_FULL = "ROOM_FULL"
    GAME_IN_PROGRESS = "GAME_IN_PROGRESS"
    GAME_NOT_STARTED = "GAME_NOT_STARTED"
    INVALID_SEAT = "INVALID_SEAT"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    INVALID_ACTION = "INVALID_ACTION"
    REMATCH_UNAVAILABLE = "REMATCH_UNAVAILABLE"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Action Requests
# =============================================================================

class BuildMountainRequest(BaseModel):
    """Play one card to a mandala's mountain."""
    type: Literal["build_mountain"] = "build_mountain"
    card_id: str = Field(..., alias="cardId")
    mandala_index: int = Field(..., alias="mandalaIndex", ge=0, le=1)

    model_config = {"populate_by_name": True}

    def to_action(self) -> Action:
        return BuildMountain(card_id=self.card_id, mandala_index=self.mandala_index)


class GrowFieldRequest(BaseModel):
    """Play same-colored cards to your own field."""
    type: Literal["grow_field"] = "grow_field"
    card_ids: list[str] = Field(..., alias="cardIds")
    mandala_index: int = Field(..., alias="mandalaIndex", ge=0, le=1)

    model_config = {"populate_by_name": True}

    def to_action(self) -> Action:
        return GrowField(card_ids=tuple(self.card_ids), mandala_index=self.mandala_index)


class DiscardRedrawRequest(BaseModel):
    """Discard same-colored cards and draw as many."""
    type: Literal["discard_redraw"] = "discard_redraw"
    card_ids: list[str] = Field(..., alias="cardIds")

    model_config = {"populate_by_name": True}

    def to_action(self) -> Action:
        return DiscardRedraw(card_ids=tuple(self.card_ids))


class ClaimColorRequest(BaseModel):
    """Claim a mountain color during destruction."""
    type: Literal["claim_color"] = "claim_color"
    color: str

    def to_action(self) -> Action:
        return ClaimColor(color=self.color)


ActionRequest = Annotated[
    Union[BuildMountainRequest, GrowFieldRequest, DiscardRedrawRequest, ClaimColorRequest],
    Field(discriminator="type"),
]


class SubmitActionRequest(BaseModel):
    """Request to apply an action for a seat."""
    seat: int = Field(..., ge=0, le=1, description="Seat submitting the action")
    action: ActionRequest


class CreateRoomRequest(BaseModel):
    """Request to open a new room."""
    name: Optional[str] = Field(None, max_length=40, description="Display name for seat 0")


class JoinRoomRequest(BaseModel):
    """Request to take the second seat."""
    name: Optional[str] = Field(None, max_length=40, description="Display name for seat 1")


class SeatRequest(BaseModel):
    """Request carrying only the acting seat."""
    seat: int = Field(..., ge=0, le=1)


# =============================================================================
# Shared Models
# =============================================================================

class CardView(BaseModel):
    """A card as seen by one seat. Hidden cards have card_id == "hidden"."""
    card_id: str
    color: str

    model_config = {"from_attributes": True}


class PlayerView(BaseModel):
    """A player's zones as seen by one seat."""
    player_id: str
    is_you: bool = False
    is_current_turn: bool = False
    hand: list[CardView] = Field(default_factory=list)
    hand_count: int = 0
    cup: list[CardView] = Field(default_factory=list)
    cup_count: int = 0
    river: list[Optional[str]] = Field(default_factory=list, description="Color per slot, null if empty")
    river_cards: list[CardView] = Field(default_factory=list)
    visible_score: int = Field(0, description="Score counting only face-up cup cards")


class MandalaView(BaseModel):
    """One shared mandala."""
    index: int
    mountain: list[CardView] = Field(default_factory=list)
    player_fields: list[list[CardView]] = Field(default_factory=list, description="Field per seat")


class DestructionView(BaseModel):
    """An in-progress destruction."""
    mandala_index: int
    current_claimer_index: int
    remaining_colors: list[str] = Field(default_factory=list)


class WinnerView(BaseModel):
    """Outcome of an ended game."""
    winner_id: str
    winner_index: int
    scores: list[int] = Field(default_factory=list)
    tie_break: Optional[str] = Field(None, description="null, cup_count or player_order")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field(API_VERSION, description="API version")


class RoomResponse(BaseModel):
    """Room information for one seat."""
    code: str
    seat: Optional[int] = Field(None, description="The caller's seat, if any")
    players: list[str] = Field(default_factory=list)
    started: bool = False
    game_over: bool = False
    games_played: int = 0
    api_version: str = API_VERSION


class GameStateView(BaseModel):
    """The redacted game state for one seat."""
    room_code: str
    seat: int
    phase: str
    current_player_index: int
    turn_number: int
    deck_count: int
    discard_pile: list[CardView] = Field(default_factory=list)
    players: list[PlayerView] = Field(default_factory=list)
    mandalas: list[MandalaView] = Field(default_factory=list)
    destruction: Optional[DestructionView] = None
    end_game_trigger: Optional[str] = None
    winner: Optional[WinnerView] = None
    api_version: str = API_VERSION


class ValidActionsResponse(BaseModel):
    """Legal actions for a seat right now (empty when it is not their turn)."""
    room_code: str
    seat: int
    actions: list[dict[str, Any]] = Field(default_factory=list)
    count: int = 0
    api_version: str = API_VERSION


class ActionResponse(BaseModel):
    """Result of an accepted action."""
    success: bool
    state_changes: list[str] = Field(default_factory=list)
    game_state: GameStateView
    api_version: str = API_VERSION


class ScoreResponse(BaseModel):
    """Final cup scores; empty until the game has ended (cups are partly face-down)."""
    room_code: str
    scores: list[int] = Field(default_factory=list)
    game_over: bool = False
    winner: Optional[WinnerView] = None
    api_version: str = API_VERSION


class RematchResponse(BaseModel):
    """Response after a rematch request."""
    room_code: str
    started: bool = Field(..., description="True once both seats asked and a new game began")
    room: RoomResponse
    api_version: str = API_VERSION


class LeaveRoomResponse(BaseModel):
    """Response after leaving a room."""
    success: bool
    room_code: str
    room_deleted: bool = False


class RoomListResponse(BaseModel):
    """Response listing open rooms."""
    rooms: list[str]
    count: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    rooms: int = 0
