"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to room and engine calls
2. Converts RoomError and engine rejections into ErrorResponse
3. Builds redacted, per-seat game state views

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping
import logging

from .schemas import (
    # Requests
    CreateRoomRequest,
    JoinRoomRequest,
    # Responses
    ActionResponse,
    ErrorResponse,
    GameStateView,
    LeaveRoomResponse,
    RematchResponse,
    RoomResponse,
    ScoreResponse,
    ValidActionsResponse,
    # Shared
    CardView,
    DestructionView,
    MandalaView,
    PlayerView,
    WinnerView,
    # Enums
    ErrorCode,
)
from ..engine_core.action import Action
from ..engine_core.action_generator import legal_actions
from ..engine_core.scoring import WinnerResult, calculate_scores, get_winner
from ..engine_core.state import Card, GameState, PlayerState
from ..session import Room, RoomError, RoomManager

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        room = service.create_room(CreateRoomRequest(name="Ana"))
        service.join_room(room.code, JoinRoomRequest(name="Ben"))

        state = service.get_game_state(room.code, seat=0)
        result = service.submit_action(room.code, 0, action)
    """
    room_manager: RoomManager = field(default_factory=RoomManager)

    # =========================================================================
    # Rooms
    # =========================================================================

    def create_room(self, request: CreateRoomRequest) -> RoomResponse:
        room = self.room_manager.create_room(request.name)
        return self._room_to_response(room, seat=0)

    def join_room(self, code: str, request: JoinRoomRequest) -> RoomResponse | ErrorResponse:
        try:
            room = self.room_manager.join_room(code, request.name)
        except RoomError as e:
            return self._error(e)
        return self._room_to_response(room, seat=len(room.players) - 1)

    def get_room(self, code: str, seat: int | None = None) -> RoomResponse | ErrorResponse:
        try:
            room = self.room_manager.get_room(code)
        except RoomError as e:
            return self._error(e)
        return self._room_to_response(room, seat=seat)

    def request_rematch(self, code: str, seat: int) -> RematchResponse | ErrorResponse:
        try:
            started = self.room_manager.request_rematch(code, seat)
            room = self.room_manager.get_room(code)
        except RoomError as e:
            return self._error(e)
        return RematchResponse(
            room_code=room.code,
            started=started,
            room=self._room_to_response(room, seat=None),
        )

    def leave_room(self, code: str, seat: int) -> LeaveRoomResponse | ErrorResponse:
        try:
            room = self.room_manager.leave_room(code, seat)
        except RoomError as e:
            return self._error(e)
        return LeaveRoomResponse(
            success=True,
            room_code=code.upper(),
            room_deleted=room is None,
        )

    def list_rooms(self) -> list[str]:
        return self.room_manager.list_rooms()

    def cleanup_stale_rooms(self, max_age_seconds: int) -> list[str]:
        return self.room_manager.cleanup_stale_rooms(max_age_seconds)

    # =========================================================================
    # Game
    # =========================================================================

    def get_game_state(self, code: str, seat: int) -> GameStateView | ErrorResponse:
        """Get the redacted game state for a seat."""
        try:
            return self.seat_state(code, seat)
        except RoomError as e:
            return self._error(e)

    def get_valid_actions(self, code: str, seat: int) -> ValidActionsResponse | ErrorResponse:
        try:
            room = self.room_manager.get_room(code)
            # get_view performs the seat and started checks
            self.room_manager.get_view(code, seat)
        except RoomError as e:
            return self._error(e)

        actions = legal_actions(room.game_state, seat)
        return ValidActionsResponse(
            room_code=room.code,
            seat=seat,
            actions=[action.to_dict() for action in actions],
            count=len(actions),
        )

    def submit_action(
        self, code: str, seat: int, action: Action | Mapping[str, Any]
    ) -> ActionResponse | ErrorResponse:
        """
        Apply an action for a seat.

        Accepts an engine Action or a raw transport record (WebSocket path).
        """
        try:
            result = self.room_manager.submit_action(code, seat, action)
        except RoomError as e:
            return self._error(e)

        if not result.success:
            return ErrorResponse(
                error=result.error or "Invalid action",
                error_code=ErrorCode.INVALID_ACTION,
                details={"reason": result.error_code.value if result.error_code else None},
            )

        return ActionResponse(
            success=True,
            state_changes=result.state_changes,
            game_state=self.seat_state(code, seat),
        )

    def get_scores(self, code: str) -> ScoreResponse | ErrorResponse:
        try:
            room = self.room_manager.get_room(code)
        except RoomError as e:
            return self._error(e)
        if room.game_state is None:
            return ErrorResponse(error="No active game", error_code=ErrorCode.GAME_NOT_STARTED)

        winner = get_winner(room.game_state)
        return ScoreResponse(
            room_code=room.code,
            scores=calculate_scores(room.game_state) if winner else [],
            game_over=winner is not None,
            winner=self._winner_to_view(winner),
        )

    # =========================================================================
    # Conversion helpers
    # =========================================================================

    def seat_state(self, code: str, seat: int) -> GameStateView:
        """
        The redacted state for one seat.

        Raises RoomError; used directly by the WebSocket broadcaster.
        """
        room = self.room_manager.get_room(code)
        view = self.room_manager.get_view(code, seat)
        # Scored on the canonical state: the view hides starting cup colors
        winner = get_winner(room.game_state)
        return self.build_game_state(room.code, seat, view, winner)

    def build_game_state(
        self, code: str, seat: int, view: GameState, winner: WinnerResult | None = None
    ) -> GameStateView:
        """Convert an already-redacted engine state to its API model."""
        return GameStateView(
            room_code=code,
            seat=seat,
            phase=view.phase.value,
            current_player_index=view.current_player_idx,
            turn_number=view.turn_number,
            deck_count=len(view.deck),
            discard_pile=self._cards(view.discard_pile),
            players=[
                self._player_to_view(player, i, seat, view)
                for i, player in enumerate(view.players)
            ],
            mandalas=[
                MandalaView(
                    index=i,
                    mountain=self._cards(mandala.mountain),
                    player_fields=[self._cards(f) for f in mandala.fields],
                )
                for i, mandala in enumerate(view.mandalas)
            ],
            destruction=(
                DestructionView(
                    mandala_index=view.destruction.mandala_index,
                    current_claimer_index=view.destruction.current_claimer_index,
                    remaining_colors=list(view.destruction.remaining_colors),
                )
                if view.destruction else None
            ),
            end_game_trigger=view.end_game_trigger.value if view.end_game_trigger else None,
            winner=self._winner_to_view(winner),
        )

    def _player_to_view(
        self, player: PlayerState, index: int, seat: int, view: GameState
    ) -> PlayerView:
        visible_score = 0
        for card in player.cup:
            slot = None if card.is_hidden else player.river_index(card.color)
            if slot is not None:
                visible_score += slot + 1

        return PlayerView(
            player_id=player.player_id,
            is_you=index == seat,
            is_current_turn=index == view.current_player_idx,
            hand=self._cards(player.hand),
            hand_count=len(player.hand),
            cup=self._cards(player.cup),
            cup_count=len(player.cup),
            river=list(player.river),
            river_cards=self._cards(player.river_cards),
            visible_score=visible_score,
        )

    def _winner_to_view(self, winner: WinnerResult | None) -> WinnerView | None:
        if winner is None:
            return None
        return WinnerView(
            winner_id=winner.winner_id,
            winner_index=winner.winner_index,
            scores=list(winner.scores),
            tie_break=winner.tie_break,
        )

    def _cards(self, cards: list[Card]) -> list[CardView]:
        return [CardView(card_id=card.card_id, color=card.color) for card in cards]

    def _room_to_response(self, room: Room, seat: int | None) -> RoomResponse:
        return RoomResponse(
            code=room.code,
            seat=seat,
            players=room.player_names(),
            started=room.game_state is not None,
            game_over=room.is_game_over,
            games_played=room.games_played,
        )

    def _error(self, error: RoomError) -> ErrorResponse:
        try:
            code = ErrorCode(error.error_code)
        except ValueError:
            logger.error(f"Unmapped room error code: {error.error_code}")
            code = ErrorCode.INTERNAL_ERROR
        return ErrorResponse(error=error.message, error_code=code)
