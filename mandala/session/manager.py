"""
Room Manager - Creates and manages two-player game rooms.

LIFECYCLE:
1. A player creates a room and receives a 4-letter code
2. A second player joins with the code; the game starts immediately
3. Players submit actions for their seat; the manager checks turn
   ownership and hands the action to the engine
4. After the game ends both players may ask for a rematch; seats swap
   and a fresh game starts
5. Rooms are removed when everybody leaves, or by cleanup_stale_rooms()

The registry is an explicit object owned by whoever serves the rooms.
The engine holds no global state. Nothing is persisted.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping
import logging
import random
import time

from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import dispatch
from ..engine_core.setup import create_game
from ..engine_core.state import GamePhase, GameState, NUM_PLAYERS
from ..engine_core.view import get_player_view

logger = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ"  # no I or O
ROOM_CODE_LENGTH = 4


class RoomError(Exception):
    """A room operation could not be carried out."""

    def __init__(self, message: str, error_code: str):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


@dataclass
class RoomPlayer:
    """A seat in a room (lobby-level; in-game state lives in GameState)."""
    name: str
    connected: bool = True
    wants_rematch: bool = False
    disconnected_at: float | None = None


@dataclass
class Room:
    """
    A two-seat room.

    Contains:
    - The join code
    - Seated players (index == seat == player index in the game)
    - The canonical game state once both seats are filled
    """
    code: str
    created_at: float
    players: list[RoomPlayer] = field(default_factory=list)
    game_state: GameState | None = None
    games_played: int = 0

    @property
    def is_full(self) -> bool:
        return len(self.players) >= NUM_PLAYERS

    @property
    def is_game_over(self) -> bool:
        return self.game_state is not None and self.game_state.phase == GamePhase.ENDED

    def player_names(self) -> list[str]:
        return [p.name for p in self.players]

    def seat_of(self, player: RoomPlayer) -> int | None:
        """Current seat of a player, tracked by identity across rematch swaps and leaves."""
        for seat, seated in enumerate(self.players):
            if seated is player:
                return seat
        return None

    def is_seat_to_act(self, seat: int) -> bool:
        """The current player may act; during destruction so may the current claimer."""
        state = self.game_state
        if state is None:
            return False
        if state.current_player_idx == seat:
            return True
        return (
            state.phase == GamePhase.DESTROYING
            and state.destruction is not None
            and state.destruction.current_claimer_index == seat
        )


class RoomManager:
    """
    Manages game rooms.

    Responsibilities:
    - Create rooms with unique codes
    - Seat players and start games
    - Serialize actions per room through the engine
    - Clean up abandoned rooms

    Callers must not submit two actions for the same room concurrently.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rooms: dict[str, Room] = {}
        self._rng = rng or random.Random()

    # =========================================================================
    # Room lifecycle
    # =========================================================================

    def create_room(self, name: str | None = None) -> Room:
        """Create a room seated with its creator (seat 0)."""
        code = self._generate_code()
        room = Room(
            code=code,
            created_at=time.time(),
            players=[RoomPlayer(name=name or "Player 1")],
        )
        self._rooms[code] = room
        logger.info(f"Room {code} created by {room.players[0].name}", extra={"room_code": code})
        return room

    def join_room(self, code: str, name: str | None = None) -> Room:
        """Take the second seat and start the game."""
        room = self.get_room(code)

        if room.is_full:
            raise RoomError("Room is full", "ROOM_FULL")
        if room.game_state is not None:
            raise RoomError("Game already in progress", "GAME_IN_PROGRESS")

        player_name = name or "Player 2"
        if player_name == room.players[0].name:
            player_name = f"{player_name} (2)"
        room.players.append(RoomPlayer(name=player_name))

        self._start_game(room)
        logger.info(f"{player_name} joined room {room.code}", extra={"room_code": room.code})
        return room

    def leave_room(self, code: str, seat: int) -> Room | None:
        """
        Remove a player from the room.

        Any game in progress is abandoned. Returns the room, or None if it
        was deleted because nobody is left.
        """
        room = self.get_room(code)
        self._check_seat(room, seat)

        room.players.pop(seat)
        room.game_state = None
        for player in room.players:
            player.wants_rematch = False

        if not room.players:
            del self._rooms[room.code]
            logger.info(f"Room {room.code} deleted", extra={"room_code": room.code})
            return None
        return room

    def mark_disconnected(self, code: str, seat: int) -> None:
        """Keep the seat (to allow reconnecting) but record the drop."""
        room = self._rooms.get(code.upper())
        if room is None or not 0 <= seat < len(room.players):
            return
        room.players[seat].connected = False
        room.players[seat].disconnected_at = time.time()

    def mark_connected(self, code: str, seat: int) -> None:
        room = self.get_room(code)
        self._check_seat(room, seat)
        room.players[seat].connected = True
        room.players[seat].disconnected_at = None

    def request_rematch(self, code: str, seat: int) -> bool:
        """
        Record a rematch request.

        Returns True if this request started the new game. Seats are
        swapped so the other player moves first.
        """
        room = self.get_room(code)
        self._check_seat(room, seat)
        if not room.is_full or not room.is_game_over:
            raise RoomError("Cannot start rematch", "REMATCH_UNAVAILABLE")

        room.players[seat].wants_rematch = True
        if not all(p.wants_rematch for p in room.players):
            return False

        room.players = [room.players[1], room.players[0]]
        for player in room.players:
            player.wants_rematch = False
        self._start_game(room)
        logger.info(f"Rematch started in room {room.code}", extra={"room_code": room.code})
        return True

    def cleanup_stale_rooms(self, max_age_seconds: int = 2 * 60 * 60, now: float | None = None) -> list[str]:
        """
        Remove rooms older than max_age_seconds.

        Called periodically by the owner. Returns the removed codes.
        """
        current_time = now if now is not None else time.time()
        stale = [
            code for code, room in self._rooms.items()
            if current_time - room.created_at > max_age_seconds
        ]
        for code in stale:
            del self._rooms[code]
            logger.info(f"Cleaned up room {code}", extra={"room_code": code})
        return stale

    # =========================================================================
    # Game access
    # =========================================================================

    def get_room(self, code: str) -> Room:
        room = self._rooms.get((code or "").upper())
        if room is None:
            raise RoomError("Room not found", "ROOM_NOT_FOUND")
        return room

    def list_rooms(self) -> list[str]:
        return list(self._rooms)

    def submit_action(self, code: str, seat: int, action: Action | Mapping[str, Any]) -> ActionResult:
        """
        Apply an action on behalf of a seat.

        Rule violations come back as a failed ActionResult; room-level
        problems (no game, wrong seat, not your turn) raise RoomError.
        """
        room = self.get_room(code)
        self._check_seat(room, seat)
        if room.game_state is None:
            raise RoomError("No active game", "GAME_NOT_STARTED")
        if not room.is_seat_to_act(seat):
            raise RoomError("Not your turn", "NOT_YOUR_TURN")

        result = dispatch(room.game_state, action, self._rng)
        if not result.success:
            logger.debug(f"Seat {seat} action rejected: {result.error}", extra={"room_code": room.code})
            return result

        room.game_state = result.new_state
        if room.game_state.phase == GamePhase.ENDED:
            logger.info(f"Game over in room {room.code}", extra={"room_code": room.code})
        return result

    def get_view(self, code: str, seat: int) -> GameState:
        """The redacted state a seat is allowed to see."""
        room = self.get_room(code)
        self._check_seat(room, seat)
        if room.game_state is None:
            raise RoomError("No active game", "GAME_NOT_STARTED")
        return get_player_view(room.game_state, seat)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _start_game(self, room: Room) -> None:
        names = room.player_names()
        room.game_state = create_game(names[0], names[1], rng=self._rng)
        room.games_played += 1

    def _check_seat(self, room: Room, seat: int) -> None:
        if not 0 <= seat < len(room.players):
            raise RoomError(f"Invalid seat: {seat}", "INVALID_SEAT")

    def _generate_code(self) -> str:
        while True:
            code = "".join(self._rng.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))
            if code not in self._rooms:
                return code
