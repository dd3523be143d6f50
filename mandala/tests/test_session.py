"""
Tests for room management.

Tests:
- Room codes
- Joining and starting games
- Turn ownership
- Rematch, leave and cleanup
"""

import random

import pytest

from ..engine_core.action import ClaimColor, GrowField
from ..engine_core.action_generator import legal_actions
from ..engine_core.state import GamePhase, HIDDEN_CARD
from ..session import RoomError, RoomManager
from ..session.manager import ROOM_CODE_ALPHABET
from .conftest import card, make_state


@pytest.fixture
def manager():
    return RoomManager(rng=random.Random(1))


@pytest.fixture
def started_room(manager):
    room = manager.create_room("Ana")
    manager.join_room(room.code, "Ben")
    return room


class TestRoomCreation:

    def test_code_format(self, manager):
        room = manager.create_room("Ana")

        assert len(room.code) == 4
        assert all(ch in ROOM_CODE_ALPHABET for ch in room.code)
        assert "I" not in ROOM_CODE_ALPHABET and "O" not in ROOM_CODE_ALPHABET

    def test_codes_are_unique(self, manager):
        codes = {manager.create_room(f"p{i}").code for i in range(50)}
        assert len(codes) == 50

    def test_creator_takes_seat_zero(self, manager):
        room = manager.create_room("Ana")

        assert room.player_names() == ["Ana"]
        assert room.game_state is None

    def test_default_name(self, manager):
        assert manager.create_room().players[0].name == "Player 1"


class TestJoin:

    def test_join_starts_game(self, started_room):
        assert started_room.player_names() == ["Ana", "Ben"]
        assert started_room.game_state is not None
        assert started_room.game_state.phase == GamePhase.PLAYING
        assert [p.player_id for p in started_room.game_state.players] == ["Ana", "Ben"]

    def test_join_is_case_insensitive(self, manager):
        room = manager.create_room("Ana")
        manager.join_room(room.code.lower(), "Ben")
        assert room.is_full

    def test_room_not_found(self, manager):
        with pytest.raises(RoomError) as exc:
            manager.join_room("ZZZZ", "Ben")
        assert exc.value.error_code == "ROOM_NOT_FOUND"
        assert exc.value.message == "Room not found"

    def test_room_full(self, manager, started_room):
        with pytest.raises(RoomError) as exc:
            manager.join_room(started_room.code, "Cy")
        assert exc.value.error_code == "ROOM_FULL"

    def test_duplicate_name_is_disambiguated(self, manager):
        room = manager.create_room("Ana")
        manager.join_room(room.code, "Ana")
        assert room.player_names() == ["Ana", "Ana (2)"]


class TestSubmitAction:

    def test_current_player_can_act(self, manager, started_room):
        state = started_room.game_state
        action = legal_actions(state, 0)[0]

        result = manager.submit_action(started_room.code, 0, action)

        assert result.success
        assert started_room.game_state is result.new_state
        assert started_room.game_state.current_player_idx == 1

    def test_not_your_turn(self, manager, started_room):
        action = legal_actions(started_room.game_state, 0)[0]

        with pytest.raises(RoomError) as exc:
            manager.submit_action(started_room.code, 1, action)
        assert exc.value.error_code == "NOT_YOUR_TURN"

    def test_rule_violation_is_a_failed_result(self, manager, started_room):
        before = started_room.game_state

        result = manager.submit_action(started_room.code, 0, {"type": "build_mountain", "cardId": "x", "mandalaIndex": 0})

        assert not result.success
        assert started_room.game_state is before

    def test_raw_records_accepted(self, manager, started_room):
        action = legal_actions(started_room.game_state, 0)[0]

        result = manager.submit_action(started_room.code, 0, action.to_dict())

        assert result.success

    def test_invalid_seat(self, manager, started_room):
        with pytest.raises(RoomError) as exc:
            manager.submit_action(started_room.code, 2, {"type": "claim_color", "color": "red"})
        assert exc.value.error_code == "INVALID_SEAT"

    def test_game_not_started(self, manager):
        room = manager.create_room("Ana")
        with pytest.raises(RoomError) as exc:
            manager.submit_action(room.code, 0, {"type": "claim_color", "color": "red"})
        assert exc.value.error_code == "GAME_NOT_STARTED"

    def test_claimer_may_act_during_destruction(self, manager, started_room, nearly_complete_state):
        nearly_complete_state.players[0].player_id = "Ana"
        nearly_complete_state.players[1].player_id = "Ben"
        started_room.game_state = nearly_complete_state

        manager.submit_action(started_room.code, 0, GrowField(("green-54",), 0))
        assert started_room.game_state.phase == GamePhase.DESTROYING

        result = manager.submit_action(started_room.code, 0, ClaimColor("red"))
        assert result.success

        with pytest.raises(RoomError):
            manager.submit_action(started_room.code, 0, ClaimColor("orange"))
        assert manager.submit_action(started_room.code, 1, ClaimColor("orange")).success


class TestViews:

    def test_view_is_redacted_per_seat(self, manager, started_room):
        view = manager.get_view(started_room.code, 0)

        assert all(c == HIDDEN_CARD for c in view.players[1].hand)
        assert view.players[0].hand == started_room.game_state.players[0].hand


class TestRematch:

    def _end_game(self, room):
        room.game_state = make_state(
            cups=([card("red")], []),
            rivers=(["red"], []),
            phase=GamePhase.ENDED,
            player_ids=tuple(room.player_names()),
        )

    def test_rematch_needs_both_players(self, manager, started_room):
        self._end_game(started_room)

        assert manager.request_rematch(started_room.code, 0) is False
        assert started_room.game_state.phase == GamePhase.ENDED
        assert manager.request_rematch(started_room.code, 1) is True

    def test_rematch_swaps_seats(self, manager, started_room):
        self._end_game(started_room)

        manager.request_rematch(started_room.code, 0)
        manager.request_rematch(started_room.code, 1)

        assert started_room.player_names() == ["Ben", "Ana"]
        assert started_room.game_state.phase == GamePhase.PLAYING
        assert started_room.game_state.players[0].player_id == "Ben"
        assert started_room.games_played == 2
        assert not any(p.wants_rematch for p in started_room.players)

    def test_rematch_before_game_end(self, manager, started_room):
        with pytest.raises(RoomError) as exc:
            manager.request_rematch(started_room.code, 0)
        assert exc.value.error_code == "REMATCH_UNAVAILABLE"


class TestLeaveAndCleanup:

    def test_leave_abandons_game(self, manager, started_room):
        room = manager.leave_room(started_room.code, 0)

        assert room is started_room
        assert room.player_names() == ["Ben"]
        assert room.game_state is None

    def test_room_reopens_for_joining(self, manager, started_room):
        manager.leave_room(started_room.code, 1)
        manager.join_room(started_room.code, "Cy")

        assert started_room.player_names() == ["Ana", "Cy"]
        assert started_room.game_state is not None

    def test_last_player_leaving_deletes_room(self, manager, started_room):
        manager.leave_room(started_room.code, 1)
        assert manager.leave_room(started_room.code, 0) is None
        assert started_room.code not in manager.list_rooms()

    def test_disconnect_keeps_seat(self, manager, started_room):
        manager.mark_disconnected(started_room.code, 1)

        player = started_room.players[1]
        assert not player.connected
        assert player.disconnected_at is not None
        assert started_room.is_full

        manager.mark_connected(started_room.code, 1)
        assert player.connected

    def test_disconnect_unknown_room_is_ignored(self, manager):
        manager.mark_disconnected("ZZZZ", 0)

    def test_cleanup_stale_rooms(self, manager):
        old = manager.create_room("Ana")
        fresh = manager.create_room("Ben")
        old.created_at -= 3 * 60 * 60

        removed = manager.cleanup_stale_rooms(2 * 60 * 60)

        assert removed == [old.code]
        assert manager.list_rooms() == [fresh.code]

    def test_cleanup_with_explicit_clock(self, manager):
        room = manager.create_room("Ana")
        assert manager.cleanup_stale_rooms(60, now=room.created_at + 30) == []
        assert manager.cleanup_stale_rooms(60, now=room.created_at + 61) == [room.code]


class TestSeatTracking:

    def test_seat_follows_player_through_rematch(self, manager, started_room):
        ana, ben = started_room.players
        started_room.game_state = make_state(phase=GamePhase.ENDED, player_ids=("Ana", "Ben"))

        manager.request_rematch(started_room.code, 0)
        manager.request_rematch(started_room.code, 1)

        assert started_room.seat_of(ana) == 1
        assert started_room.seat_of(ben) == 0

    def test_seat_follows_player_through_leave(self, manager, started_room):
        ana, ben = started_room.players

        manager.leave_room(started_room.code, 0)

        assert started_room.seat_of(ben) == 0
        assert started_room.seat_of(ana) is None
