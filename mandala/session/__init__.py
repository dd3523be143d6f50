"""
Session Module - Manages ephemeral two-player rooms.

A room represents one table:
- Created when a player asks for a code
- Holds the canonical game state once the second player joins
- Supports rematches with swapped seats
- Destroyed when everybody leaves or it goes stale

Rooms are EPHEMERAL: nothing is persisted.
"""

from .manager import RoomManager, Room, RoomPlayer, RoomError

__all__ = [
    "RoomManager",
    "Room",
    "RoomPlayer",
    "RoomError",
]
