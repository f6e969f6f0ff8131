"""
Session Module - Manages ephemeral game rooms.

A room represents one play-through of a game:
- Created when a player asks for one (gets a short code)
- Holds the seated players, options and the game state
- Removed when it empties before start, or reaped after the game ends

Rooms are EPHEMERAL: nothing is persisted.
"""

from .manager import (
    DisconnectOutcome,
    Room,
    RoomError,
    RoomErrorCode,
    RoomManager,
    RoomOptions,
    RoomPlayer,
)

__all__ = [
    "DisconnectOutcome",
    "Room",
    "RoomError",
    "RoomErrorCode",
    "RoomManager",
    "RoomOptions",
    "RoomPlayer",
]
