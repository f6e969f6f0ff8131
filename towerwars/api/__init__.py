"""
API Module - Client interface.

Exposes the engine to browser clients over socket.io:
1. Create or join a room by code
2. Host sets options and starts the game
3. Players submit actions on their turn
4. Every accepted change is broadcast to the whole room

All state is room-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateRoomRequest,
    JoinRoomRequest,
    GameActionRequest,
    RoomOptionsModel,
    # Responses
    RoomJoinedResponse,
    GameUpdate,
    DisconnectResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    Banner,
    CardInfo,
    ErrorCode,
    GameStateSnapshot,
    PlayerInfo,
    RoomInfo,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateRoomRequest",
    "JoinRoomRequest",
    "GameActionRequest",
    "RoomOptionsModel",
    # Responses
    "RoomJoinedResponse",
    "GameUpdate",
    "DisconnectResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "Banner",
    "CardInfo",
    "ErrorCode",
    "GameStateSnapshot",
    "PlayerInfo",
    "RoomInfo",
    # Service
    "APIService",
    "create_app",
]
