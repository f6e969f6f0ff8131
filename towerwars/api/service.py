"""
API Service - Business logic layer between the transport and the engine.

The service:
1. Translates requests into RoomManager and Reducer calls
2. Projects rooms and game states into wire schemas
3. Turns room and action errors into ErrorResponse

This layer is framework-agnostic (used by the socket.io server, the CLI
and the tests). Every method runs to completion synchronously, so one
request never observes another half-applied.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .schemas import (
    # Requests
    CreateRoomRequest,
    JoinRoomRequest,
    GameActionRequest,
    RoomOptionsModel,
    # Responses
    ErrorResponse,
    RoomJoinedResponse,
    GameUpdate,
    DisconnectResponse,
    # Shared
    Banner,
    GameStateSnapshot,
    RoomInfo,
    ErrorCode,
)
from ..engine_core.action import Action, ActionResult
from ..engine_core.reducer import Reducer
from ..session.manager import Room, RoomError, RoomManager

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        created = service.create_room("sid-1", CreateRoomRequest(name="Ana"))
        service.join_room("sid-2", JoinRoomRequest(code=created.code, name="Bo"))
        update = service.start_game("sid-1")
        update = service.submit_action("sid-1", GameActionRequest(type="defend"))
    """
    room_manager: RoomManager = field(default_factory=RoomManager)
    reducer: Reducer = field(default_factory=Reducer)

    def create_room(
        self,
        player_id: str,
        request: CreateRoomRequest,
    ) -> RoomJoinedResponse | ErrorResponse:
        """Create a room with the requester as host (index 0)."""
        options = request.options.to_options() if request.options else None
        try:
            room = self.room_manager.create_room(player_id, request.name, options)
        except RoomError as e:
            return self._room_error(e)
        return RoomJoinedResponse(code=room.code, player_index=0, room=RoomInfo.from_room(room))

    def join_room(
        self,
        player_id: str,
        request: JoinRoomRequest,
    ) -> RoomJoinedResponse | ErrorResponse:
        """Join an existing room by code."""
        try:
            room = self.room_manager.join_room(request.code, player_id, request.name)
        except RoomError as e:
            return self._room_error(e)
        seat = room.get_player(player_id)
        return RoomJoinedResponse(code=room.code, player_index=seat.index, room=RoomInfo.from_room(room))

    def update_options(
        self,
        player_id: str,
        options: RoomOptionsModel,
    ) -> RoomInfo | ErrorResponse:
        """Change pact options. Host only, before start."""
        try:
            room = self.room_manager.update_options(player_id, options.to_options())
        except RoomError as e:
            return self._room_error(e)
        return RoomInfo.from_room(room)

    def start_game(self, player_id: str) -> GameUpdate | ErrorResponse:
        """Start the requester's room and return the opening snapshot."""
        try:
            room = self.room_manager.start_game(player_id)
        except RoomError as e:
            return self._room_error(e)
        return self._game_update(room)

    def submit_action(
        self,
        player_id: str,
        request: GameActionRequest,
    ) -> GameUpdate | ErrorResponse:
        """
        Apply one move to the requester's game.

        Success is meant for the whole room, failure only for the requester.
        """
        room = self.room_manager.room_of(player_id)
        if room is None or room.state is None:
            return ErrorResponse(
                error="You are not in a running game",
                error_code=ErrorCode.NOT_IN_ROOM,
            )

        action = Action.parse(player_id, request.type, request.target_id)
        result = self.reducer.apply(room.state, action)
        if not result.success:
            logger.debug("Rejected %s from %s: %s", request.type, player_id, result.error_code)
            return self._action_error(result)

        self.room_manager.mark_if_finished(room)
        return self._game_update(room, result)

    def disconnect(self, player_id: str) -> DisconnectResponse:
        """Handle a dropped connection and describe what to broadcast."""
        outcome = self.room_manager.disconnect(player_id)
        room = outcome.room
        if room is None:
            return DisconnectResponse()
        if outcome.room_removed:
            return DisconnectResponse(room_code=room.code, room_removed=True)
        if room.started:
            update = self._game_update(room) if outcome.state_changed else None
            return DisconnectResponse(room_code=room.code, update=update)
        return DisconnectResponse(room_code=room.code, room=RoomInfo.from_room(room))

    def get_room(self, code: str) -> RoomInfo | ErrorResponse:
        room = self.room_manager.get_room(code)
        if room is None:
            return ErrorResponse(error="Room not found", error_code=ErrorCode.ROOM_NOT_FOUND)
        return RoomInfo.from_room(room)

    def reap_finished_rooms(self, max_age_seconds: float) -> list[str]:
        return self.room_manager.reap_finished_rooms(max_age_seconds)

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _game_update(self, room: Room, result: ActionResult | None = None) -> GameUpdate:
        banner = Banner(**result.banner) if result and result.banner else None
        return GameUpdate(
            room_code=room.code,
            state=GameStateSnapshot.from_state(room.state),
            banner=banner,
        )

    def _room_error(self, error: RoomError) -> ErrorResponse:
        return ErrorResponse(error=error.message, error_code=ErrorCode(error.error_code.value))

    def _action_error(self, result: ActionResult) -> ErrorResponse:
        return ErrorResponse(error=result.error, error_code=ErrorCode(result.error_code.value))
