"""
ASGI Application - socket.io game server plus a small REST surface.

Socket.IO events (client -> server):
    create_room     {name, options?}        -> room_created, room_update
    join_room       {code, name}            -> room_joined, room_update
    update_options  {pactEnabled, pactBreach} -> room_update      (host only)
    start_game      {}                      -> game_start         (host only)
    game_action     {type, targetId?}       -> game_state
    disconnect                              -> game_state | room_update

Failures are sent only to the requester as an `error` event carrying an
ErrorResponse. Broadcasts go to every socket in the room.

REST:
    GET /health                 Health check
    GET /api/v1/rooms/{code}    Room roster and options
"""

from __future__ import annotations
from contextlib import asynccontextmanager, suppress
from typing import Any, Union
import asyncio
import logging
import os

from pydantic import ValidationError

logger = logging.getLogger(__name__)

# Environment configuration
TOWERWARS_ENV = os.getenv("TOWERWARS_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
ROOM_TTL_SECONDS = float(os.getenv("TOWERWARS_ROOM_TTL", "3600"))
REAP_INTERVAL_SECONDS = 60.0


def _env_seed() -> int | None:
    seed = os.getenv("TOWERWARS_SEED")
    return int(seed) if seed else None


def create_app(service=None):
    """
    Create the ASGI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        socket.io ASGI app wrapping the FastAPI application
    """
    import socketio
    from fastapi import FastAPI
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse

    from .. import __version__
    from ..session.manager import RoomManager
    from .service import APIService
    from .schemas import (
        CreateRoomRequest,
        JoinRoomRequest,
        GameActionRequest,
        RoomOptionsModel,
        ErrorResponse,
        ErrorCode,
        HealthResponse,
        RoomInfo,
    )

    api_service = service or APIService(room_manager=RoomManager(random_seed=_env_seed()))

    # =========================================================================
    # Lifespan: reap finished rooms in the background
    # =========================================================================

    async def reap_loop():
        while True:
            await asyncio.sleep(REAP_INTERVAL_SECONDS)
            reaped = api_service.reap_finished_rooms(ROOM_TTL_SECONDS)
            if reaped:
                logger.info("Reaped %d finished room(s)", len(reaped))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Tower Wars server starting (%s)", TOWERWARS_ENV)
        reaper = asyncio.create_task(reap_loop())
        yield
        reaper.cancel()
        with suppress(asyncio.CancelledError):
            await reaper
        logger.info("Tower Wars server shutting down")

    app = FastAPI(
        title="Tower Wars API",
        description="Multiplayer tower card battle. Gameplay runs over socket.io.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # REST Endpoints
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="towerwars",
            version=__version__,
            rooms=len(api_service.room_manager),
        )

    @app.get(
        "/api/v1/rooms/{code}",
        response_model=RoomInfo,
        responses={404: {"model": ErrorResponse}},
        tags=["Rooms"],
        summary="Get room roster and options",
    )
    async def get_room(code: str) -> Union[RoomInfo, JSONResponse]:
        response = api_service.get_room(code)
        if isinstance(response, ErrorResponse):
            return JSONResponse(status_code=404, content=response.model_dump(mode="json"))
        return response

    # =========================================================================
    # Socket.IO Setup
    # =========================================================================

    sio = socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins="*" if ALLOWED_ORIGINS == ["*"] else ALLOWED_ORIGINS,
        logger=False,
        engineio_logger=False,
    )

    async def send_error(sid: str, error: ErrorResponse):
        logger.warning("Rejected request from %s: %s", sid, error.error_code.value)
        await sio.emit("error", error.model_dump(mode="json"), to=sid)

    def validation_error(e: ValidationError) -> ErrorResponse:
        return ErrorResponse(
            error="Invalid request",
            error_code=ErrorCode.VALIDATION_ERROR,
            details={"errors": e.errors(include_url=False, include_context=False)},
        )

    async def broadcast(room_code: str, event: str, payload: Any):
        await sio.emit(event, payload.model_dump(mode="json"), room=room_code)

    @sio.event
    async def connect(sid, environ, auth=None):
        logger.debug("Client connected: %s", sid)

    @sio.on("create_room")
    async def create_room(sid, data):
        try:
            request = CreateRoomRequest.model_validate(data or {})
        except ValidationError as e:
            return await send_error(sid, validation_error(e))

        response = api_service.create_room(sid, request)
        if isinstance(response, ErrorResponse):
            return await send_error(sid, response)
        await sio.enter_room(sid, response.code)
        await sio.emit("room_created", response.model_dump(mode="json"), to=sid)
        await broadcast(response.code, "room_update", response.room)

    @sio.on("join_room")
    async def join_room(sid, data):
        try:
            request = JoinRoomRequest.model_validate(data or {})
        except ValidationError as e:
            return await send_error(sid, validation_error(e))

        response = api_service.join_room(sid, request)
        if isinstance(response, ErrorResponse):
            return await send_error(sid, response)
        await sio.enter_room(sid, response.code)
        await sio.emit("room_joined", response.model_dump(mode="json"), to=sid)
        await broadcast(response.code, "room_update", response.room)

    @sio.on("update_options")
    async def update_options(sid, data):
        try:
            options = RoomOptionsModel.model_validate(data or {})
        except ValidationError as e:
            return await send_error(sid, validation_error(e))

        response = api_service.update_options(sid, options)
        if isinstance(response, ErrorResponse):
            return await send_error(sid, response)
        await broadcast(response.code, "room_update", response)

    @sio.on("start_game")
    async def start_game(sid, data=None):
        response = api_service.start_game(sid)
        if isinstance(response, ErrorResponse):
            return await send_error(sid, response)
        await broadcast(response.room_code, "game_start", response)

    @sio.on("game_action")
    async def game_action(sid, data):
        try:
            request = GameActionRequest.model_validate(data or {})
        except ValidationError as e:
            return await send_error(sid, validation_error(e))

        response = api_service.submit_action(sid, request)
        if isinstance(response, ErrorResponse):
            return await send_error(sid, response)
        await broadcast(response.room_code, "game_state", response)

    @sio.event
    async def disconnect(sid, *args):
        logger.debug("Client disconnected: %s", sid)
        response = api_service.disconnect(sid)
        if response.update is not None:
            await broadcast(response.room_code, "game_state", response.update)
        elif response.room is not None:
            await broadcast(response.room_code, "room_update", response.room)

    return socketio.ASGIApp(sio, other_asgi_app=app)
