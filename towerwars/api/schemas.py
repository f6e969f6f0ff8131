"""
Pydantic Schemas for API - Wire contract between clients and the engine.

These models are the only shapes that leave the server. Game state is
projected into them field by field, so internal data (deck order, the
random source, live object references) never reaches a client.

Request models accept both snake_case and the camelCase keys sent by the
browser client (targetId, pactEnabled, pactBreach). Only requests are
camelCase-tolerant: every outbound payload (responses, broadcasts and
snapshots) is serialized with snake_case field names.

Error Codes:
- EMPTY_NAME, ROOM_NOT_FOUND, GAME_ALREADY_STARTED, ROOM_FULL,
  ALREADY_IN_ROOM, NOT_IN_ROOM, NOT_HOST, NOT_ENOUGH_PLAYERS: room errors
- GAME_ENDED, NOT_YOUR_TURN, NO_CARD_DRAWN, UNKNOWN_PLAYER, NO_ACTIVE_PACT,
  INVALID_TARGET, PACT_BLOCKS_ATTACK, PACT_NOT_ALLOWED,
  INVALID_PACT_TARGET, UNKNOWN_ACTION: action errors
- VALIDATION_ERROR: malformed request payload
"""

from __future__ import annotations
from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field

from ..engine_core.state import Card, GameState, LogEntry, Pact, PactBreach, PlayerState
from ..session.manager import Room, RoomOptions


API_VERSION = "v1"


# =============================================================================
# Enums
# =============================================================================

class PactBreachPolicy(str, Enum):
    BLOCK = "block"
    PENALTY = "penalty"


class ErrorCode(str, Enum):
    """Structured error codes."""
    # Room errors
    EMPTY_NAME = "EMPTY_NAME"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    ROOM_FULL = "ROOM_FULL"
    ALREADY_IN_ROOM = "ALREADY_IN_ROOM"
    NOT_IN_ROOM = "NOT_IN_ROOM"
    NOT_HOST = "NOT_HOST"
    NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
    # Action errors
    GAME_ENDED = "GAME_ENDED"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    NO_CARD_DRAWN = "NO_CARD_DRAWN"
    UNKNOWN_PLAYER = "UNKNOWN_PLAYER"
    NO_ACTIVE_PACT = "NO_ACTIVE_PACT"
    INVALID_TARGET = "INVALID_TARGET"
    PACT_BLOCKS_ATTACK = "PACT_BLOCKS_ATTACK"
    PACT_NOT_ALLOWED = "PACT_NOT_ALLOWED"
    INVALID_PACT_TARGET = "INVALID_PACT_TARGET"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    # Transport
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """A card as clients see it. Virtual cards have no suit."""
    value: int
    suit: Optional[str] = None
    virtual: bool = False

    @classmethod
    def from_card(cls, card: Optional[Card]) -> Optional[CardInfo]:
        if card is None:
            return None
        if card.is_physical:
            return cls(value=card.value, suit=card.suit.value)
        return cls(value=card.value, virtual=True)


class PactInfo(BaseModel):
    with_id: str
    turns_left: int
    role: str

    @classmethod
    def from_pact(cls, pact: Optional[Pact]) -> Optional[PactInfo]:
        if pact is None:
            return None
        return cls(with_id=pact.with_id, turns_left=pact.turns_left, role=pact.role.value)


class PlayerInfo(BaseModel):
    """Player information for display."""
    player_id: str
    name: str
    index: int
    towers: list[CardInfo] = Field(default_factory=list)
    tower_total: int = 0
    defense: Optional[CardInfo] = None
    charged: Optional[CardInfo] = None
    eliminated: bool = False
    disconnected: bool = False
    pact: Optional[PactInfo] = None
    is_current_turn: bool = False

    @classmethod
    def from_player(cls, player: PlayerState, is_current_turn: bool = False) -> PlayerInfo:
        return cls(
            player_id=player.player_id,
            name=player.name,
            index=player.index,
            towers=[CardInfo.from_card(c) for c in player.towers],
            tower_total=player.tower_total,
            defense=CardInfo.from_card(player.defense),
            charged=CardInfo.from_card(player.charged),
            eliminated=player.eliminated,
            disconnected=player.disconnected,
            pact=PactInfo.from_pact(player.pact),
            is_current_turn=is_current_turn,
        )


class LogEntryInfo(BaseModel):
    message: str
    kind: str
    timestamp: float

    @classmethod
    def from_entry(cls, entry: LogEntry) -> LogEntryInfo:
        return cls(message=entry.message, kind=entry.kind.value, timestamp=entry.timestamp)


class RoomOptionsModel(BaseModel):
    """Room options as sent and received over the wire."""
    model_config = ConfigDict(populate_by_name=True)

    pact_enabled: bool = Field(False, alias="pactEnabled")
    pact_breach: PactBreachPolicy = Field(PactBreachPolicy.BLOCK, alias="pactBreach")

    def to_options(self) -> RoomOptions:
        return RoomOptions(
            pact_enabled=self.pact_enabled,
            pact_breach=PactBreach(self.pact_breach.value),
        )


class RoomPlayerInfo(BaseModel):
    id: str
    name: str
    index: int


class RoomInfo(BaseModel):
    """Room roster and options. Never includes the game state."""
    code: str
    host: str
    players: list[RoomPlayerInfo] = Field(default_factory=list)
    options: RoomOptionsModel
    started: bool = False
    api_version: str = API_VERSION

    @classmethod
    def from_room(cls, room: Room) -> RoomInfo:
        return cls(
            code=room.code,
            host=room.host_id,
            players=[RoomPlayerInfo(id=p.player_id, name=p.name, index=p.index) for p in room.players],
            options=RoomOptionsModel(
                pact_enabled=room.options.pact_enabled,
                pact_breach=PactBreachPolicy(room.options.pact_breach.value),
            ),
            started=room.started,
        )


class GameStateSnapshot(BaseModel):
    """
    Complete game state for display.

    Deck and discard are sent as counts only.
    """
    phase: str
    turn: int
    turn_number: int
    current_player_id: Optional[str] = None
    drawn_card: Optional[CardInfo] = None
    deck_size: int = 0
    discard_size: int = 0
    pact_enabled: bool = False
    pact_breach: PactBreachPolicy = PactBreachPolicy.BLOCK
    players: list[PlayerInfo] = Field(default_factory=list)
    log: list[LogEntryInfo] = Field(default_factory=list)
    winner_id: Optional[str] = None
    api_version: str = API_VERSION

    @classmethod
    def from_state(cls, state: GameState) -> GameStateSnapshot:
        current_id = state.current_player.player_id
        return cls(
            phase=state.phase.value,
            turn=state.turn,
            turn_number=state.turn_number,
            current_player_id=current_id,
            drawn_card=CardInfo.from_card(state.drawn_card),
            deck_size=len(state.deck),
            discard_size=len(state.discard),
            pact_enabled=state.pact_enabled,
            pact_breach=PactBreachPolicy(state.pact_breach.value),
            players=[PlayerInfo.from_player(p, p.player_id == current_id) for p in state.players],
            log=[LogEntryInfo.from_entry(e) for e in state.log],
            winner_id=state.winner_id,
        )


class Banner(BaseModel):
    """Narration payload for the action that just happened."""
    model_config = ConfigDict(extra="allow")

    type: str


# =============================================================================
# Request Models
# =============================================================================

class CreateRoomRequest(BaseModel):
    name: str = Field("", description="Display name of the host")
    options: Optional[RoomOptionsModel] = None


class JoinRoomRequest(BaseModel):
    code: str = Field("", description="6-character room code")
    name: str = Field("", description="Display name")


class GameActionRequest(BaseModel):
    """One move. type is attack, defend, charge, discard, pact or break_pact."""
    model_config = ConfigDict(populate_by_name=True)

    type: str
    target_id: Optional[str] = Field(None, alias="targetId")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field(API_VERSION, description="API version")


class RoomJoinedResponse(BaseModel):
    """Sent to the player who created or joined a room."""
    code: str
    player_index: int
    room: RoomInfo
    api_version: str = API_VERSION


class GameUpdate(BaseModel):
    """Broadcast after game start and after every accepted action."""
    room_code: str
    state: GameStateSnapshot
    banner: Optional[Banner] = None
    api_version: str = API_VERSION


class DisconnectResponse(BaseModel):
    """What to broadcast after a player dropped."""
    room_code: Optional[str] = None
    room_removed: bool = False
    room: Optional[RoomInfo] = None
    update: Optional[GameUpdate] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    rooms: int = 0
