"""
Room Manager - Creates and manages game rooms.

LIFECYCLE:
1. A player creates a room -> gets a 6-character code, becomes host
2. Up to 3 more players join with the code
3. Host may change options until the game starts
4. Host starts the game -> the room owns a GameState from then on
5. Pre-start, a room disappears when its last player leaves
6. Finished games are reaped after a TTL (reap_finished_rooms)

PERSISTENCE RULES:
- Rooms live in memory only
- Each RoomManager owns its own rooms; there is no global registry
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import random
import time

from ..engine_core.setup import MAX_PLAYERS, MIN_PLAYERS, setup_game
from ..engine_core.state import GamePhase, GameState, PactBreach
from ..engine_core.turn import handle_disconnect

logger = logging.getLogger(__name__)


CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 6


class RoomErrorCode(Enum):
    EMPTY_NAME = "EMPTY_NAME"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    ROOM_FULL = "ROOM_FULL"
    ALREADY_IN_ROOM = "ALREADY_IN_ROOM"
    NOT_IN_ROOM = "NOT_IN_ROOM"
    NOT_HOST = "NOT_HOST"
    NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"


class RoomError(Exception):
    """A rejected room operation. The registry is left unchanged."""

    def __init__(self, error_code: RoomErrorCode, message: str):
        super().__init__(message)
        self.error_code = error_code
        self.message = message


@dataclass
class RoomOptions:
    pact_enabled: bool = False
    pact_breach: PactBreach = PactBreach.BLOCK


@dataclass
class RoomPlayer:
    player_id: str
    name: str
    index: int


@dataclass
class Room:
    """
    A room: seating, options and, once started, the game.

    The GameState is owned exclusively by its room.
    """
    code: str
    host_id: str
    created_at: float
    players: list[RoomPlayer] = field(default_factory=list)
    options: RoomOptions = field(default_factory=RoomOptions)
    state: GameState | None = None
    started: bool = False
    ended_at: float | None = None

    @property
    def is_full(self) -> bool:
        return len(self.players) >= MAX_PLAYERS

    @property
    def is_finished(self) -> bool:
        return self.state is not None and self.state.phase == GamePhase.ENDED

    def get_player(self, player_id: str) -> RoomPlayer | None:
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None


@dataclass
class DisconnectOutcome:
    """What a disconnect changed, so the transport knows what to broadcast."""
    room: Room | None
    room_removed: bool = False
    state_changed: bool = False


class RoomManager:
    """
    Manages game rooms.

    Responsibilities:
    - Allocate unique room codes
    - Track which room each player handle is in
    - Start games and route disconnects
    - Clean up empty and finished rooms

    No persistence - rooms are in-memory only.
    """

    def __init__(self, rng: random.Random | None = None, random_seed: int | None = None):
        self._rooms: dict[str, Room] = {}
        self._player_rooms: dict[str, str] = {}
        self._rng = rng or random.Random()
        # One seed per started game, drawn from a single seeded stream
        self._game_seeds = random.Random(random_seed) if random_seed is not None else None

    def __len__(self) -> int:
        return len(self._rooms)

    def create_room(
        self,
        host_id: str,
        host_name: str,
        options: RoomOptions | None = None,
    ) -> Room:
        """
        Create a new room with the host seated at index 0.

        Raises RoomError on an empty name or if the host is already seated.
        """
        name = _clean_name(host_name)
        self._ensure_not_seated(host_id)

        code = self._generate_code()
        room = Room(
            code=code,
            host_id=host_id,
            created_at=time.time(),
            players=[RoomPlayer(player_id=host_id, name=name, index=0)],
            options=options or RoomOptions(),
        )
        self._rooms[code] = room
        self._player_rooms[host_id] = code
        logger.info("Room %s created by %s", code, name)
        return room

    def join_room(self, code: str, player_id: str, name: str) -> Room:
        """Seat a player in an existing room that has not started."""
        name = _clean_name(name)
        room = self._rooms.get(normalize_code(code))
        if room is None:
            raise RoomError(RoomErrorCode.ROOM_NOT_FOUND, "Room not found. Check the code.")
        if room.started:
            raise RoomError(RoomErrorCode.GAME_ALREADY_STARTED, "The game has already started.")
        if room.is_full:
            raise RoomError(RoomErrorCode.ROOM_FULL, f"The room is full ({MAX_PLAYERS} players max).")
        self._ensure_not_seated(player_id)

        room.players.append(RoomPlayer(player_id=player_id, name=name, index=len(room.players)))
        self._player_rooms[player_id] = room.code
        logger.info("%s joined room %s", name, room.code)
        return room

    def update_options(self, player_id: str, options: RoomOptions) -> Room:
        """Change the room options. Host only, before the game starts."""
        room = self.require_room_of(player_id)
        if room.host_id != player_id:
            raise RoomError(RoomErrorCode.NOT_HOST, "Only the host can change the options.")
        if room.started:
            raise RoomError(RoomErrorCode.GAME_ALREADY_STARTED, "The game has already started.")
        room.options = options
        return room

    def start_game(self, player_id: str) -> Room:
        """Build the GameState from the seated players. Host only."""
        room = self.require_room_of(player_id)
        if room.host_id != player_id:
            raise RoomError(RoomErrorCode.NOT_HOST, "Only the host can start the game.")
        if room.started:
            raise RoomError(RoomErrorCode.GAME_ALREADY_STARTED, "The game has already started.")
        if len(room.players) < MIN_PLAYERS:
            raise RoomError(
                RoomErrorCode.NOT_ENOUGH_PLAYERS,
                f"At least {MIN_PLAYERS} players are needed to start.",
            )

        room.state = setup_game(
            [(p.player_id, p.name) for p in room.players],
            pact_enabled=room.options.pact_enabled,
            pact_breach=room.options.pact_breach,
            random_seed=self._next_game_seed(),
        )
        room.started = True
        logger.info("Room %s started with %d players", room.code, len(room.players))
        return room

    def get_room(self, code: str) -> Room | None:
        """Get a room by code."""
        return self._rooms.get(normalize_code(code))

    def room_of(self, player_id: str) -> Room | None:
        """Get the room a player handle is seated in."""
        code = self._player_rooms.get(player_id)
        return self._rooms.get(code) if code else None

    def require_room_of(self, player_id: str) -> Room:
        room = self.room_of(player_id)
        if room is None:
            raise RoomError(RoomErrorCode.NOT_IN_ROOM, "You are not in a room.")
        return room

    def list_rooms(self) -> list[str]:
        """List codes of all rooms."""
        return list(self._rooms)

    def mark_if_finished(self, room: Room) -> None:
        """Stamp the end time the first time a room's game is seen ended."""
        if room.is_finished and room.ended_at is None:
            room.ended_at = time.time()
            logger.info("Room %s finished", room.code)

    def disconnect(self, player_id: str) -> DisconnectOutcome:
        """
        Handle a dropped connection.

        Started rooms keep the player as a disconnected game entity.
        Rooms that have not started drop the player; an empty room is
        removed and a departing host is replaced by the first player.
        """
        room = self.room_of(player_id)
        if room is None:
            return DisconnectOutcome(room=None)

        if room.started and room.state is not None:
            changed = handle_disconnect(room.state, player_id)
            self.mark_if_finished(room)
            return DisconnectOutcome(room=room, state_changed=changed)

        self._player_rooms.pop(player_id, None)
        room.players = [p for p in room.players if p.player_id != player_id]
        if not room.players:
            self._remove_room(room.code)
            return DisconnectOutcome(room=room, room_removed=True)

        for index, p in enumerate(room.players):
            p.index = index
        if room.host_id == player_id:
            room.host_id = room.players[0].player_id
            logger.info("Room %s host passed to %s", room.code, room.players[0].name)
        return DisconnectOutcome(room=room, state_changed=True)

    def reap_finished_rooms(self, max_age_seconds: float = 3600, now: float | None = None) -> list[str]:
        """
        Remove rooms whose game ended more than max_age_seconds ago.

        Called periodically to free memory. Returns the removed codes.
        """
        current_time = now if now is not None else time.time()
        to_remove = []
        for code, room in self._rooms.items():
            self.mark_if_finished(room)
            if room.ended_at is not None and current_time - room.ended_at > max_age_seconds:
                to_remove.append(code)

        for code in to_remove:
            self._remove_room(code)
            logger.info("Room %s reaped", code)
        return to_remove

    def _remove_room(self, code: str) -> None:
        room = self._rooms.pop(code, None)
        if room is None:
            return
        for player_id, room_code in list(self._player_rooms.items()):
            if room_code == code:
                del self._player_rooms[player_id]
        logger.info("Room %s removed", code)

    def _next_game_seed(self) -> int | None:
        if self._game_seeds is None:
            return None
        return self._game_seeds.getrandbits(32)

    def _ensure_not_seated(self, player_id: str) -> None:
        if self.room_of(player_id) is not None:
            raise RoomError(RoomErrorCode.ALREADY_IN_ROOM, "You are already in a room.")

    def _generate_code(self) -> str:
        while True:
            code = "".join(self._rng.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
            if code not in self._rooms:
                return code


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise RoomError(RoomErrorCode.EMPTY_NAME, "Please enter a name.")
    return cleaned
