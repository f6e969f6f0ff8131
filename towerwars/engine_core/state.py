"""
Game State - Mutable state container for one Tower Wars game.

Design principles:
- Owned by exactly one room, mutated in place by the reducer
- Cards are immutable values (physical or synthetic)
- Pact records are only created or cleared inside engine_core
- The narration log is bounded, oldest entries dropped first
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Union
from copy import deepcopy
from enum import Enum
import random
import time


LOG_LIMIT = 120


class GamePhase(Enum):
    """High-level game phases."""
    ACTION = "action"
    ENDED = "ended"


class PactBreach(Enum):
    """What happens when a player attacks their pact partner."""
    BLOCK = "block"
    PENALTY = "penalty"


class PactRole(Enum):
    PROPOSER = "proposer"
    PROTECTED = "protected"


class Suit(Enum):
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    SPADES = "spades"
    CLUBS = "clubs"


class LogKind(Enum):
    """Category of a narration entry (used by clients for styling)."""
    INFO = "info"
    DRAW = "draw"
    ATTACK = "attack"
    DEFEND = "defend"
    CHARGE = "charge"
    PACT = "pact"
    ELIMINATION = "elimination"
    VICTORY = "victory"
    DISCONNECT = "disconnect"


@dataclass(frozen=True)
class PhysicalCard:
    """A real card from the 52-card deck."""
    suit: Suit
    value: int  # 2..14, ace high

    @property
    def is_physical(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"{self.value} of {self.suit.value}"


@dataclass(frozen=True)
class SyntheticCard:
    """
    A tower value that no remaining physical card can represent.

    Synthetic cards only ever live in a tower. They never enter
    the deck or the discard pile.
    """
    value: int

    @property
    def is_physical(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"{self.value} (virtual)"


Card = Union[PhysicalCard, SyntheticCard]


@dataclass
class Pact:
    """One half of a non-aggression pact. The partner holds the mirror."""
    with_id: str
    turns_left: int
    role: PactRole


@dataclass
class LogEntry:
    message: str
    kind: LogKind = LogKind.INFO
    timestamp: float = field(default_factory=time.time)


@dataclass
class PlayerState:
    """
    State for a single player.

    A player is eliminated exactly when `towers` becomes empty.
    Disconnected players stay in the game but never act again.
    """
    player_id: str
    name: str
    index: int
    towers: list[Card] = field(default_factory=list)
    defense: PhysicalCard | None = None
    charged: PhysicalCard | None = None
    eliminated: bool = False
    disconnected: bool = False
    pact: Pact | None = None

    @property
    def tower_total(self) -> int:
        return sum(card.value for card in self.towers)

    @property
    def is_alive(self) -> bool:
        return not self.eliminated


@dataclass
class GameState:
    """
    Complete game state.

    Created once when a room starts and mutated in place afterwards.
    All changes go through the reducer and the turn controller.
    """
    players: list[PlayerState] = field(default_factory=list)

    # Shared zones
    deck: list[PhysicalCard] = field(default_factory=list)
    discard: list[PhysicalCard] = field(default_factory=list)

    # Turn tracking
    turn: int = 0
    turn_number: int = 1
    phase: GamePhase = GamePhase.ACTION
    drawn_card: PhysicalCard | None = None

    # Room options copied at start
    pact_enabled: bool = False
    pact_breach: PactBreach = PactBreach.BLOCK

    log: list[LogEntry] = field(default_factory=list)
    winner_id: str | None = None

    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    @property
    def current_player(self) -> PlayerState:
        """Get the player whose turn it is."""
        return self.players[self.turn]

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def alive_players(self) -> list[PlayerState]:
        return [p for p in self.players if p.is_alive]

    @property
    def winner(self) -> PlayerState | None:
        if self.winner_id is None:
            return None
        return self.get_player(self.winner_id)

    def get_player(self, player_id: str | None) -> PlayerState | None:
        """Get player by ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def add_log(self, message: str, kind: LogKind = LogKind.INFO) -> None:
        """Append a narration entry, keeping at most LOG_LIMIT entries."""
        self.log.append(LogEntry(message=message, kind=kind))
        if len(self.log) > LOG_LIMIT:
            del self.log[:-LOG_LIMIT]

    def physical_cards(self) -> list[PhysicalCard]:
        """Every physical card the game accounts for, wherever it sits."""
        cards: list[PhysicalCard] = list(self.deck) + list(self.discard)
        if self.drawn_card is not None:
            cards.append(self.drawn_card)
        for p in self.players:
            cards.extend(c for c in p.towers if c.is_physical)
            if p.defense is not None:
                cards.append(p.defense)
            if p.charged is not None:
                cards.append(p.charged)
        return cards

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)
