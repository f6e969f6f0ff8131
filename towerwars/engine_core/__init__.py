"""
Engine Core - Tower Wars game state and turn state machine.

The engine is the runtime that:
1. Builds the initial GameState for a room
2. Manages the deck and discard pile
3. Generates legal actions
4. Applies actions via the reducer
5. Advances turns, eliminates players and detects the winner
"""

from .state import (
    Card,
    GamePhase,
    GameState,
    LogEntry,
    LogKind,
    Pact,
    PactBreach,
    PactRole,
    PhysicalCard,
    PlayerState,
    Suit,
    SyntheticCard,
)
from .action import Action, ActionErrorCode, ActionPayload, ActionResult, ActionType
from .deck import DeckExhaustedError, create_deck, draw, find_and_remove_by_value, shuffle
from .reducer import Reducer, apply_action
from .action_generator import legal_actions
from .setup import setup_game
from .turn import advance_turn, check_elimination, handle_disconnect

__all__ = [
    "Card",
    "GamePhase",
    "GameState",
    "LogEntry",
    "LogKind",
    "Pact",
    "PactBreach",
    "PactRole",
    "PhysicalCard",
    "PlayerState",
    "Suit",
    "SyntheticCard",
    "Action",
    "ActionErrorCode",
    "ActionPayload",
    "ActionResult",
    "ActionType",
    "DeckExhaustedError",
    "create_deck",
    "draw",
    "find_and_remove_by_value",
    "shuffle",
    "Reducer",
    "apply_action",
    "legal_actions",
    "setup_game",
    "advance_turn",
    "check_elimination",
    "handle_disconnect",
]
