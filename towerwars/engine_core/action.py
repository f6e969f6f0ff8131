"""
Action System - Actions, payloads, and results.

Actions represent the moves a player can submit on their turn:
attack, defend, charge, discard, propose a pact, break a pact.

All state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Types of player actions."""
    ATTACK = "attack"
    DEFEND = "defend"
    CHARGE = "charge"
    DISCARD = "discard"
    PACT = "pact"
    BREAK_PACT = "break_pact"


class ActionErrorCode(Enum):
    """Why an action was rejected. A rejected action never mutates state."""
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


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Only attack and pact use a target.
    """
    player_id: str
    target_player_id: str | None = None


@dataclass
class Action:
    """
    A complete action to be applied to the game state.

    `action_type` keeps the raw string when the client sent a type
    the engine does not know, so the reducer can reject it.
    """
    action_type: ActionType | str
    payload: ActionPayload

    @property
    def player_id(self) -> str:
        return self.payload.player_id

    @property
    def target_id(self) -> str | None:
        return self.payload.target_player_id

    @classmethod
    def parse(cls, player_id: str, action_type: str, target_id: str | None = None) -> Action:
        """Build an action from a raw request."""
        try:
            kind: ActionType | str = ActionType(action_type)
        except ValueError:
            kind = action_type
        return cls(action_type=kind, payload=ActionPayload(player_id=player_id, target_player_id=target_id))

    @classmethod
    def attack(cls, player_id: str, target_id: str) -> Action:
        """Factory for attack action."""
        return cls(ActionType.ATTACK, ActionPayload(player_id=player_id, target_player_id=target_id))

    @classmethod
    def defend(cls, player_id: str) -> Action:
        return cls(ActionType.DEFEND, ActionPayload(player_id=player_id))

    @classmethod
    def charge(cls, player_id: str) -> Action:
        return cls(ActionType.CHARGE, ActionPayload(player_id=player_id))

    @classmethod
    def discard(cls, player_id: str) -> Action:
        return cls(ActionType.DISCARD, ActionPayload(player_id=player_id))

    @classmethod
    def pact(cls, player_id: str, target_id: str) -> Action:
        """Factory for pact proposal."""
        return cls(ActionType.PACT, ActionPayload(player_id=player_id, target_player_id=target_id))

    @classmethod
    def break_pact(cls, player_id: str) -> Action:
        return cls(ActionType.BREAK_PACT, ActionPayload(player_id=player_id))


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - Errors (if failed)
    - Banner payload describing the event (for UI)
    - Whether the action left the turn untouched (state_only)
    """
    success: bool
    error: str | None = None
    error_code: ActionErrorCode | None = None

    # For UI/presentation
    banner: dict[str, Any] | None = None
    state_changes: list[str] = field(default_factory=list)  # Human-readable changes

    # True for side actions that do not advance the turn
    state_only: bool = False

    @classmethod
    def failure(cls, error: str, error_code: ActionErrorCode) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def ok(
        cls,
        banner: dict[str, Any] | None = None,
        changes: list[str] | None = None,
        state_only: bool = False,
    ) -> ActionResult:
        """Create a success result."""
        return cls(success=True, banner=banner, state_changes=changes or [], state_only=state_only)
