"""
Action Generator - Lists the actions the reducer would accept.

The action generator is used by:
1. Bots to enumerate possible moves
2. UI to show available actions

Design: Generates Action objects, not just action types.
This ensures all generated actions are fully specified.
"""

from __future__ import annotations

from .action import Action
from .pact import can_propose_pact, is_pact_protected
from .state import GamePhase, GameState, PactBreach, PlayerState


def legal_actions(state: GameState, player_id: str | None = None) -> list[Action]:
    """
    Generate every legal action for a player.

    Defaults to the current player. Players who are not on turn can
    at most break their pact.
    """
    if player_id is None:
        player_id = state.current_player.player_id
    player = state.get_player(player_id)
    if player is None:
        return []

    actions = []
    if (
        state.phase == GamePhase.ACTION
        and state.current_player.player_id == player_id
        and state.drawn_card is not None
    ):
        actions.extend(_turn_actions(state, player))

    # Free action, listed last so turn actions come first
    if player.pact is not None:
        actions.append(Action.break_pact(player_id))
    return actions


def _turn_actions(state: GameState, player: PlayerState) -> list[Action]:
    player_id = player.player_id
    actions = []
    for target in state.players:
        if target.player_id == player_id or target.eliminated:
            continue
        if is_pact_protected(state, player, target) and state.pact_breach == PactBreach.BLOCK:
            continue
        actions.append(Action.attack(player_id, target.player_id))

    actions.append(Action.defend(player_id))
    actions.append(Action.charge(player_id))
    actions.append(Action.discard(player_id))

    if can_propose_pact(state, player):
        for target in state.players:
            if target.player_id == player_id or target.eliminated or target.pact is not None:
                continue
            actions.append(Action.pact(player_id, target.player_id))

    return actions
