"""
Pacts - Mutual non-aggression agreements between two players.

Both participants hold a mirrored Pact record. The helpers here are the
only code that creates or clears those records, so the symmetry holds:
if A's pact references B, then B's pact references A or B has none.
"""

from __future__ import annotations

from .state import GameState, Pact, PactRole, PlayerState


PACT_DURATION = 2


def can_propose_pact(state: GameState, player: PlayerState) -> bool:
    """Pacts are for players down to their last tower, one at a time."""
    if not state.pact_enabled:
        return False
    if len(player.towers) != 1:
        return False
    return player.pact is None


def is_pact_protected(state: GameState, attacker: PlayerState, target: PlayerState) -> bool:
    """True if either side's pact points at the other."""
    if not state.pact_enabled:
        return False
    if target.pact and target.pact.with_id == attacker.player_id:
        return True
    if attacker.pact and attacker.pact.with_id == target.player_id:
        return True
    return False


def form_pact(proposer: PlayerState, target: PlayerState) -> None:
    proposer.pact = Pact(with_id=target.player_id, turns_left=PACT_DURATION, role=PactRole.PROPOSER)
    target.pact = Pact(with_id=proposer.player_id, turns_left=PACT_DURATION, role=PactRole.PROTECTED)


def dissolve_pact(state: GameState, player: PlayerState) -> PlayerState | None:
    """
    Clear a player's pact and the partner's mirror of it.

    Returns the partner (None if the partner no longer exists).
    """
    if player.pact is None:
        return None
    partner = state.get_player(player.pact.with_id)
    if partner and partner.pact and partner.pact.with_id == player.player_id:
        partner.pact = None
    player.pact = None
    return partner


def dissolve_pact_between(first: PlayerState, second: PlayerState) -> None:
    """Clear whichever halves of a pact link these two players."""
    if first.pact and first.pact.with_id == second.player_id:
        first.pact = None
    if second.pact and second.pact.with_id == first.player_id:
        second.pact = None
