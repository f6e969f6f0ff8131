"""
Turn Controller - Turn order, elimination, victory and disconnects.

After every turn-consuming action the reducer calls advance_turn(), which:
1. Ages every pact and dissolves the expired ones
2. Moves to the next player still alive
3. Ends the game when one player (or none) is left
4. Otherwise draws the new player's card
"""

from __future__ import annotations
import logging

from .deck import DeckExhaustedError, draw
from .pact import dissolve_pact
from .state import GamePhase, GameState, LogKind, PhysicalCard

logger = logging.getLogger(__name__)


def draw_card(state: GameState) -> PhysicalCard:
    """Draw a card, treating exhaustion as a broken game."""
    card = draw(state)
    if card is None:
        raise DeckExhaustedError("Deck and discard are both empty")
    return card


def advance_turn(state: GameState) -> None:
    """
    Hand the turn to the next live player and draw their card.

    Disconnected players cannot act, so their turn is passed
    automatically (drawn card discarded) unless nobody left alive
    is still connected.
    """
    for _ in range(state.num_players):
        _decay_pacts(state)
        _select_next_player(state)
        state.turn_number += 1

        if len(state.alive_players) <= 1:
            end_game(state)
            return

        player = state.current_player
        state.drawn_card = draw_card(state)
        state.add_log(f"T{state.turn_number} - {player.name} draws", LogKind.DRAW)

        if not player.disconnected or all(p.disconnected for p in state.alive_players):
            return

        state.discard.append(state.drawn_card)
        state.drawn_card = None
        state.add_log(f"{player.name} is disconnected and passes", LogKind.DISCONNECT)


def _decay_pacts(state: GameState) -> None:
    if not state.pact_enabled:
        return
    for player in state.players:
        if player.pact is None:
            continue
        player.pact.turns_left -= 1
        if player.pact.turns_left <= 0:
            partner = dissolve_pact(state, player)
            partner_name = partner.name if partner else "?"
            state.add_log(f"Pact between {player.name} and {partner_name} expired.", LogKind.PACT)


def _select_next_player(state: GameState) -> None:
    n = state.num_players
    state.turn = (state.turn + 1) % n
    tries = 0
    while state.players[state.turn].eliminated and tries < n:
        state.turn = (state.turn + 1) % n
        tries += 1


def check_elimination(state: GameState) -> list[str]:
    """
    Eliminate every live player without towers.

    Their defense and charged cards go to the discard pile.
    Returns the IDs of the newly eliminated players.
    """
    eliminated = []
    for player in state.players:
        if player.eliminated or player.towers:
            continue
        player.eliminated = True
        if player.defense is not None:
            state.discard.append(player.defense)
            player.defense = None
        if player.charged is not None:
            state.discard.append(player.charged)
            player.charged = None
        state.add_log(f"{player.name} is eliminated!", LogKind.ELIMINATION)
        eliminated.append(player.player_id)
    return eliminated


def end_game(state: GameState) -> None:
    """Finish the game with the last player standing (if any) as winner."""
    alive = state.alive_players
    winner = alive[0] if alive else None
    state.phase = GamePhase.ENDED
    state.winner_id = winner.player_id if winner else None
    if state.drawn_card is not None:
        state.discard.append(state.drawn_card)
        state.drawn_card = None
    state.add_log(f"{winner.name if winner else 'Nobody'} wins the game!", LogKind.VICTORY)
    logger.info("Game over after %d turns, winner: %s", state.turn_number, state.winner_id)


def handle_disconnect(state: GameState, player_id: str) -> bool:
    """
    Mark a player disconnected and, if they were holding the turn, pass it.

    Eliminated or unknown players are ignored. Returns True if the
    state changed.
    """
    player = state.get_player(player_id)
    if player is None or player.eliminated or player.disconnected:
        return False

    player.disconnected = True
    state.add_log(f"{player.name} disconnected.", LogKind.DISCONNECT)

    if state.phase == GamePhase.ACTION and state.current_player.player_id == player_id:
        if state.drawn_card is not None:
            state.discard.append(state.drawn_card)
            state.drawn_card = None
        advance_turn(state)
    return True
