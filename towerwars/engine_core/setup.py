"""
Game Setup - Creates the initial game state for a room.

This module handles:
- Shuffling a full deck (seeded for determinism)
- Dealing 4 cards per player and keeping the best 2 as towers
- Dealing each player a starting defense card
- Choosing the first player (weakest towers)
- Drawing the opening card

The two weakest dealt cards go to the shared discard pile, so all 52
cards stay accounted for.
"""

from __future__ import annotations
import random
from typing import Sequence

from .deck import create_deck, shuffle
from .state import GameState, LogKind, PactBreach, PlayerState
from .turn import draw_card


MIN_PLAYERS = 2
MAX_PLAYERS = 4
DEALT_CARDS = 4
TOWER_COUNT = 2


def setup_game(
    players: Sequence[tuple[str, str]],
    pact_enabled: bool = False,
    pact_breach: PactBreach = PactBreach.BLOCK,
    random_seed: int | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """
    Set up a new game.

    Args:
        players: (player_id, name) pairs in seating order (2-4)
        pact_enabled: Whether pacts may be proposed
        pact_breach: What attacking a pact partner does
        random_seed: Seed for deterministic shuffling
        rng: Random source to use instead of a seeded one

    Returns:
        Initial GameState with the first player's card drawn
    """
    if len(players) < MIN_PLAYERS or len(players) > MAX_PLAYERS:
        raise ValueError(f"Tower Wars supports {MIN_PLAYERS}-{MAX_PLAYERS} players")

    rng = rng or random.Random(random_seed)
    state = GameState(
        deck=shuffle(create_deck(), rng),
        pact_enabled=pact_enabled,
        pact_breach=pact_breach,
        rng=rng,
    )

    state.players = [
        _deal_player(state, player_id, name, index)
        for index, (player_id, name) in enumerate(players)
    ]

    state.turn = _weakest_player_index(state.players)
    first = state.current_player
    state.add_log(
        f"{first.name} starts (weakest towers: {first.tower_total} HP)",
        LogKind.INFO,
    )

    state.drawn_card = draw_card(state)
    state.add_log(f"T{state.turn_number} - {first.name} draws", LogKind.DRAW)
    return state


def _deal_player(state: GameState, player_id: str, name: str, index: int) -> PlayerState:
    """Deal towers and a defense card to one player."""
    pool = [state.deck.pop() for _ in range(DEALT_CARDS)]
    pool.sort(key=lambda card: card.value, reverse=True)
    state.discard.extend(pool[TOWER_COUNT:])

    return PlayerState(
        player_id=player_id,
        name=name,
        index=index,
        towers=pool[:TOWER_COUNT],
        defense=state.deck.pop(),
    )


def _weakest_player_index(players: list[PlayerState]) -> int:
    """Lowest tower total wins the first turn; ties go to the earlier seat."""
    first = 0
    for idx, player in enumerate(players):
        if player.tower_total < players[first].tower_total:
            first = idx
    return first
