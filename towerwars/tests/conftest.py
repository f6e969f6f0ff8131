"""
Pytest fixtures for Tower Wars tests.
"""

import random

import pytest

from ..engine_core.deck import create_deck
from ..engine_core.state import GameState, PactBreach, PhysicalCard, PlayerState


def take_card(pool: list[PhysicalCard], value: int) -> PhysicalCard:
    """Remove and return the first card of a value from a pool."""
    for idx, card in enumerate(pool):
        if card.value == value:
            return pool.pop(idx)
    raise ValueError(f"No card of value {value} left")


def build_state(
    players: list[dict],
    drawn: int | None = None,
    turn: int = 0,
    deck_top: list[int] | None = None,
    discard: list[int] | None = None,
    pact_enabled: bool = False,
    pact_breach: PactBreach = PactBreach.BLOCK,
) -> GameState:
    """
    Build a hand-crafted state that still accounts for all 52 cards.

    Each player dict: {"id", "name", "towers": [values],
    "defense": value|None, "charged": value|None}.
    deck_top values end up at the end of the deck (drawn first, in order).
    Every card not placed somewhere stays in the deck.
    """
    pool = create_deck()
    player_states = []
    for index, seat in enumerate(players):
        player_states.append(PlayerState(
            player_id=seat["id"],
            name=seat.get("name", seat["id"].title()),
            index=index,
            towers=[take_card(pool, v) for v in seat.get("towers", [])],
            defense=take_card(pool, seat["defense"]) if seat.get("defense") else None,
            charged=take_card(pool, seat["charged"]) if seat.get("charged") else None,
        ))

    drawn_card = take_card(pool, drawn) if drawn else None
    discard_cards = [take_card(pool, v) for v in (discard or [])]
    top = [take_card(pool, v) for v in (deck_top or [])]
    deck = pool + list(reversed(top))

    return GameState(
        players=player_states,
        deck=deck,
        discard=discard_cards,
        turn=turn,
        drawn_card=drawn_card,
        pact_enabled=pact_enabled,
        pact_breach=pact_breach,
        rng=random.Random(7),
    )


def assert_cards_conserved(state: GameState) -> None:
    """All 52 physical cards are present exactly once."""
    cards = state.physical_cards()
    assert len(cards) == 52
    assert len(set(cards)) == 52


@pytest.fixture
def make_state():
    """Factory fixture for hand-crafted states."""
    return build_state


@pytest.fixture
def two_player_state() -> GameState:
    """Alice (towers 14, 13, defense 5) to play against Bob (towers 9, 8, defense 6)."""
    return build_state(
        [
            {"id": "alice", "towers": [14, 13], "defense": 5},
            {"id": "bob", "towers": [9, 8], "defense": 6},
        ],
        drawn=10,
        deck_top=[7, 3],
    )


@pytest.fixture
def three_player_state() -> GameState:
    return build_state(
        [
            {"id": "alice", "towers": [12, 10], "defense": 4},
            {"id": "bob", "towers": [11, 9], "defense": 3},
            {"id": "carol", "towers": [13, 6], "defense": 2},
        ],
        drawn=8,
        deck_top=[5, 4, 3],
    )


@pytest.fixture
def pact_state() -> GameState:
    """Three players, pacts enabled; Alice is down to a single tower."""
    return build_state(
        [
            {"id": "alice", "towers": [7], "defense": 4},
            {"id": "bob", "towers": [11, 9], "defense": 3},
            {"id": "carol", "towers": [13, 6], "defense": 2},
        ],
        drawn=8,
        deck_top=[5, 4, 3, 2],
        pact_enabled=True,
    )
