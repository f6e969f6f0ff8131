"""
Deck Engine - The shared card economy of a game.

Owns the deck and discard pile of one GameState:
- Building the 52-card deck
- Shuffling (never in place)
- Drawing, with reshuffle of the discard when the deck runs out
- Targeted retrieval of a card by value (used to rebuild damaged towers)
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Sequence
import random

from .state import PhysicalCard, Suit

if TYPE_CHECKING:
    from .state import GameState


CARD_VALUES = range(2, 15)  # 2..10, J=11, Q=12, K=13, A=14


class DeckExhaustedError(RuntimeError):
    """Raised when a draw finds both deck and discard empty."""


def create_deck() -> list[PhysicalCard]:
    """Create the 52 physical cards, suit by suit."""
    return [PhysicalCard(suit=suit, value=value) for suit in Suit for value in CARD_VALUES]


def shuffle(cards: Sequence[PhysicalCard], rng: random.Random | None = None) -> list[PhysicalCard]:
    """Return a new list with the cards in uniformly random order."""
    rng = rng or random.Random()
    return rng.sample(list(cards), len(cards))


def draw(state: GameState) -> PhysicalCard | None:
    """
    Pop one card from the end of the deck.

    An empty deck is rebuilt from the whole discard pile first.
    Returns None only when deck and discard are both empty.
    """
    if not state.deck:
        if not state.discard:
            return None
        state.deck = shuffle(state.discard, state.rng)
        state.discard = []
    return state.deck.pop()


def find_and_remove_by_value(
    state: GameState,
    target_value: int,
    floor: int = 1,
) -> PhysicalCard | None:
    """
    Remove and return the highest card with floor <= value <= target_value.

    Each value tier is searched in the deck first, then in the discard.
    Returns None if no card in that range exists in either pile.
    """
    for value in range(target_value, floor - 1, -1):
        for pile in (state.deck, state.discard):
            for idx, card in enumerate(pile):
                if card.value == value:
                    return pile.pop(idx)
    return None
