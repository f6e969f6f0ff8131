"""
Damage Distribution - Spreads a hit over the target's towers.

Towers take damage highest value first. Equal values are hit in
positional order (stable sort), so the result is deterministic.
A damaged tower is swapped for a physical card of its new value when
one is left in the deck or discard, otherwise for a SyntheticCard.
"""

from __future__ import annotations

from .deck import find_and_remove_by_value
from .state import Card, GameState, PlayerState, SyntheticCard


def damage_order(towers: list[Card]) -> list[int]:
    """Tower positions in the order they absorb damage."""
    return sorted(range(len(towers)), key=lambda idx: -towers[idx].value)


def distribute_damage(state: GameState, target: PlayerState, damage: int) -> int:
    """
    Apply damage to target's towers.

    Returns the damage actually absorbed (never more than the
    target's tower total).
    """
    remaining = damage
    new_towers: list[Card | None] = list(target.towers)

    for idx in damage_order(target.towers):
        if remaining <= 0:
            break
        card = target.towers[idx]
        absorbed = min(remaining, card.value)
        if card.is_physical:
            state.discard.append(card)

        new_value = card.value - absorbed
        if new_value > 0:
            replacement = find_and_remove_by_value(state, new_value, floor=new_value)
            new_towers[idx] = replacement or SyntheticCard(value=new_value)
        else:
            new_towers[idx] = None
        remaining -= absorbed

    target.towers = [card for card in new_towers if card is not None]
    return damage - remaining
