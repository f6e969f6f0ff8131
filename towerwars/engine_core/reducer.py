"""
Reducer - Applies player actions to game state.

The reducer is the single point of action-driven state mutation.
All player moves must go through apply_action().

Design principles:
- Validates completely before mutating anything
- A rejected action leaves the state untouched
- Turn-consuming actions end with advance_turn()
- Returns ActionResult with a banner for the UI
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from .action import Action, ActionErrorCode, ActionResult, ActionType
from .damage import distribute_damage
from .pact import (
    can_propose_pact,
    dissolve_pact,
    dissolve_pact_between,
    form_pact,
    is_pact_protected,
)
from .state import GamePhase, GameState, LogKind, PactBreach, PlayerState
from .turn import advance_turn, check_elimination, end_game

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    """

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with a banner or an error.
        """
        if action.action_type == ActionType.BREAK_PACT:
            result = self._handle_break_pact(state, action)
        else:
            validation_error = self._validate_turn(state, action)
            if validation_error:
                return validation_error

            handler = self._get_handler(action.action_type)
            if not handler:
                return ActionResult.failure(
                    f"Unknown action: {action.action_type}",
                    ActionErrorCode.UNKNOWN_ACTION,
                )
            result = handler(state, action)

        if result.success:
            logger.debug("Applied %s for %s", action.action_type, action.player_id)
        return result

    def _validate_turn(self, state: GameState, action: Action) -> ActionResult | None:
        """
        Check the turn preconditions shared by every turn action.

        Returns a failure result if invalid, None if valid.
        """
        if state.phase == GamePhase.ENDED:
            return ActionResult.failure("The game is over", ActionErrorCode.GAME_ENDED)
        if state.current_player.player_id != action.player_id:
            return ActionResult.failure("It is not your turn", ActionErrorCode.NOT_YOUR_TURN)
        if state.drawn_card is None:
            return ActionResult.failure("No card has been drawn", ActionErrorCode.NO_CARD_DRAWN)
        return None

    def _get_handler(self, action_type: ActionType | str):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.ATTACK: self._handle_attack,
            ActionType.DEFEND: self._handle_defend,
            ActionType.CHARGE: self._handle_charge,
            ActionType.DISCARD: self._handle_discard,
            ActionType.PACT: self._handle_pact,
        }
        return handlers.get(action_type)

    def _handle_break_pact(self, state: GameState, action: Action) -> ActionResult:
        """Break the actor's pact. Costs no turn and keeps the drawn card."""
        player = state.get_player(action.player_id)
        if player is None:
            return ActionResult.failure("You are not in this game", ActionErrorCode.UNKNOWN_PLAYER)
        if player.pact is None:
            return ActionResult.failure("You are not under a pact", ActionErrorCode.NO_ACTIVE_PACT)

        partner = dissolve_pact(state, player)
        message = f"{player.name} ends the pact with {partner.name if partner else '?'}."
        state.add_log(message, LogKind.PACT)
        return ActionResult.ok(
            banner={"type": "break_pact", "player": player.name, "target": partner.name if partner else None},
            changes=[message],
            state_only=True,
        )

    def _handle_attack(self, state: GameState, action: Action) -> ActionResult:
        """
        Handle attack action.

        The drawn card plus any charged card is compared to the target's
        defense. A hit destroys the defense and spreads the excess over
        the target's towers.
        """
        player = state.current_player
        target = state.get_player(action.target_id)
        if target is None or target.eliminated:
            return ActionResult.failure("Invalid target", ActionErrorCode.INVALID_TARGET)
        if target.player_id == player.player_id:
            return ActionResult.failure("You cannot attack yourself", ActionErrorCode.INVALID_TARGET)

        changes = []
        if is_pact_protected(state, player, target):
            if state.pact_breach == PactBreach.BLOCK:
                return ActionResult.failure(
                    "Your pact forbids attacking this player",
                    ActionErrorCode.PACT_BLOCKS_ATTACK,
                )
            changes.append(self._breach_pact(state, player, target))

        total_attack = state.drawn_card.value + (player.charged.value if player.charged else 0)
        defense_value = target.defense.value if target.defense else 0
        banner = {
            "type": "attack",
            "attacker": player.name,
            "target": target.name,
            "total_attack": total_attack,
            "defense": defense_value,
        }

        if total_attack <= defense_value:
            message = (
                f"{player.name} attacks {target.name} with {total_attack}"
                f" - blocked (defense {defense_value})"
            )
            state.add_log(message, LogKind.ATTACK)
            self._spend_attack_cards(state, player)
            advance_turn(state)
            return ActionResult.ok(banner={**banner, "result": "blocked"}, changes=changes + [message])

        damage = total_attack - defense_value
        if target.defense is not None:
            state.discard.append(target.defense)
            target.defense = None
        if target.charged is not None:
            state.discard.append(target.charged)
            target.charged = None
            lost = f"{target.name} loses their charged card!"
            state.add_log(lost, LogKind.CHARGE)
            changes.append(lost)

        message = (
            f"{player.name} attacks {target.name} with {total_attack}"
            f" - {damage} damage! (defense {defense_value} destroyed)"
        )
        state.add_log(message, LogKind.ATTACK)
        changes.append(message)
        self._spend_attack_cards(state, player)

        distribute_damage(state, target, damage)
        check_elimination(state)

        if len(state.alive_players) > 1:
            advance_turn(state)
        else:
            end_game(state)
        return ActionResult.ok(banner={**banner, "result": "hit", "damage": damage}, changes=changes)

    def _breach_pact(self, state: GameState, player: PlayerState, target: PlayerState) -> str:
        """Penalty policy: the attacker loses their defense and the pact."""
        if player.defense is not None:
            state.discard.append(player.defense)
            player.defense = None
        dissolve_pact_between(player, target)
        message = f"{player.name} breaks the pact with {target.name} and loses their defense!"
        state.add_log(message, LogKind.PACT)
        return message

    def _spend_attack_cards(self, state: GameState, player: PlayerState) -> None:
        state.discard.append(state.drawn_card)
        state.drawn_card = None
        if player.charged is not None:
            state.discard.append(player.charged)
            player.charged = None

    def _handle_defend(self, state: GameState, action: Action) -> ActionResult:
        """Replace the defense with the drawn card. Any charge is lost."""
        player = state.current_player
        old_value = player.defense.value if player.defense else 0
        if player.defense is not None:
            state.discard.append(player.defense)
        player.defense = state.drawn_card
        state.drawn_card = None
        if player.charged is not None:
            state.discard.append(player.charged)
            player.charged = None

        message = f"{player.name} defends: {old_value} -> {player.defense.value}"
        state.add_log(message, LogKind.DEFEND)
        new_value = player.defense.value
        advance_turn(state)
        return ActionResult.ok(
            banner={"type": "defend", "player": player.name, "from": old_value, "to": new_value},
            changes=[message],
        )

    def _handle_charge(self, state: GameState, action: Action) -> ActionResult:
        """Bank the drawn card for the next attack."""
        player = state.current_player
        if player.charged is not None:
            state.discard.append(player.charged)
        player.charged = state.drawn_card
        state.drawn_card = None

        value = player.charged.value
        message = f"{player.name} charges {value} for their next attack"
        state.add_log(message, LogKind.CHARGE)
        advance_turn(state)
        return ActionResult.ok(
            banner={"type": "charge", "player": player.name, "value": value},
            changes=[message],
        )

    def _handle_discard(self, state: GameState, action: Action) -> ActionResult:
        player = state.current_player
        state.discard.append(state.drawn_card)
        state.drawn_card = None

        message = f"{player.name} discards"
        state.add_log(message)
        advance_turn(state)
        return ActionResult.ok(banner={"type": "discard", "player": player.name}, changes=[message])

    def _handle_pact(self, state: GameState, action: Action) -> ActionResult:
        """
        Handle pact proposal.

        Only a player down to one tower, without a pact, may propose.
        The pact takes effect immediately for both sides.
        """
        player = state.current_player
        if not can_propose_pact(state, player):
            return ActionResult.failure(
                "A pact is not possible right now",
                ActionErrorCode.PACT_NOT_ALLOWED,
            )
        target = state.get_player(action.target_id)
        if target is None or target.eliminated:
            return ActionResult.failure("Invalid pact target", ActionErrorCode.INVALID_PACT_TARGET)
        if target.player_id == player.player_id:
            return ActionResult.failure(
                "You cannot make a pact with yourself",
                ActionErrorCode.INVALID_PACT_TARGET,
            )
        if target.pact is not None:
            return ActionResult.failure(
                "This player is already under a pact",
                ActionErrorCode.INVALID_PACT_TARGET,
            )

        form_pact(player, target)
        message = f"{player.name} offers a pact to {target.name} - 2 turns of truce!"
        state.add_log(message, LogKind.PACT)
        if state.drawn_card is not None:
            state.discard.append(state.drawn_card)
            state.drawn_card = None
        advance_turn(state)
        return ActionResult.ok(
            banner={"type": "pact", "from": player.name, "to": target.name},
            changes=[message],
        )


def apply_action(state: GameState, action: Action) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    return Reducer().apply(state, action)
