"""
Tests for the reducer (state transitions).

Tests:
- Action application
- State mutation correctness
- Validation
- Error handling
"""

import pytest

from ..engine_core.action import Action, ActionErrorCode, ActionType
from ..engine_core.pact import form_pact
from ..engine_core.reducer import Reducer, apply_action
from ..engine_core.state import GamePhase, PactBreach, PactRole, PhysicalCard, Suit
from .conftest import assert_cards_conserved


class TestDefendAction:
    """Tests for defend action."""

    def test_defend_replaces_defense(self, two_player_state):
        """Drawn 10 over defense 5: defense becomes 10, the 5 is discarded."""
        state = two_player_state
        old_defense = state.get_player("alice").defense

        result = apply_action(state, Action.defend("alice"))

        assert result.success
        alice = state.get_player("alice")
        assert alice.defense.value == 10
        assert old_defense in state.discard
        assert result.banner == {"type": "defend", "player": "Alice", "from": 5, "to": 10}
        assert state.current_player.player_id == "bob"
        assert state.drawn_card.value == 7
        assert_cards_conserved(state)

    def test_defend_loses_charge(self, make_state):
        state = make_state(
            [
                {"id": "alice", "towers": [5, 4], "charged": 9},
                {"id": "bob", "towers": [9, 8]},
            ],
            drawn=6,
        )

        result = apply_action(state, Action.defend("alice"))

        assert result.success
        alice = state.get_player("alice")
        assert alice.charged is None
        assert alice.defense.value == 6
        assert result.banner["from"] == 0
        assert 9 in {c.value for c in state.discard}
        assert_cards_conserved(state)


class TestChargeAction:
    """Tests for charge action."""

    def test_charge_banks_card(self, two_player_state):
        state = two_player_state

        result = apply_action(state, Action.charge("alice"))

        assert result.success
        assert state.get_player("alice").charged.value == 10
        assert result.banner == {"type": "charge", "player": "Alice", "value": 10}
        assert state.current_player.player_id == "bob"

    def test_recharge_discards_previous(self, make_state):
        state = make_state(
            [
                {"id": "alice", "towers": [5, 4], "charged": 3},
                {"id": "bob", "towers": [9, 8]},
            ],
            drawn=11,
        )

        apply_action(state, Action.charge("alice"))

        assert state.get_player("alice").charged.value == 11
        assert [c.value for c in state.discard] == [3]
        assert_cards_conserved(state)


class TestDiscardAction:

    def test_discard(self, two_player_state):
        state = two_player_state
        drawn = state.drawn_card

        result = apply_action(state, Action.discard("alice"))

        assert result.success
        assert result.banner == {"type": "discard", "player": "Alice"}
        assert state.discard == [drawn]
        assert state.current_player.player_id == "bob"
        assert_cards_conserved(state)


class TestAttackAction:
    """Tests for attack action."""

    def test_blocked_attack(self, make_state):
        """9 drawn + 3 charged = 12 against defense 13 is blocked."""
        state = make_state(
            [
                {"id": "alice", "towers": [5, 4], "charged": 3},
                {"id": "bob", "towers": [9, 8], "defense": 13},
            ],
            drawn=9,
        )

        result = apply_action(state, Action.attack("alice", "bob"))

        assert result.success
        assert result.banner["result"] == "blocked"
        assert result.banner["total_attack"] == 12
        assert result.banner["defense"] == 13
        bob = state.get_player("bob")
        assert bob.defense.value == 13
        assert [c.value for c in bob.towers] == [9, 8]
        assert state.get_player("alice").charged is None
        assert {c.value for c in state.discard} == {9, 3}
        assert state.current_player.player_id == "bob"
        assert_cards_conserved(state)

    def test_blocked_by_oversized_defense(self, make_state):
        """Attack 12 against a defense of 15 never gets through."""
        state = make_state(
            [
                {"id": "alice", "towers": [5, 4], "charged": 2},
                {"id": "bob", "towers": [9, 8]},
            ],
            drawn=10,
        )
        bob = state.get_player("bob")
        bob.defense = PhysicalCard(suit=Suit.SPADES, value=15)

        result = apply_action(state, Action.attack("alice", "bob"))

        assert result.banner["result"] == "blocked"
        assert result.banner["total_attack"] == 12
        assert bob.defense.value == 15
        assert bob.tower_total == 17
        assert {c.value for c in state.discard} == {10, 2}

    def test_equal_attack_is_blocked(self, make_state):
        state = make_state(
            [
                {"id": "alice", "towers": [5, 4]},
                {"id": "bob", "towers": [9, 8], "defense": 7},
            ],
            drawn=7,
        )

        result = apply_action(state, Action.attack("alice", "bob"))

        assert result.banner["result"] == "blocked"
        assert state.get_player("bob").defense.value == 7

    def test_hit_spills_into_towers(self, two_player_state):
        """10 against defense 6 deals 4 to the 9 tower."""
        state = two_player_state

        result = apply_action(state, Action.attack("alice", "bob"))

        assert result.success
        assert result.banner == {
            "type": "attack",
            "attacker": "Alice",
            "target": "Bob",
            "total_attack": 10,
            "defense": 6,
            "result": "hit",
            "damage": 4,
        }
        bob = state.get_player("bob")
        assert bob.defense is None
        assert [c.value for c in bob.towers] == [5, 8]
        assert state.current_player.player_id == "bob"
        assert_cards_conserved(state)

    def test_hit_without_defense(self, make_state):
        state = make_state(
            [
                {"id": "alice", "towers": [5, 4]},
                {"id": "bob", "towers": [9, 8]},
            ],
            drawn=3,
        )

        result = apply_action(state, Action.attack("alice", "bob"))

        assert result.banner["damage"] == 3
        assert state.get_player("bob").tower_total == 14

    def test_hit_destroys_target_charge(self, make_state):
        state = make_state(
            [
                {"id": "alice", "towers": [5, 4]},
                {"id": "bob", "towers": [9, 8], "defense": 2, "charged": 12},
            ],
            drawn=6,
        )

        result = apply_action(state, Action.attack("alice", "bob"))

        assert state.get_player("bob").charged is None
        assert "Bob loses their charged card!" in result.state_changes
        assert_cards_conserved(state)

    def test_lethal_attack_ends_game(self, make_state):
        """14 + charged 6 = 20 against defense 5 on a single 14 tower."""
        state = make_state(
            [
                {"id": "alice", "towers": [5, 4], "charged": 6},
                {"id": "bob", "towers": [14], "defense": 5},
            ],
            drawn=14,
        )

        result = apply_action(state, Action.attack("alice", "bob"))

        assert result.success
        assert result.banner["damage"] == 15
        bob = state.get_player("bob")
        assert bob.eliminated
        assert bob.towers == []
        assert state.phase == GamePhase.ENDED
        assert state.winner_id == "alice"
        assert state.drawn_card is None
        assert_cards_conserved(state)

    def test_elimination_with_survivors_continues(self, make_state):
        state = make_state(
            [
                {"id": "alice", "towers": [12, 10], "charged": 14},
                {"id": "bob", "towers": [11, 9], "defense": 3},
                {"id": "carol", "towers": [13]},
            ],
            drawn=8,
        )

        # 8 + 14 = 22 against a lone 13 tower
        result = apply_action(state, Action.attack("alice", "carol"))

        assert result.success
        assert state.get_player("carol").eliminated
        assert state.phase == GamePhase.ACTION
        assert state.current_player.player_id == "bob"
        assert_cards_conserved(state)

    def test_invalid_targets(self, two_player_state):
        state = two_player_state
        before = state.clone()

        for target in ("alice", "nobody", None):
            result = apply_action(state, Action.attack("alice", target))
            assert not result.success
            assert result.error_code == ActionErrorCode.INVALID_TARGET
        assert state == before

    def test_eliminated_target(self, three_player_state):
        state = three_player_state
        state.get_player("bob").eliminated = True
        before = state.clone()

        result = apply_action(state, Action.attack("alice", "bob"))

        assert result.error_code == ActionErrorCode.INVALID_TARGET
        assert state == before


class TestTurnPreconditions:
    """Every turn action shares the same preconditions."""

    @pytest.mark.parametrize("action", [
        Action.attack("bob", "alice"),
        Action.defend("bob"),
        Action.charge("bob"),
        Action.discard("bob"),
        Action.pact("bob", "alice"),
    ])
    def test_not_your_turn(self, two_player_state, action):
        state = two_player_state
        before = state.clone()

        result = apply_action(state, action)

        assert not result.success
        assert result.error_code == ActionErrorCode.NOT_YOUR_TURN
        assert state == before

    def test_game_ended(self, two_player_state):
        state = two_player_state
        state.phase = GamePhase.ENDED
        before = state.clone()

        result = apply_action(state, Action.defend("alice"))

        assert result.error_code == ActionErrorCode.GAME_ENDED
        assert state == before

    def test_no_card_drawn(self, two_player_state):
        state = two_player_state
        state.discard.append(state.drawn_card)
        state.drawn_card = None
        before = state.clone()

        result = apply_action(state, Action.charge("alice"))

        assert result.error_code == ActionErrorCode.NO_CARD_DRAWN
        assert state == before

    def test_unknown_action(self, two_player_state):
        state = two_player_state
        before = state.clone()

        action = Action.parse("alice", "fireball")
        result = Reducer().apply(state, action)

        assert action.action_type == "fireball"
        assert not result.success
        assert result.error_code == ActionErrorCode.UNKNOWN_ACTION
        assert state == before


class TestPactAction:
    """Tests for pact proposal."""

    def test_pact_forms_mirrored_records(self, pact_state):
        state = pact_state

        result = apply_action(state, Action.pact("alice", "bob"))

        assert result.success
        assert result.banner == {"type": "pact", "from": "Alice", "to": "Bob"}
        alice, bob = state.get_player("alice"), state.get_player("bob")
        assert alice.pact.with_id == "bob"
        assert alice.pact.role == PactRole.PROPOSER
        assert bob.pact.with_id == "alice"
        assert bob.pact.role == PactRole.PROTECTED
        # Aged once by the turn advance that followed
        assert alice.pact.turns_left == 1
        assert bob.pact.turns_left == 1
        assert [c.value for c in state.discard] == [8]
        assert state.current_player.player_id == "bob"
        assert_cards_conserved(state)

    def test_pact_expires_on_second_advance(self, pact_state):
        state = pact_state
        apply_action(state, Action.pact("alice", "bob"))

        apply_action(state, Action.discard("bob"))

        assert state.get_player("alice").pact is None
        assert state.get_player("bob").pact is None
        assert any(e.message == "Pact between Alice and Bob expired." for e in state.log)

    def test_pact_disabled(self, pact_state):
        state = pact_state
        state.pact_enabled = False
        before = state.clone()

        result = apply_action(state, Action.pact("alice", "bob"))

        assert result.error_code == ActionErrorCode.PACT_NOT_ALLOWED
        assert state == before

    def test_pact_needs_single_tower(self, three_player_state):
        state = three_player_state
        state.pact_enabled = True

        result = apply_action(state, Action.pact("alice", "bob"))

        assert result.error_code == ActionErrorCode.PACT_NOT_ALLOWED

    def test_pact_while_in_pact(self, pact_state):
        state = pact_state
        form_pact(state.get_player("alice"), state.get_player("carol"))

        result = apply_action(state, Action.pact("alice", "bob"))

        assert result.error_code == ActionErrorCode.PACT_NOT_ALLOWED

    def test_invalid_pact_targets(self, pact_state):
        state = pact_state
        form_pact(state.get_player("bob"), state.get_player("carol"))
        before = state.clone()

        for target in ("alice", "nobody", "carol"):
            result = apply_action(state, Action.pact("alice", target))
            assert result.error_code == ActionErrorCode.INVALID_PACT_TARGET
        assert state == before

    def test_pact_blocks_attack(self, pact_state):
        state = pact_state
        form_pact(state.get_player("alice"), state.get_player("bob"))
        before = state.clone()

        result = apply_action(state, Action.attack("alice", "bob"))

        assert result.error_code == ActionErrorCode.PACT_BLOCKS_ATTACK
        assert state == before

    def test_protected_side_is_blocked_too(self, pact_state):
        state = pact_state
        form_pact(state.get_player("bob"), state.get_player("alice"))

        result = apply_action(state, Action.attack("alice", "bob"))

        assert result.error_code == ActionErrorCode.PACT_BLOCKS_ATTACK

    def test_penalty_breach(self, pact_state):
        """Under penalty the attack lands but the attacker loses defense and pact."""
        state = pact_state
        state.pact_breach = PactBreach.PENALTY
        alice, bob = state.get_player("alice"), state.get_player("bob")
        form_pact(alice, bob)

        result = apply_action(state, Action.attack("alice", "bob"))

        assert result.success
        assert alice.defense is None
        assert alice.pact is None
        assert bob.pact is None
        assert "Alice breaks the pact with Bob and loses their defense!" in result.state_changes
        # 8 against defense 3
        assert result.banner["damage"] == 5
        assert [c.value for c in bob.towers] == [6, 9]
        assert_cards_conserved(state)


class TestBreakPactAction:
    """Tests for break_pact (free action)."""

    def test_break_pact_is_state_only(self, pact_state):
        state = pact_state
        alice, bob = state.get_player("alice"), state.get_player("bob")
        form_pact(alice, bob)
        drawn = state.drawn_card

        result = apply_action(state, Action.break_pact("alice"))

        assert result.success
        assert result.state_only
        assert alice.pact is None
        assert bob.pact is None
        assert state.drawn_card is drawn
        assert state.current_player.player_id == "alice"
        assert state.turn_number == 1
        assert state.log[-1].message == "Alice ends the pact with Bob."

    def test_break_pact_off_turn(self, pact_state):
        state = pact_state
        form_pact(state.get_player("alice"), state.get_player("bob"))

        result = apply_action(state, Action.break_pact("bob"))

        assert result.success
        assert state.get_player("alice").pact is None

    def test_break_pact_without_pact(self, pact_state):
        state = pact_state
        before = state.clone()

        result = apply_action(state, Action.break_pact("alice"))

        assert result.error_code == ActionErrorCode.NO_ACTIVE_PACT
        assert state == before

    def test_break_pact_unknown_player(self, pact_state):
        result = apply_action(pact_state, Action.break_pact("zed"))
        assert result.error_code == ActionErrorCode.UNKNOWN_PLAYER

    def test_action_type_parsing(self):
        action = Action.parse("alice", "break_pact")
        assert action.action_type == ActionType.BREAK_PACT
        assert action.target_id is None
