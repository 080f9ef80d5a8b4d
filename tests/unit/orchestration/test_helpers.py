# ABOUTME: Unit tests for resolution node helpers and conditional edges.
# ABOUTME: Covers the grant recipient fallback chain and loot routing.

from src.orchestration.nodes.conditional_edges import should_generate_loot
from src.orchestration.nodes.helpers import (
    find_character,
    replace_character,
    resolve_target_character,
)
from src.utils.dice import resolve_roll
from tests.factories import make_action


class TestResolveTargetCharacter:
    """Test suite for resolve_target_character function"""

    def test_suggested_party_member(self, party):
        assert resolve_target_character(party, "char-tobias", "char-mira").id == "char-tobias"

    def test_unknown_suggestion_falls_back_to_actor(self, party):
        assert resolve_target_character(party, "char-ghost", "char-tobias").id == "char-tobias"

    def test_no_suggestion_uses_actor(self, party):
        assert resolve_target_character(party, None, "char-tobias").id == "char-tobias"

    def test_actor_gone_uses_first_member(self, party):
        assert resolve_target_character(party, None, "char-ghost").id == "char-mira"

    def test_empty_party(self):
        assert resolve_target_character([], "char-mira", "char-mira") is None


class TestPartyHelpers:
    """Test suite for find_character and replace_character"""

    def test_replace_keeps_order(self, party, tobias):
        rich = tobias.model_copy(update={"gold": 99})

        updated = replace_character(party, rich)

        assert [m.id for m in updated] == ["char-mira", "char-tobias"]
        assert updated[1].gold == 99
        assert party[1].gold == 10

    def test_find_character(self, party):
        assert find_character(party, "char-mira").name == "Mira"
        assert find_character(party, "char-ghost") is None


class TestShouldGenerateLoot:
    """Test suite for should_generate_loot conditional edge"""

    def _state(self, affects_inventory: bool, raw: int, modifier: int = 0):
        return {
            "action": make_action("char-mira", difficulty=10, affects_inventory=affects_inventory),
            "roll": resolve_roll(modifier, 10, raw),
        }

    def test_success_with_inventory_routes_to_loot(self):
        assert should_generate_loot(self._state(True, 15)) == "loot"

    def test_partial_with_inventory_routes_to_loot(self):
        assert should_generate_loot(self._state(True, 10)) == "loot"

    def test_failure_skips_loot(self):
        assert should_generate_loot(self._state(True, 6)) == "skip"

    def test_non_inventory_action_skips_loot(self):
        assert should_generate_loot(self._state(False, 20)) == "skip"
