# ABOUTME: Unit tests for shared JSON parsing and prompt context builders.
# ABOUTME: Covers embedded JSON extraction, truncation repair and outcome summaries.

import pytest

from src.agents.exceptions import ParseError
from src.agents.shared import (
    OUTCOME_SUMMARY_CHARS,
    build_full_context,
    build_outcome_summaries,
    outcome_label,
    parse_json_payload,
)
from src.models.dice_models import RollOutcome
from src.models.game_state import ResolvedOutcome
from src.models.narrative import OutcomeNarrative
from src.utils.dice import resolve_roll
from tests.factories import make_action


class TestParseJsonPayload:
    """Test suite for parse_json_payload function"""

    def test_plain_object(self):
        """Test a clean JSON object parses"""
        assert parse_json_payload('{"title": "Bells"}') == {"title": "Bells"}

    def test_object_wrapped_in_prose(self):
        """Test text around the object is ignored"""
        raw = 'Sure! Here it is:\n```json\n{"a": 1, "b": {"c": 2}}\n```\nEnjoy.'

        assert parse_json_payload(raw) == {"a": 1, "b": {"c": 2}}

    def test_truncated_array_repaired(self):
        """Test a response cut after an array element is repaired"""
        raw = '{"actions": [{"characterId": "c1", "difficulty": 12},'

        assert parse_json_payload(raw) == {
            "actions": [{"characterId": "c1", "difficulty": 12}]
        }

    def test_missing_final_brace_repaired(self):
        """Test a response missing its closing brace is repaired"""
        assert parse_json_payload('{"title": "Bells", "mood": "Medo"') == {
            "title": "Bells",
            "mood": "Medo",
        }

    def test_no_object_raises(self):
        """Test responses without an object raise ParseError"""
        with pytest.raises(ParseError, match="no JSON object"):
            parse_json_payload("I cannot help with that.")

    def test_unrepairable_raises(self):
        """Test garbage inside braces raises ParseError"""
        with pytest.raises(ParseError):
            parse_json_payload("{title: Bells, ???}")


class TestContextBuilders:
    """Test suite for prompt context builders"""

    def test_full_context_mentions_world_location_party(self, narrative_context):
        """Test every context block is rendered"""
        text = build_full_context(narrative_context)

        assert "Ashes of Valdren" in text
        assert "CURRENT ACT" in text
        assert "Valdren Square" in text
        assert "Mayor Hedda" in text
        assert "[ID: char-mira]" in text
        assert "[item:Focus Tonic](x2)" in text
        assert "ITEMS ALREADY OWNED" in text


class TestOutcomeSummaries:
    """Test suite for outcome summary helpers"""

    @pytest.mark.parametrize(
        "outcome,label",
        [
            (RollOutcome.CRITICAL_FAIL, "FAILED"),
            (RollOutcome.FAIL, "FAILED"),
            (RollOutcome.PARTIAL, "PARTIAL"),
            (RollOutcome.SUCCESS, "SUCCESS"),
            (RollOutcome.CRITICAL, "SUCCESS"),
        ],
    )
    def test_outcome_label(self, outcome, label):
        """Test coarse labels per tier"""
        assert outcome_label(outcome) == label

    def test_summary_truncates_narrative(self):
        """Test narratives are truncated in summaries"""
        resolved = ResolvedOutcome(
            character_id="c1",
            character_name="Mira",
            action=make_action("c1", "I climb the tower", difficulty=12),
            roll=resolve_roll(3, 12, 15),
            narrative=OutcomeNarrative(text="x" * 1000),
        )

        [summary] = build_outcome_summaries([resolved])

        assert summary.startswith("Mira tried: I climb the tower [SUCCESS]")
        assert "difficulty 12" in summary
        assert summary.endswith("x" * OUTCOME_SUMMARY_CHARS)
        assert "x" * (OUTCOME_SUMMARY_CHARS + 1) not in summary
