# ABOUTME: Unit tests for the ActionValidator agent.
# ABOUTME: Covers clamping and defaults, item-target corrections, fail-open behavior and skip handling.

import pytest

from src.agents.action_validator import (
    DEFAULT_DIFFICULTY,
    FALLBACK_REASON,
    ActionValidator,
    clamp_difficulty,
    parse_attribute,
    parse_risk,
)
from src.agents.exceptions import NoActionError, ParseError, TransportError
from src.models.actions import ActionSubmission, RiskLevel, SelectedTarget, TagCategory
from src.models.character import PrimaryAttribute
from tests.factories import completion


def _entry(character_id: str, **overrides) -> dict:
    entry = {
        "characterId": character_id,
        "valid": True,
        "reason": "plausible",
        "description": "Searches the well",
        "primaryAttribute": "percepcao",
        "difficulty": 12,
        "riskLevel": "low",
        "affectsInventory": False,
    }
    entry.update(overrides)
    return entry


class TestFieldNormalization:
    """Test suite for validator field normalization helpers"""

    @pytest.mark.parametrize(
        "value,expected",
        [(99, 20), (0, 5), (-4, 5), (12, 12), ("14", 14), (13.6, 14), ("hard", 12), (None, 12)],
    )
    def test_clamp_difficulty(self, value, expected):
        """Test difficulty is clamped to 5-20 and non-numeric values default"""
        assert clamp_difficulty(value) == expected

    def test_clamp_difficulty_bool_defaults(self):
        """Test booleans are not treated as numbers"""
        assert clamp_difficulty(True) == DEFAULT_DIFFICULTY

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("forca", PrimaryAttribute.FORCA),
            (" Carisma ", PrimaryAttribute.CARISMA),
            ("luck", PrimaryAttribute.PERCEPCAO),
            (None, PrimaryAttribute.PERCEPCAO),
        ],
    )
    def test_parse_attribute(self, value, expected):
        """Test unrecognized attributes default to percepcao"""
        assert parse_attribute(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [("HIGH", RiskLevel.HIGH), ("extreme", RiskLevel.MEDIUM), (3, RiskLevel.MEDIUM)],
    )
    def test_parse_risk(self, value, expected):
        """Test unrecognized risk levels default to medium"""
        assert parse_risk(value) == expected


class TestActionValidator:
    """Test suite for ActionValidator.validate"""

    @pytest.mark.asyncio
    async def test_out_of_range_difficulties_clamped(
        self, mock_llm_client, narrative_context, submissions
    ):
        """Test difficulties 99 and 0 come back as 20 and 5"""
        mock_llm_client.complete.return_value = completion({
            "actions": [
                _entry("char-mira", difficulty=99),
                _entry("char-tobias", difficulty=0, primaryAttribute="carisma"),
            ]
        })
        validator = ActionValidator(mock_llm_client)

        result = await validator.validate(narrative_context, submissions)

        assert [a.difficulty for a in result] == [20, 5]
        assert result[1].primary_attribute == PrimaryAttribute.CARISMA

    @pytest.mark.asyncio
    async def test_result_in_submission_order(self, mock_llm_client, narrative_context, submissions):
        """Test results follow submission order, not response order"""
        mock_llm_client.complete.return_value = completion({
            "actions": [_entry("char-tobias"), _entry("char-mira")]
        })
        validator = ActionValidator(mock_llm_client)

        result = await validator.validate(narrative_context, submissions)

        assert [a.character_id for a in result] == ["char-mira", "char-tobias"]

    @pytest.mark.asyncio
    async def test_invalid_action_kept_with_reason(
        self, mock_llm_client, narrative_context, submissions
    ):
        """Test invalid verdicts are returned with their reason"""
        mock_llm_client.complete.return_value = completion({
            "actions": [
                _entry("char-mira"),
                _entry("char-tobias", valid=False, reason="The mayor left town"),
            ]
        })
        validator = ActionValidator(mock_llm_client)

        result = await validator.validate(narrative_context, submissions)

        assert result[0].valid is True
        assert result[1].valid is False
        assert result[1].reason == "The mayor left town"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [TransportError("down"), ParseError("garbage")])
    async def test_fails_open_on_ai_error(
        self, mock_llm_client, narrative_context, submissions, error
    ):
        """Test every action is accepted with defaults when the call fails"""
        mock_llm_client.complete.side_effect = error
        validator = ActionValidator(mock_llm_client)

        result = await validator.validate(narrative_context, submissions)

        assert len(result) == 2
        for action, submission in zip(result, submissions):
            assert action.valid is True
            assert action.difficulty == 12
            assert action.primary_attribute == PrimaryAttribute.PERCEPCAO
            assert action.risk_level == RiskLevel.MEDIUM
            assert action.reason == FALLBACK_REASON
            assert action.description == submission.text

    @pytest.mark.asyncio
    async def test_unparseable_response_fails_open(self, mock_llm_client, narrative_context, submissions):
        """Test a response without an actions list is treated as a failure"""
        mock_llm_client.complete.return_value = completion({"verdict": "ok"})
        validator = ActionValidator(mock_llm_client)

        result = await validator.validate(narrative_context, submissions)

        assert all(a.reason == FALLBACK_REASON for a in result)

    @pytest.mark.asyncio
    async def test_missing_entry_falls_back_for_that_character(
        self, mock_llm_client, narrative_context, submissions
    ):
        """Test a character absent from the response is accepted with defaults"""
        mock_llm_client.complete.return_value = completion({
            "actions": [_entry("char-mira", difficulty=8)]
        })
        validator = ActionValidator(mock_llm_client)

        result = await validator.validate(narrative_context, submissions)

        assert result[0].difficulty == 8
        assert result[1].reason == FALLBACK_REASON

    @pytest.mark.asyncio
    async def test_item_target_forces_affects_inventory(self, mock_llm_client, narrative_context):
        """Test an item target sets affects_inventory even when the judge said false"""
        submission = ActionSubmission(
            character_id="char-mira",
            text="I pick it up",
            target=SelectedTarget(text="Lantern Oil", category=TagCategory.ITEM),
        )
        mock_llm_client.complete.return_value = completion({
            "actions": [_entry("char-mira", affectsInventory=False)]
        })
        validator = ActionValidator(mock_llm_client)

        [action] = await validator.validate(narrative_context, [submission])

        assert action.affects_inventory is True
        assert action.target_text == "Lantern Oil"
        assert action.target_category == TagCategory.ITEM

    @pytest.mark.asyncio
    async def test_item_target_corrected_on_fallback(self, mock_llm_client, narrative_context):
        """Test the item correction also applies on the fail-open path"""
        submission = ActionSubmission(
            character_id="char-mira",
            text="I pick it up",
            target=SelectedTarget(text="Lantern Oil", category=TagCategory.ITEM),
        )
        mock_llm_client.complete.side_effect = TransportError("down")
        validator = ActionValidator(mock_llm_client)

        [action] = await validator.validate(narrative_context, [submission])

        assert action.affects_inventory is True

    @pytest.mark.asyncio
    async def test_target_prefix_in_prompt(self, mock_llm_client, narrative_context):
        """Test the selected target is prefixed to the action text"""
        submission = ActionSubmission(
            character_id="char-mira",
            text="I greet her",
            target=SelectedTarget(text="Mayor Hedda", category=TagCategory.NPC, label="NPC"),
        )
        mock_llm_client.complete.return_value = completion({"actions": [_entry("char-mira")]})
        validator = ActionValidator(mock_llm_client)

        await validator.validate(narrative_context, [submission], scene_text="The square.")

        user_prompt = mock_llm_client.complete.call_args.args[1]
        assert "[Target: Mayor Hedda (NPC)] I greet her" in user_prompt
        assert "CURRENT SCENE" in user_prompt

    @pytest.mark.asyncio
    async def test_skipped_submissions_dropped(self, mock_llm_client, narrative_context):
        """Test skipped and blank submissions produce no entries"""
        subs = [
            ActionSubmission(character_id="char-mira", text="I search", skip=False),
            ActionSubmission(character_id="char-tobias", text="ignored", skip=True),
        ]
        mock_llm_client.complete.return_value = completion({"actions": [_entry("char-mira")]})
        validator = ActionValidator(mock_llm_client)

        result = await validator.validate(narrative_context, subs)

        assert [a.character_id for a in result] == ["char-mira"]

    @pytest.mark.asyncio
    async def test_all_skipped_raises_before_ai_call(self, mock_llm_client, narrative_context):
        """Test NoActionError is raised without calling the model"""
        subs = [
            ActionSubmission(character_id="char-mira", skip=True),
            ActionSubmission(character_id="char-tobias", text="   "),
        ]
        validator = ActionValidator(mock_llm_client)

        with pytest.raises(NoActionError):
            await validator.validate(narrative_context, subs)

        mock_llm_client.complete.assert_not_called()
