# ABOUTME: Rules-judge agent turning free-text intents into structured ValidatedActions.
# ABOUTME: Clamps and defaults every field, corrects item targets, and fails open on AI errors.

from collections.abc import Sequence
from typing import Any

from loguru import logger

from src.agents.exceptions import NoActionError, ParseError, TransportError
from src.agents.llm_client import LLMClient
from src.agents.shared import build_full_context, parse_json_payload
from src.config.prompts import VALIDATION_SCHEMA, VALIDATOR_SYSTEM_PROMPT
from src.models.actions import ActionSubmission, RiskLevel, TagCategory, ValidatedAction
from src.models.character import PrimaryAttribute
from src.models.narrative import NarrativeContext

MIN_DIFFICULTY = 5
MAX_DIFFICULTY = 20
DEFAULT_DIFFICULTY = 12
SCENE_EXCERPT_CHARS = 600
FALLBACK_REASON = "auto validation (fallback)"


# ============================================================================
# Field normalization
# ============================================================================


def clamp_difficulty(value: Any) -> int:
    """Coerce to int and clamp to 5-20; non-numeric values become 12"""
    if isinstance(value, bool):
        return DEFAULT_DIFFICULTY
    try:
        difficulty = int(round(float(value)))
    except (TypeError, ValueError):
        return DEFAULT_DIFFICULTY
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, difficulty))


def parse_attribute(value: Any) -> PrimaryAttribute:
    """Map to one of the six attributes; unrecognized values become percepcao"""
    if isinstance(value, str):
        try:
            return PrimaryAttribute(value.strip().lower())
        except ValueError:
            pass
    return PrimaryAttribute.PERCEPCAO


def parse_risk(value: Any) -> RiskLevel:
    """Map to a risk level; unrecognized values become medium"""
    if isinstance(value, str):
        try:
            return RiskLevel(value.strip().lower())
        except ValueError:
            pass
    return RiskLevel.MEDIUM


def _target_fields(submission: ActionSubmission) -> dict[str, Any]:
    if submission.target is None:
        return {"target_text": None, "target_category": None}
    return {
        "target_text": submission.target.text,
        "target_category": submission.target.category,
    }


def fallback_action(submission: ActionSubmission) -> ValidatedAction:
    """Accept an action with default classification"""
    return ValidatedAction(
        character_id=submission.character_id,
        description=submission.text.strip(),
        primary_attribute=PrimaryAttribute.PERCEPCAO,
        difficulty=DEFAULT_DIFFICULTY,
        risk_level=RiskLevel.MEDIUM,
        affects_inventory=False,
        valid=True,
        reason=FALLBACK_REASON,
        **_target_fields(submission),
    )


def normalize_action(entry: dict[str, Any], submission: ActionSubmission) -> ValidatedAction:
    """Build a ValidatedAction from one raw validator entry"""
    description = entry.get("description")
    if not isinstance(description, str) or not description.strip():
        description = submission.text.strip()
    reason = entry.get("reason")
    valid = entry.get("valid", True)

    return ValidatedAction(
        character_id=submission.character_id,
        description=description.strip(),
        primary_attribute=parse_attribute(entry.get("primaryAttribute")),
        difficulty=clamp_difficulty(entry.get("difficulty")),
        risk_level=parse_risk(entry.get("riskLevel")),
        affects_inventory=entry.get("affectsInventory") is True,
        valid=valid if isinstance(valid, bool) else True,
        reason=reason if isinstance(reason, str) else "",
        **_target_fields(submission),
    )


def apply_target_corrections(
    action: ValidatedAction, submission: ActionSubmission
) -> ValidatedAction:
    """Force affects_inventory for actions aimed at an item tag"""
    if (
        submission.target is not None
        and submission.target.category == TagCategory.ITEM
        and not action.affects_inventory
    ):
        logger.debug(
            f"Forcing affects_inventory for {submission.character_id}: item target "
            f"'{submission.target.text}'"
        )
        return action.model_copy(update={"affects_inventory": True})
    return action


# ============================================================================
# Validator
# ============================================================================


class ActionValidator:
    """
    Classifies the round's actions for dice resolution.

    Never blocks play on AI failure: if the call fails outright every action is
    accepted with default classification.
    """

    def __init__(self, llm_client: LLMClient, max_tokens: int = 1500, timeout: float = 25.0):
        self._llm_client = llm_client
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def validate(
        self,
        context: NarrativeContext,
        submissions: Sequence[ActionSubmission],
        scene_text: str | None = None,
        previous_outcomes_summary: str | None = None,
    ) -> list[ValidatedAction]:
        """
        Validate the round's actions.

        Skipped and blank submissions are dropped; the result has one entry per
        remaining submission, in submission order.

        Args:
            context: Round snapshot
            submissions: One submission per party member
            scene_text: Current scene description
            previous_outcomes_summary: Summary of the previous round's outcomes

        Returns:
            Validated actions, in submission order

        Raises:
            NoActionError: If no submission is actionable (raised before any AI call)
        """
        actionable = [s for s in submissions if s.is_actionable]
        if not actionable:
            raise NoActionError("At least one character must describe an action")

        try:
            raw = await self._llm_client.complete(
                VALIDATOR_SYSTEM_PROMPT,
                self._build_prompt(context, actionable, scene_text, previous_outcomes_summary),
                self.max_tokens,
                self.timeout,
            )
            entries = self._entries_by_character(parse_json_payload(raw))
        except (TransportError, ParseError) as e:
            logger.warning(f"Action validation failed, accepting all actions: {e}")
            return [apply_target_corrections(fallback_action(s), s) for s in actionable]

        validated = []
        for submission in actionable:
            entry = entries.get(submission.character_id)
            if entry is None:
                logger.warning(
                    f"Validator returned no entry for {submission.character_id}, accepting"
                )
                action = fallback_action(submission)
            else:
                action = normalize_action(entry, submission)
            validated.append(apply_target_corrections(action, submission))

        logger.info(
            f"Validated {len(validated)} actions "
            f"({sum(1 for a in validated if a.valid)} valid)"
        )
        return validated

    def _build_prompt(
        self,
        context: NarrativeContext,
        submissions: Sequence[ActionSubmission],
        scene_text: str | None,
        previous_outcomes_summary: str | None,
    ) -> str:
        lines = []
        for submission in submissions:
            member = context.character(submission.character_id)
            name = member.name if member else submission.character_id
            lines.append(f"  - {name} [ID: {submission.character_id}]: {submission.prompt_text()}")

        prompt = build_full_context(context) + "\n"
        if scene_text:
            prompt += f'CURRENT SCENE:\n"{scene_text[:SCENE_EXCERPT_CHARS]}"\n\n'
        if previous_outcomes_summary:
            prompt += f"PREVIOUS OUTCOMES:\n{previous_outcomes_summary}\n\n"
        prompt += "ACTIONS TO VALIDATE:\n" + "\n".join(lines) + "\n" + VALIDATION_SCHEMA
        return prompt

    @staticmethod
    def _entries_by_character(data: dict[str, Any]) -> dict[str, dict[str, Any]]:
        actions = data.get("actions")
        if not isinstance(actions, list):
            raise ParseError("Validator response has no 'actions' list")
        entries: dict[str, dict[str, Any]] = {}
        for entry in actions:
            if isinstance(entry, dict) and isinstance(entry.get("characterId"), str):
                entries.setdefault(entry["characterId"], entry)
        return entries
