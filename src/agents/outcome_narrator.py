# ABOUTME: Outcome narration agent describing the result of one rolled action.
# ABOUTME: Always returns prose; falls back to a templated line per outcome tier on AI failure.

from loguru import logger

from src.agents.exceptions import ParseError, TransportError
from src.agents.llm_client import LLMClient
from src.agents.shared import build_full_context, parse_json_payload
from src.config.prompts import OUTCOME_SCHEMA, OUTCOME_SYSTEM_PROMPT
from src.models.actions import ValidatedAction
from src.models.dice_models import RollOutcome
from src.models.narrative import NarrativeContext, OutcomeNarrative

SCENE_EXCERPT_CHARS = 1500

FALLBACK_CONSEQUENCES = {
    RollOutcome.CRITICAL_FAIL: "A catastrophic failure. The consequences will be felt for a long time.",
    RollOutcome.FAIL: "The attempt fails. The world pushes back and obstacles appear.",
    RollOutcome.PARTIAL: "A partial success: something is gained, but at an unexpected cost.",
    RollOutcome.SUCCESS: "Success! The action unfolds as planned, opening new possibilities.",
    RollOutcome.CRITICAL: "An absolute triumph! Fate smiles and locked doors swing open.",
}


def difficulty_tier(difficulty: int) -> str:
    """Coarse difficulty band used to keep consequences proportional"""
    if difficulty >= 15:
        return "HIGH"
    if difficulty >= 10:
        return "MEDIUM"
    return "LOW"


def fallback_outcome(action: ValidatedAction, outcome: RollOutcome) -> OutcomeNarrative:
    """Templated narration derived only from the outcome tier"""
    consequence = FALLBACK_CONSEQUENCES[outcome]
    return OutcomeNarrative(text=f"{action.description} - {consequence}", consequence=consequence)


class OutcomeNarrator:
    """Narrates the immediate result of one action; never advances the main plot"""

    def __init__(self, llm_client: LLMClient, max_tokens: int = 800, timeout: float = 25.0):
        self._llm_client = llm_client
        self.max_tokens = max_tokens
        self.timeout = timeout

    async def narrate_outcome(
        self,
        context: NarrativeContext,
        action: ValidatedAction,
        outcome: RollOutcome,
        roll_total: int,
        character_name: str,
        scene_text: str | None = None,
    ) -> OutcomeNarrative:
        """
        Narrate a resolved roll. Failures are narrated too.

        Args:
            context: Round snapshot
            action: Action that was rolled
            outcome: Outcome tier
            roll_total: d20 plus modifier
            character_name: Acting character's name
            scene_text: Current scene description

        Returns:
            Narration; the templated fallback when the AI call fails
        """
        try:
            raw = await self._llm_client.complete(
                OUTCOME_SYSTEM_PROMPT,
                self._build_prompt(context, action, outcome, roll_total, character_name, scene_text),
                self.max_tokens,
                self.timeout,
            )
            data = parse_json_payload(raw)
        except (TransportError, ParseError) as e:
            logger.warning(f"Outcome narration failed for {character_name}, using fallback: {e}")
            return fallback_outcome(action, outcome)

        text = data.get("text")
        consequence = data.get("consequence")
        if not isinstance(text, str) or not text.strip():
            logger.warning(f"Outcome narration for {character_name} had no text, using fallback")
            return fallback_outcome(action, outcome)

        if not isinstance(consequence, str) or not consequence.strip():
            consequence = FALLBACK_CONSEQUENCES[outcome]
        return OutcomeNarrative(text=text.strip(), consequence=consequence.strip())

    def _build_prompt(
        self,
        context: NarrativeContext,
        action: ValidatedAction,
        outcome: RollOutcome,
        roll_total: int,
        character_name: str,
        scene_text: str | None,
    ) -> str:
        prompt = build_full_context(context) + "\n"
        if scene_text:
            prompt += f'CURRENT SCENE:\n"{scene_text[:SCENE_EXCERPT_CHARS]}"\n\n'

        if outcome.is_success:
            rule = (
                "The action worked, with a cost or complication."
                if outcome == RollOutcome.PARTIAL
                else "The action WORKED. Narrate a real achievement."
            )
        else:
            rule = "The action FAILED. The narration must show real failure."

        prompt += (
            f"ACTING CHARACTER: {character_name} (refer to them by name)\n"
            f'Action: "{action.description}"\n'
            f"Attribute tested: {action.primary_attribute.value}\n"
            f"Difficulty: {action.difficulty} ({difficulty_tier(action.difficulty)})\n"
            f"Roll result: {roll_total} -> {outcome.value}\n"
            f"RULE: {rule}\n"
            "Keep consequences proportional to the difficulty. Plain prose, no tags.\n"
            + OUTCOME_SCHEMA
        )
        return prompt
