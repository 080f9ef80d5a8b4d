# ABOUTME: Loot agent producing item and gold grants for successful inventory-affecting actions.
# ABOUTME: Discards incomplete items, caps rarity by outcome tier, and falls back to location items.

import random
from typing import Any
from uuid import uuid4

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.agents.exceptions import ParseError, TransportError
from src.agents.llm_client import LLMClient
from src.agents.shared import build_full_context, parse_json_payload
from src.config.prompts import LOOT_SCHEMA, LOOT_SYSTEM_PROMPT
from src.models.actions import ValidatedAction
from src.models.dice_models import RollOutcome
from src.models.equipment import Equipment, EquipmentType, Rarity, UsageContext
from src.models.narrative import GoldChange, ItemGrant, LootResult, NarrativeContext

BASELINE_RARITY = Rarity.INCOMUM
FALLBACK_SELL_PRICE = 5
SCENE_EXCERPT_CHARS = 1000


def rarity_for_outcome(outcome: RollOutcome) -> Rarity | None:
    """
    Maximum rarity a tier may yield.

    critical raises the baseline one step, success keeps it, partial lowers it
    one step. Failure tiers yield nothing.
    """
    if outcome == RollOutcome.CRITICAL:
        return BASELINE_RARITY.raised()
    if outcome == RollOutcome.SUCCESS:
        return BASELINE_RARITY
    if outcome == RollOutcome.PARTIAL:
        return BASELINE_RARITY.lowered()
    return None


class GeneratedItem(BaseModel):
    """AI-authored item; every field is required"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    character_id: str | None = Field(default=None, alias="characterId")
    name: str = Field(min_length=1)
    description: str
    type: EquipmentType
    rarity: Rarity
    bonus: dict[str, int]
    difficulty_reduction: int = Field(alias="difficultyReduction", ge=0)
    hp_restore: int = Field(alias="hpRestore", ge=0)
    sell_price: int = Field(alias="sellPrice", ge=0)
    consumable: bool
    equippable: bool
    stackable: bool
    usage_context: UsageContext = Field(alias="usageContext")

    def to_equipment(self, cap: Rarity) -> Equipment:
        rarity = self.rarity if self.rarity.rank <= cap.rank else cap
        return Equipment(
            id=f"gen-{uuid4().hex[:12]}",
            name=self.name.strip(),
            description=self.description,
            type=self.type,
            rarity=rarity,
            bonus=self.bonus,
            difficulty_reduction=self.difficulty_reduction,
            hp_restore=self.hp_restore,
            sell_price=self.sell_price,
            consumable=self.consumable,
            equippable=self.equippable,
            stackable=self.stackable,
            usage_context=self.usage_context,
        )


class LootGenerator:
    """
    Decides which items and gold an action yields.

    Only called for inventory-affecting actions with a successful tier; the tier
    guard is repeated here so fail tiers can never produce loot.
    """

    def __init__(
        self,
        llm_client: LLMClient,
        max_tokens: int = 1200,
        timeout: float = 25.0,
        rng: random.Random | None = None,
    ):
        self._llm_client = llm_client
        self.max_tokens = max_tokens
        self.timeout = timeout
        self._rng = rng or random.Random()

    async def generate_loot(
        self,
        context: NarrativeContext,
        action: ValidatedAction,
        outcome: RollOutcome,
        roll_total: int,
        character_id: str | None = None,
        scene_text: str | None = None,
    ) -> LootResult:
        """
        Generate loot for a resolved action.

        Args:
            context: Round snapshot
            action: Rolled action
            outcome: Outcome tier
            roll_total: d20 plus modifier
            character_id: Acting character
            scene_text: Current scene description

        Returns:
            Items and gold to apply; the location fallback when the AI call fails
        """
        cap = rarity_for_outcome(outcome)
        if cap is None:
            return LootResult()

        try:
            raw = await self._llm_client.complete(
                LOOT_SYSTEM_PROMPT,
                self._build_prompt(context, action, outcome, roll_total, character_id, cap, scene_text),
                self.max_tokens,
                self.timeout,
            )
            data = parse_json_payload(raw)
        except (TransportError, ParseError) as e:
            logger.warning(f"Loot generation failed, using location fallback: {e}")
            return self.fallback_loot(context, outcome, character_id)

        result = LootResult(
            items=self._parse_items(data.get("items"), cap),
            gold=self._parse_gold(data.get("gold")),
        )
        logger.info(
            f"Loot for {character_id}: {len(result.items)} items, "
            f"{sum(g.amount for g in result.gold)} gold"
        )
        return result

    def fallback_loot(
        self,
        context: NarrativeContext,
        outcome: RollOutcome,
        character_id: str | None,
    ) -> LootResult:
        """Instantiate a random location item at the tier's rarity; empty when none exist"""
        rarity = rarity_for_outcome(outcome)
        if rarity is None or not context.content.items:
            return LootResult()

        descriptor = self._rng.choice(context.content.items)
        equipment = Equipment(
            id=f"gen-fallback-{uuid4().hex[:12]}",
            name=descriptor.name,
            description=descriptor.description,
            type=descriptor.type,
            rarity=rarity,
            sell_price=FALLBACK_SELL_PRICE,
            usage_context=UsageContext.PASSIVO,
        )
        return LootResult(items=[ItemGrant(equipment=equipment, character_id=character_id)])

    @staticmethod
    def _parse_items(entries: Any, cap: Rarity) -> list[ItemGrant]:
        if not isinstance(entries, list):
            return []
        grants = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            try:
                item = GeneratedItem.model_validate(entry)
            except ValidationError as e:
                logger.warning(
                    f"Discarding incomplete generated item {entry.get('name')!r}: "
                    f"{e.error_count()} errors"
                )
                continue
            grants.append(ItemGrant(equipment=item.to_equipment(cap), character_id=item.character_id))
        return grants

    @staticmethod
    def _parse_gold(entries: Any) -> list[GoldChange]:
        if not isinstance(entries, list):
            return []
        changes = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            amount = entry.get("amount")
            if isinstance(amount, bool) or not isinstance(amount, int | float):
                continue
            character_id = entry.get("characterId")
            changes.append(
                GoldChange(
                    character_id=character_id if isinstance(character_id, str) else None,
                    amount=int(amount),
                )
            )
        return changes

    def _build_prompt(
        self,
        context: NarrativeContext,
        action: ValidatedAction,
        outcome: RollOutcome,
        roll_total: int,
        character_id: str | None,
        cap: Rarity,
        scene_text: str | None,
    ) -> str:
        prompt = build_full_context(context) + "\n"
        if scene_text:
            prompt += f'CURRENT SCENE:\n"{scene_text[:SCENE_EXCERPT_CHARS]}"\n\n'
        prompt += (
            f"ACTING CHARACTER ID: {character_id}\n"
            f'Action: "{action.description}"\n'
            f"Roll result: {roll_total} vs difficulty {action.difficulty} -> {outcome.value}\n"
            f"MAXIMUM RARITY: {cap.value}\n"
            "TASK: Decide what the party obtains from this action.\n"
            + LOOT_SCHEMA
        )
        return prompt
