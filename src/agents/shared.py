# ABOUTME: JSON payload parsing and prompt context builders shared by every AI stage.
# ABOUTME: Renders world, location, party and owned-item blocks from a NarrativeContext.

import json
import re
from collections.abc import Sequence
from typing import Any

from loguru import logger

from src.agents.exceptions import ParseError
from src.models.character import Character
from src.models.dice_models import RollOutcome
from src.models.equipment import Equipment
from src.models.game_state import ResolvedOutcome
from src.models.narrative import NarrativeContext
from src.models.world import Location, LocationContent, World

OUTCOME_SUMMARY_CHARS = 400

_TRAILING_COMMA = re.compile(r",\s*$")


# ============================================================================
# JSON Parsing
# ============================================================================


def parse_json_payload(raw: str) -> dict[str, Any]:
    """
    Extract the JSON object embedded in a model response.

    Takes the text between the first "{" and the last "}". When that does not
    parse, one repair pass over everything after the first "{" strips a
    trailing comma and appends the missing closing brackets and braces before
    a single retry.

    Args:
        raw: Response text

    Returns:
        Parsed JSON object

    Raises:
        ParseError: If no object can be recovered
    """
    start = raw.find("{")
    if start == -1:
        raise ParseError("Response contains no JSON object")
    end = raw.rfind("}")

    payload = raw[start:end + 1] if end > start else raw[start:]
    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError:
        parsed = _parse_repaired(raw[start:].rstrip())

    if not isinstance(parsed, dict):
        raise ParseError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def _parse_repaired(payload: str) -> Any:
    repaired = _TRAILING_COMMA.sub("", payload)
    repaired += "]" * max(0, payload.count("[") - payload.count("]"))
    repaired += "}" * max(0, payload.count("{") - payload.count("}"))
    try:
        result = json.loads(repaired)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse failed after repair: {payload[:800]}")
        raise ParseError(f"Unparseable JSON payload: {e}") from e
    logger.warning("JSON repaired from truncated response")
    return result


# ============================================================================
# Context Builders
# ============================================================================


def build_world_context(world: World, location_id: str | None = None) -> str:
    """World summary with act progression relative to the current location"""
    current_idx = -1
    if location_id:
        for idx, act in enumerate(world.acts):
            if location_id in act.location_ids:
                current_idx = idx
                break

    act_lines = []
    for idx, act in enumerate(world.acts):
        status = ""
        if current_idx >= 0:
            if idx < current_idx:
                status = " [DONE]"
            elif idx == current_idx:
                status = " [CURRENT ACT]"
            else:
                status = " [FUTURE]"
        act_lines.append(f'  {idx + 1}. "{act.title}" - {act.objective}{status}')

    text = f'World: "{world.name}"\nGenre: {world.genre}\n'
    if world.tone:
        text += f"Tone: {world.tone}\n"
    if world.description:
        text += f"Synopsis: {world.description}\n"
    if act_lines:
        text += "Story acts:\n" + "\n".join(act_lines) + "\n"
    if current_idx >= 0:
        act = world.acts[current_idx]
        text += f'\nCURRENT ACT: "{act.title}"\nAct objective: {act.objective}\n'
    return text


def build_location_context(location: Location, content: LocationContent) -> str:
    """Location description with NPCs, quests, threats and findable items"""
    text = f'Current location: "{location.name}"'
    if location.kind:
        text += f" ({location.kind})"
    text += "\n"
    if location.description:
        text += f"Description: {location.description}\n"
    if content.npcs:
        text += "People present:\n" + "\n".join(
            f"  - {npc.name} ({npc.role}): {npc.description}" for npc in content.npcs
        ) + "\n"
    if content.quests:
        text += "Available quests:\n" + "\n".join(
            f"  - {quest.title}: {quest.description}" for quest in content.quests
        ) + "\n"
    if content.enemies:
        text += "Threats:\n" + "\n".join(
            f"  - {enemy.name}: {enemy.description}" for enemy in content.enemies
        ) + "\n"
    if content.dangers:
        text += "Dangers:\n" + "\n".join(f"  - {danger}" for danger in content.dangers) + "\n"
    if content.items:
        text += "Findable items:\n" + "\n".join(
            f"  - [item:{item.name}] ({item.type.value}): {item.description}"
            for item in content.items
        ) + "\n"
    return text


def _item_name(equipment_id: str, equipment_map: dict[str, Equipment]) -> str:
    equipment = equipment_map.get(equipment_id)
    return equipment.name if equipment else equipment_id


def build_party_context(
    party: Sequence[Character], equipment_map: dict[str, Equipment]
) -> str:
    """Per-character sheet: attributes, inventory, gold and XP progress"""
    if not party:
        return ""

    lines = ["Adventuring party:"]
    for member in party:
        attrs = member.action_attributes
        battle = member.battle_attributes
        lines.append(
            f"  - {member.name} [ID: {member.id}] ({member.archetype}), "
            f"Lv {member.level}, HP {member.hp}/{member.max_hp}, "
            f"XP {member.xp}/{member.xp_needed}"
        )
        lines.append(
            f"  Attributes: forca:{attrs.forca} agilidade:{attrs.agilidade} "
            f"intelecto:{attrs.intelecto} carisma:{attrs.carisma} "
            f"vontade:{attrs.vontade} percepcao:{attrs.percepcao}"
        )
        lines.append(
            f"  Combat: ataque:{battle.ataque} defesa:{battle.defesa} "
            f"velocidade:{battle.velocidade} magia:{battle.magia}"
        )
        if member.inventory:
            items = ", ".join(
                f"[item:{_item_name(slot.equipment_id, equipment_map)}](x{slot.quantity})"
                for slot in member.inventory
            )
            lines.append(f"  Inventory: {items}")
        else:
            lines.append("  Inventory: empty")
        lines.append(f"  Gold: {member.gold}")
    return "\n".join(lines) + "\n"


def build_owned_items_context(
    party: Sequence[Character], equipment_map: dict[str, Equipment]
) -> str:
    """Items the party already owns, so narration does not offer them again"""
    owned = [
        f"  - [item:{_item_name(slot.equipment_id, equipment_map)}] ({member.name}, x{slot.quantity})"
        for member in party
        for slot in member.inventory
    ]
    if not owned:
        return ""
    return (
        "\nITEMS ALREADY OWNED BY THE PARTY (do not present them as new discoveries):\n"
        + "\n".join(owned)
        + "\n"
    )


def build_full_context(context: NarrativeContext) -> str:
    """World, location, party and owned items in one prompt block"""
    return (
        build_world_context(context.world, context.location.id)
        + "\n"
        + build_location_context(context.location, context.content)
        + "\n"
        + build_party_context(context.party, context.equipment_map)
        + build_owned_items_context(context.party, context.equipment_map)
    )


# ============================================================================
# Outcome Summaries
# ============================================================================


def outcome_label(outcome: RollOutcome) -> str:
    """Coarse label used when feeding outcomes back into narration"""
    if outcome in (RollOutcome.FAIL, RollOutcome.CRITICAL_FAIL):
        return "FAILED"
    if outcome == RollOutcome.PARTIAL:
        return "PARTIAL"
    return "SUCCESS"


def build_outcome_summaries(outcomes: Sequence[ResolvedOutcome]) -> list[str]:
    """One line per resolved outcome for continuation narration"""
    summaries = []
    for resolved in outcomes:
        narrative = resolved.narrative.text[:OUTCOME_SUMMARY_CHARS]
        summaries.append(
            f"{resolved.character_name} tried: {resolved.action.description} "
            f"[{outcome_label(resolved.outcome)}] "
            f"(d20 total {resolved.roll_total} vs difficulty {resolved.difficulty}) "
            f"-> {narrative}"
        )
    return summaries
