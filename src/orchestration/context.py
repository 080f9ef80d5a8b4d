# ABOUTME: Context assembler building the immutable NarrativeContext snapshot for a round.
# ABOUTME: Embeds an equipment map covering every item the party owns.

from collections.abc import Iterable, Sequence

from loguru import logger

from src.models.character import Character
from src.models.equipment import Equipment
from src.models.narrative import NarrativeContext
from src.models.world import Location, LocationContent, World
from src.storage.repository import GameRepository


def build_context(
    world: World,
    location: Location,
    content: LocationContent | None,
    party: Sequence[Character],
    history: Iterable[str] = (),
    equipment: Iterable[Equipment] = (),
) -> NarrativeContext:
    """
    Assemble a round snapshot. Pure and side-effect free.

    Args:
        world: Active world
        location: Current location
        content: Location content; empty content when None
        party: Party members
        history: Recent action log lines
        equipment: Known equipment definitions; only those the party owns are kept

    Returns:
        Frozen NarrativeContext
    """
    owned = {eq_id for member in party for eq_id in member.owned_equipment_ids()}
    equipment_map = {eq.id: eq for eq in equipment if eq.id in owned}
    return NarrativeContext(
        world=world,
        location=location,
        content=content or LocationContent(id=location.id, location_id=location.id),
        party=tuple(party),
        equipment_map=equipment_map,
        history=tuple(history),
    )


def with_party(
    context: NarrativeContext,
    party: Sequence[Character],
    new_equipment: Iterable[Equipment] = (),
    history: Iterable[str] | None = None,
) -> NarrativeContext:
    """New snapshot with an updated party, keeping the equipment map complete"""
    return build_context(
        context.world,
        context.location,
        context.content,
        party,
        context.history if history is None else history,
        [*context.equipment_map.values(), *new_equipment],
    )


async def resolve_equipment(
    repository: GameRepository, party: Sequence[Character]
) -> list[Equipment]:
    """Load every Equipment the party references; missing ids are logged and skipped"""
    equipment = []
    for eq_id in sorted({eq_id for member in party for eq_id in member.owned_equipment_ids()}):
        loaded = await repository.get_equipment(eq_id)
        if loaded is None:
            logger.warning(f"Inventory references unknown equipment {eq_id}")
            continue
        equipment.append(loaded)
    return equipment
