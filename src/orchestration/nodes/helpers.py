# ABOUTME: Helper utility functions for resolution nodes (target resolution, party replacement).
# ABOUTME: Keeps the recipient fallback policy for loot, gold and XP in one auditable place.

from collections.abc import Sequence

from loguru import logger

from src.models.character import Character


def resolve_target_character(
    party: Sequence[Character],
    suggested_id: str | None,
    actor_id: str,
) -> Character | None:
    """
    Pick the character a grant applies to.

    Fallback chain:
    1. The suggested character, if it is a party member
    2. The character who performed the action
    3. The first party member

    Args:
        party: Current party
        suggested_id: Recipient named by generation, if any
        actor_id: Acting character

    Returns:
        Target character, or None for an empty party
    """
    by_id = {member.id: member for member in party}
    if suggested_id and suggested_id in by_id:
        return by_id[suggested_id]
    if suggested_id:
        logger.debug(f"Grant target {suggested_id} not in party, falling back to actor")
    if actor_id in by_id:
        return by_id[actor_id]
    return party[0] if party else None


def replace_character(party: Sequence[Character], updated: Character) -> list[Character]:
    """New party list with one member replaced by id"""
    return [updated if member.id == updated.id else member for member in party]


def find_character(party: Sequence[Character], character_id: str) -> Character | None:
    for member in party:
        if member.id == character_id:
            return member
    return None
