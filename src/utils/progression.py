# ABOUTME: Experience grants, single-step level-ups and level-up attribute allocation.
# ABOUTME: Pure functions returning new Character instances; inputs are never mutated.

from loguru import logger

from src.models.actions import ValidatedAction
from src.models.character import Character
from src.models.dice_models import RollOutcome
from src.models.game_state import LevelUpEvent

POINTS_PER_LEVEL = 3


def grant_experience(
    character: Character,
    action: ValidatedAction,
    outcome: RollOutcome,
) -> tuple[Character, int, LevelUpEvent | None]:
    """
    Grant XP for a resolved action.

    XP equals the action's difficulty and is granted only on partial, success or
    critical. Crossing level * 100 raises the level by exactly one and carries
    the remainder. Difficulty is capped at 20, so the carry always sits below
    the next threshold.

    Args:
        character: Acting character
        action: The validated action that was rolled
        outcome: Outcome tier of the roll

    Returns:
        Tuple of (updated character, xp granted, level-up event or None)
    """
    if not outcome.is_success:
        return character, 0, None

    gained = action.difficulty
    xp = character.xp + gained
    needed = character.xp_needed

    if xp < needed:
        return character.model_copy(update={"xp": xp}), gained, None

    # Single step: no loop over further thresholds
    new_level = character.level + 1
    remainder = xp - needed

    event = LevelUpEvent(
        character_id=character.id,
        previous_level=character.level,
        new_level=new_level,
        xp_remaining=remainder,
    )
    logger.info(f"{character.name} reached level {new_level}")
    return (
        character.model_copy(update={"xp": remainder, "level": new_level}),
        gained,
        event,
    )


def apply_level_up(
    character: Character,
    action_deltas: dict[str, int] | None = None,
    battle_deltas: dict[str, int] | None = None,
    levels: int = 1,
) -> Character:
    """
    Apply attribute points chosen after a level-up.

    Each level grants POINTS_PER_LEVEL points, split freely across action and
    battle attributes. The allocation must spend them all.

    Args:
        character: Character to update
        action_deltas: Action attribute name -> points to add
        battle_deltas: Battle attribute name -> points to add
        levels: Number of level-ups being spent

    Returns:
        Updated character

    Raises:
        ValueError: If an attribute name is unknown, a delta is negative, or the
            points spent differ from the budget
    """
    action_deltas = action_deltas or {}
    battle_deltas = battle_deltas or {}

    action = character.action_attributes.model_dump()
    battle = character.battle_attributes.model_dump()
    for deltas, attrs in ((action_deltas, action), (battle_deltas, battle)):
        for name, delta in deltas.items():
            if name not in attrs:
                raise ValueError(f"Unknown attribute: {name}")
            if delta < 0:
                raise ValueError(f"Attribute delta must be non-negative: {name}={delta}")
            attrs[name] += delta

    budget = POINTS_PER_LEVEL * levels
    spent = sum(action_deltas.values()) + sum(battle_deltas.values())
    if spent != budget:
        raise ValueError(f"Level-up must spend exactly {budget} points, got {spent}")

    return character.model_copy(
        update={
            "action_attributes": type(character.action_attributes)(**action),
            "battle_attributes": type(character.battle_attributes)(**battle),
        }
    )
