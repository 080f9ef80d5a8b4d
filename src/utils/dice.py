# ABOUTME: d20 resolver mapping (modifier, difficulty, raw roll) to an outcome tier.
# ABOUTME: Also computes roll modifiers from character attributes and pre-action items.

import random

from src.models.character import Character, PrimaryAttribute
from src.models.dice_models import RollOutcome, RollResult
from src.models.equipment import Equipment

D20_SIDES = 20
NATURAL_FAIL = 1
NATURAL_CRITICAL = 20

# Margin thresholds on total - difficulty
CRITICAL_FAIL_MARGIN = -5
PARTIAL_MAX_MARGIN = 1
CRITICAL_MARGIN = 8


def roll_d20() -> int:
    """Draw a natural d20 value"""
    return random.randint(1, D20_SIDES)


def classify_outcome(raw: int, total: int, difficulty: int) -> RollOutcome:
    """
    Classify a roll into an outcome tier.

    Natural 1 and natural 20 decide the tier regardless of modifier. Otherwise
    the margin (total - difficulty) decides:
    - below -5: critical-fail
    - below 0: fail
    - 0 or 1: partial
    - 2 to 7: success
    - 8 or more: critical

    Args:
        raw: Natural d20 value
        total: raw plus modifier
        difficulty: Effective difficulty

    Returns:
        Outcome tier
    """
    if raw == NATURAL_FAIL:
        return RollOutcome.CRITICAL_FAIL
    if raw == NATURAL_CRITICAL:
        return RollOutcome.CRITICAL

    margin = total - difficulty
    if margin < CRITICAL_FAIL_MARGIN:
        return RollOutcome.CRITICAL_FAIL
    if margin < 0:
        return RollOutcome.FAIL
    if margin <= PARTIAL_MAX_MARGIN:
        return RollOutcome.PARTIAL
    if margin < CRITICAL_MARGIN:
        return RollOutcome.SUCCESS
    return RollOutcome.CRITICAL


def resolve_roll(modifier: int, difficulty: int, raw: int) -> RollResult:
    """
    Resolve one d20 roll. Deterministic given its inputs.

    Args:
        modifier: Attribute plus item bonus
        difficulty: Effective difficulty
        raw: Natural d20 value (1-20)

    Returns:
        RollResult with total and outcome tier

    Raises:
        ValueError: If raw is outside 1-20
    """
    if not 1 <= raw <= D20_SIDES:
        raise ValueError(f"Natural roll must be between 1 and {D20_SIDES}, got {raw}")

    total = raw + modifier
    return RollResult(
        raw=raw,
        modifier=modifier,
        difficulty=difficulty,
        total=total,
        outcome=classify_outcome(raw, total, difficulty),
    )


def compute_roll_inputs(
    character: Character,
    attribute: PrimaryAttribute,
    difficulty: int,
    item: Equipment | None = None,
) -> tuple[int, int]:
    """
    Compute the modifier and effective difficulty for an action roll.

    The modifier is the character's action attribute plus the item's bonus for
    that attribute. The item's difficulty reduction lowers the difficulty,
    never below 1.

    Args:
        character: Acting character
        attribute: Attribute the action is tested against
        difficulty: Validated difficulty
        item: Optional item used before the roll

    Returns:
        Tuple of (modifier, effective_difficulty)
    """
    modifier = character.action_attributes.value_of(attribute)
    if item is None:
        return modifier, difficulty

    modifier += item.bonus.get(attribute.value, 0)
    return modifier, max(1, difficulty - item.difficulty_reduction)
