# ABOUTME: Conditional edge predicates for LangGraph resolution routing decisions.
# ABOUTME: Decides whether a resolved action reaches the loot stage.

from typing import Literal

from loguru import logger

from src.models.game_state import ResolutionState


def should_generate_loot(state: ResolutionState) -> Literal["loot", "skip"]:
    """
    Conditional edge after outcome narration.

    Loot runs only for inventory-affecting actions with a partial, success or
    critical outcome.

    Args:
        state: Current resolution state

    Returns:
        Route key: "loot" or "skip"
    """
    action = state["action"]
    outcome = state["roll"].outcome
    if action.affects_inventory and outcome.is_success:
        return "loot"
    logger.debug(
        f"Skipping loot for {action.character_id}: "
        f"affects_inventory={action.affects_inventory}, outcome={outcome.value}"
    )
    return "skip"
