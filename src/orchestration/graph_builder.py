# ABOUTME: LangGraph builder for the per-character resolution flow after a dice roll.
# ABOUTME: Wires outcome narration, conditional loot and experience nodes with injected dependencies.

from langgraph.graph import END, StateGraph
from loguru import logger

from src.agents.loot_generator import LootGenerator
from src.agents.outcome_narrator import OutcomeNarrator
from src.models.game_state import ResolutionState
from src.orchestration.nodes import (
    _create_generate_loot_node,
    _create_grant_experience_node,
    _create_narrate_outcome_node,
    should_generate_loot,
)
from src.storage.repository import GameRepository


def build_resolution_graph(
    outcome_narrator: OutcomeNarrator,
    loot_generator: LootGenerator,
    repository: GameRepository,
):
    """
    Build the compiled resolution graph for one rolled action.

    Flow:
        narrate_outcome -> [generate_loot] -> grant_experience -> END

    Args:
        outcome_narrator: Outcome narration agent
        loot_generator: Loot agent
        repository: Store access for equipment and characters

    Returns:
        Compiled graph; run with ainvoke(ResolutionState)

    Note:
        Node factories capture dependencies via closures so nodes stay plain
        state -> state functions.
    """
    logger.info("Building resolution graph")

    narrate_outcome_node = _create_narrate_outcome_node(outcome_narrator)
    generate_loot_node = _create_generate_loot_node(loot_generator, repository)
    grant_experience_node = _create_grant_experience_node(repository)

    workflow = StateGraph(ResolutionState)

    workflow.add_node("narrate_outcome", narrate_outcome_node)
    workflow.add_node("generate_loot", generate_loot_node)
    workflow.add_node("grant_experience", grant_experience_node)

    workflow.set_entry_point("narrate_outcome")

    # Loot only for inventory-affecting actions on a successful tier
    workflow.add_conditional_edges(
        "narrate_outcome",
        should_generate_loot,
        {"loot": "generate_loot", "skip": "grant_experience"},
    )
    workflow.add_edge("generate_loot", "grant_experience")
    workflow.add_edge("grant_experience", END)

    return workflow.compile()
