# ABOUTME: Public interface for resolution node functions and conditional edges.
# ABOUTME: Exports node factories, helpers, and routing predicates from the nodes package.

# Conditional edges
from src.orchestration.nodes.conditional_edges import should_generate_loot

# Helper utilities
from src.orchestration.nodes.helpers import (
    find_character,
    replace_character,
    resolve_target_character,
)

# Outcome nodes
from src.orchestration.nodes.outcome_nodes import (
    _create_generate_loot_node,
    _create_grant_experience_node,
    _create_narrate_outcome_node,
)

__all__ = [
    # Helper utilities
    "find_character",
    "replace_character",
    "resolve_target_character",
    # Outcome nodes
    "_create_narrate_outcome_node",
    "_create_generate_loot_node",
    "_create_grant_experience_node",
    # Conditional edges
    "should_generate_loot",
]
