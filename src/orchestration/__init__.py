# ABOUTME: Orchestration layer exports for round management.
# ABOUTME: Provides the turn queue state machine, resolution graph, scene cache and facade.

from src.orchestration.context import build_context
from src.orchestration.exceptions import (
    CharacterNotFound,
    InvalidPhaseTransition,
    ItemNotUsable,
    LevelUpNotPending,
    NoActionError,
    OrchestrationError,
    RollNotRequestable,
    ValidationRejected,
)
from src.orchestration.graph_builder import build_resolution_graph
from src.orchestration.scene_cache import SceneCache
from src.orchestration.state_machine import TurnQueue
from src.orchestration.turn_orchestrator import TurnOrchestrator

__all__ = [
    "TurnOrchestrator",
    "TurnQueue",
    "SceneCache",
    "build_context",
    "build_resolution_graph",
    "OrchestrationError",
    "NoActionError",
    "InvalidPhaseTransition",
    "ValidationRejected",
    "RollNotRequestable",
    "CharacterNotFound",
    "ItemNotUsable",
    "LevelUpNotPending",
]
