# ABOUTME: Exception definitions for orchestration layer errors.
# ABOUTME: Defines error types raised by TurnQueue and TurnOrchestrator to the UI layer.

from src.agents.exceptions import NoActionError
from src.models.actions import ValidatedAction


class OrchestrationError(Exception):
    """Base class for orchestration errors"""
    pass


class InvalidPhaseTransition(OrchestrationError):
    """Raised when an operation is not allowed in the current round phase"""
    pass


class ValidationRejected(OrchestrationError):
    """Raised when every submitted action was judged invalid"""

    def __init__(self, actions: list[ValidatedAction]):
        self.actions = actions
        reasons = "; ".join(f"{a.character_id}: {a.reason}" for a in actions)
        super().__init__(f"All actions were rejected ({reasons})")


class RollNotRequestable(OrchestrationError):
    """Raised when a roll is requested out of queue order or while another roll is in flight"""
    pass


class CharacterNotFound(OrchestrationError):
    """Raised when a character id is not part of the party"""
    pass


class ItemNotUsable(OrchestrationError):
    """Raised when an item cannot be used or equipped as requested"""
    pass


class LevelUpNotPending(OrchestrationError):
    """Raised when attribute points are allocated without an unspent level-up"""
    pass


__all__ = [
    "OrchestrationError",
    "NoActionError",
    "InvalidPhaseTransition",
    "ValidationRejected",
    "RollNotRequestable",
    "CharacterNotFound",
    "ItemNotUsable",
    "LevelUpNotPending",
]
