# ABOUTME: Worker module initialization for background persistence and retry utilities.
# ABOUTME: Exports the persistence write queue and the AI generation retry decorator.

from src.workers.llm_retry import llm_retry
from src.workers.persistence_queue import PersistenceQueue

__all__ = [
    "PersistenceQueue",
    "llm_retry",
]
