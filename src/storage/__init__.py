# ABOUTME: Public interface for the persistent store layer.
# ABOUTME: Exports the ObjectStore protocol, its Redis and in-memory implementations, and the repository.

from src.storage.exceptions import InvalidRecord, RecordNotFound, StoreError, StoreUnavailable
from src.storage.memory_store import MemoryStore
from src.storage.repository import GameRepository
from src.storage.store import ObjectStore, RedisStore, connect_redis

__all__ = [
    "ObjectStore",
    "RedisStore",
    "connect_redis",
    "MemoryStore",
    "GameRepository",
    "StoreError",
    "StoreUnavailable",
    "RecordNotFound",
    "InvalidRecord",
]
