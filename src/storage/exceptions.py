# ABOUTME: Exception definitions for the persistent store layer.
# ABOUTME: Defines errors raised by RedisStore, MemoryStore and GameRepository.


class StoreError(Exception):
    """Base class for store errors"""
    pass


class StoreUnavailable(StoreError):
    """Raised when the backing store cannot be reached"""
    pass


class RecordNotFound(StoreError):
    """Raised when a required record does not exist"""
    pass


class InvalidRecord(StoreError):
    """Raised when a value cannot be stored (missing id, not JSON serializable)"""
    pass
