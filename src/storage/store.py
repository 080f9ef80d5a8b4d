# ABOUTME: Keyed object store protocol and its Redis implementation.
# ABOUTME: Values are JSON objects with an "id"; writes are whole-object overwrites.

import json
from collections.abc import Callable
from typing import Any, Protocol

from loguru import logger
from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.storage.exceptions import InvalidRecord, StoreUnavailable

Record = dict[str, Any]


class ObjectStore(Protocol):
    """Keyed object store with last-write-wins semantics and no cross-key transactions"""

    async def put(self, collection: str, value: Record) -> None: ...

    async def get(self, collection: str, record_id: str) -> Record | None: ...

    async def delete(self, collection: str, record_id: str) -> None: ...

    async def list_all(self, collection: str) -> list[Record]: ...

    async def list_where(
        self, collection: str, predicate: Callable[[Record], bool]
    ) -> list[Record]: ...


def record_id(value: Record) -> str:
    """Id of a record, validated"""
    rid = value.get("id")
    if not isinstance(rid, str) or not rid:
        raise InvalidRecord("Record must carry a non-empty string 'id'")
    return rid


class RedisStore:
    """
    ObjectStore backed by Redis.

    Layout:
    - {prefix}:{collection}:{id} -> JSON value
    - {prefix}:{collection}:ids -> set of ids in the collection
    """

    def __init__(self, redis_client: Redis, prefix: str = "adventure"):
        """
        Initialize Redis store.

        Args:
            redis_client: Async Redis connection (decode_responses=True recommended)
            prefix: Namespace prepended to every key
        """
        self.redis = redis_client
        self.prefix = prefix

    def _key(self, collection: str, rid: str) -> str:
        return f"{self.prefix}:{collection}:{rid}"

    def _index_key(self, collection: str) -> str:
        return f"{self.prefix}:{collection}:ids"

    @staticmethod
    def _decode(collection: str, rid: str, payload: str | bytes) -> Record:
        try:
            value = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidRecord(f"Stored {collection}/{rid} is not valid JSON: {e}") from e
        if not isinstance(value, dict):
            raise InvalidRecord(f"Stored {collection}/{rid} is not an object")
        return value

    async def put(self, collection: str, value: Record) -> None:
        rid = record_id(value)
        try:
            payload = json.dumps(value, default=str)
        except (TypeError, ValueError) as e:
            raise InvalidRecord(f"Record {collection}/{rid} is not serializable: {e}") from e

        try:
            async with self.redis.pipeline(transaction=False) as pipe:
                pipe.set(self._key(collection, rid), payload)
                pipe.sadd(self._index_key(collection), rid)
                await pipe.execute()
        except RedisError as e:
            raise StoreUnavailable(f"Failed to write {collection}/{rid}: {e}") from e

        logger.debug(f"Stored {collection}/{rid}")

    async def get(self, collection: str, rid: str) -> Record | None:
        try:
            payload = await self.redis.get(self._key(collection, rid))
        except RedisError as e:
            raise StoreUnavailable(f"Failed to read {collection}/{rid}: {e}") from e
        if payload is None:
            return None
        return self._decode(collection, rid, payload)

    async def delete(self, collection: str, rid: str) -> None:
        try:
            async with self.redis.pipeline(transaction=False) as pipe:
                pipe.delete(self._key(collection, rid))
                pipe.srem(self._index_key(collection), rid)
                await pipe.execute()
        except RedisError as e:
            raise StoreUnavailable(f"Failed to delete {collection}/{rid}: {e}") from e

        logger.debug(f"Deleted {collection}/{rid}")

    async def list_all(self, collection: str) -> list[Record]:
        try:
            members = await self.redis.smembers(self._index_key(collection))
            ids = sorted(m.decode() if isinstance(m, bytes) else m for m in members)
            if not ids:
                return []
            payloads = await self.redis.mget([self._key(collection, rid) for rid in ids])
        except RedisError as e:
            raise StoreUnavailable(f"Failed to list {collection}: {e}") from e
        return [
            self._decode(collection, rid, payload)
            for rid, payload in zip(ids, payloads)
            if payload is not None
        ]

    async def list_where(
        self, collection: str, predicate: Callable[[Record], bool]
    ) -> list[Record]:
        return [value for value in await self.list_all(collection) if predicate(value)]

    async def clear(self) -> int:
        """
        Delete every key under this store's prefix.

        Returns:
            Number of keys deleted
        """
        deleted = 0
        try:
            async for key in self.redis.scan_iter(match=f"{self.prefix}:*"):
                deleted += await self.redis.delete(key)
        except RedisError as e:
            raise StoreUnavailable(f"Failed to clear store: {e}") from e
        logger.info(f"Cleared {deleted} keys under prefix '{self.prefix}'")
        return deleted


async def connect_redis(redis_url: str) -> Redis:
    """
    Create an async Redis connection and verify it responds.

    Args:
        redis_url: Redis connection URL

    Returns:
        Connected Redis client with decoded responses

    Raises:
        StoreUnavailable: When Redis is not reachable
    """
    client = Redis.from_url(redis_url, decode_responses=True)
    try:
        await client.ping()
    except RedisError as e:
        logger.error(f"Failed to connect to Redis at {redis_url}: {e}")
        raise StoreUnavailable(f"Redis connection failed: {e}") from e
    logger.info(f"Redis connection established: {redis_url}")
    return client
