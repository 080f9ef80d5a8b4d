# ABOUTME: Asynchronous write queue giving best-effort durability to diary and scene writes.
# ABOUTME: Operations retry with exponential backoff off the round's critical path; drain() awaits them.

import asyncio
from typing import Literal

from loguru import logger
from pydantic import BaseModel
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.storage.exceptions import StoreError, StoreUnavailable
from src.storage.store import ObjectStore

Operation = tuple[Literal["put", "delete"], str, BaseModel | str]


class PersistenceQueue:
    """
    Background writer for records that must not block a round.

    Puts and deletes are applied in enqueue order by a single consumer task, so
    a delete queued after a put always wins. An operation that keeps failing is
    logged and dropped; it never raises into the caller.
    """

    def __init__(
        self,
        store: ObjectStore,
        max_attempts: int = 3,
        backoff_seconds: float = 0.5,
    ):
        """
        Initialize the queue.

        Args:
            store: Store receiving the writes
            max_attempts: Attempts per operation before it is dropped
            backoff_seconds: Initial backoff between attempts
        """
        self.store = store
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.dropped_writes = 0
        self._queue: asyncio.Queue[Operation] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def enqueue(self, collection: str, record: BaseModel) -> None:
        """Schedule a whole-object write; returns immediately"""
        self._submit(("put", collection, record))

    def enqueue_delete(self, collection: str, record_id: str) -> None:
        """Schedule a delete; returns immediately"""
        self._submit(("delete", collection, record_id))

    async def drain(self) -> None:
        """Wait until every queued operation has been applied or dropped"""
        if self._worker is None:
            return
        await self._queue.join()

    async def close(self) -> None:
        """Drain outstanding operations and stop the consumer"""
        await self.drain()
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

    def _submit(self, operation: Operation) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="persistence-queue")
        self._queue.put_nowait(operation)
        logger.debug(f"Queued {operation[0]} on {operation[1]} ({self._queue.qsize()} pending)")

    async def _run(self) -> None:
        while True:
            op, collection, payload = await self._queue.get()
            try:
                await self._apply(op, collection, payload)
            except StoreError as e:
                self.dropped_writes += 1
                logger.error(
                    f"Dropping {op} on {collection} after {self.max_attempts} attempts: {e}"
                )
            except Exception as e:
                self.dropped_writes += 1
                logger.exception(f"Unexpected error applying {op} on {collection}: {e}")
            finally:
                self._queue.task_done()

    async def _apply(self, op: str, collection: str, payload: BaseModel | str) -> None:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.backoff_seconds, min=self.backoff_seconds, max=10
            ),
            retry=retry_if_exception_type(StoreUnavailable),
            reraise=True,
        ):
            with attempt:
                if isinstance(payload, BaseModel):
                    await self.store.put(collection, payload.model_dump(mode="json"))
                else:
                    await self.store.delete(collection, payload)
        logger.debug(f"Applied {op} on {collection}")
