# ABOUTME: In-process ObjectStore used by tests and local demos.
# ABOUTME: Deep-copies on every read and write so callers never share mutable records.

import copy
from collections.abc import Callable

from src.storage.store import Record, record_id


class MemoryStore:
    """Dictionary-backed ObjectStore"""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Record]] = {}

    async def put(self, collection: str, value: Record) -> None:
        rid = record_id(value)
        self._collections.setdefault(collection, {})[rid] = copy.deepcopy(value)

    async def get(self, collection: str, rid: str) -> Record | None:
        value = self._collections.get(collection, {}).get(rid)
        return copy.deepcopy(value) if value is not None else None

    async def delete(self, collection: str, rid: str) -> None:
        self._collections.get(collection, {}).pop(rid, None)

    async def list_all(self, collection: str) -> list[Record]:
        return [copy.deepcopy(v) for v in self._collections.get(collection, {}).values()]

    async def list_where(
        self, collection: str, predicate: Callable[[Record], bool]
    ) -> list[Record]:
        return [value for value in await self.list_all(collection) if predicate(value)]
