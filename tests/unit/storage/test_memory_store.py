# ABOUTME: Unit tests for the in-process MemoryStore.
# ABOUTME: Validates overwrite semantics, copy isolation, deletes and filtered listing.

import pytest

from src.storage.exceptions import InvalidRecord
from src.storage.memory_store import MemoryStore


class TestMemoryStore:
    """Test suite for MemoryStore"""

    @pytest.mark.asyncio
    async def test_put_then_get(self):
        store = MemoryStore()

        await store.put("characters", {"id": "c1", "name": "Mira"})

        assert await store.get("characters", "c1") == {"id": "c1", "name": "Mira"}

    @pytest.mark.asyncio
    async def test_put_overwrites_whole_object(self):
        """Test last write wins with no field merging"""
        store = MemoryStore()
        await store.put("characters", {"id": "c1", "name": "Mira", "gold": 5})

        await store.put("characters", {"id": "c1", "name": "Mira"})

        assert await store.get("characters", "c1") == {"id": "c1", "name": "Mira"}

    @pytest.mark.asyncio
    async def test_returned_values_are_copies(self):
        """Test mutating a read never changes the stored record"""
        store = MemoryStore()
        await store.put("characters", {"id": "c1", "inventory": []})

        value = await store.get("characters", "c1")
        value["inventory"].append("sword")

        assert await store.get("characters", "c1") == {"id": "c1", "inventory": []}

    @pytest.mark.asyncio
    async def test_missing_record_is_none(self):
        assert await MemoryStore().get("characters", "nobody") is None

    @pytest.mark.asyncio
    async def test_delete(self):
        store = MemoryStore()
        await store.put("scenes", {"id": "scene-1"})

        await store.delete("scenes", "scene-1")
        await store.delete("scenes", "scene-1")

        assert await store.get("scenes", "scene-1") is None

    @pytest.mark.asyncio
    async def test_list_where(self):
        store = MemoryStore()
        await store.put("diary", {"id": "d1", "world_id": "w1"})
        await store.put("diary", {"id": "d2", "world_id": "w2"})

        result = await store.list_where("diary", lambda v: v["world_id"] == "w1")

        assert result == [{"id": "d1", "world_id": "w1"}]

    @pytest.mark.asyncio
    async def test_record_without_id_rejected(self):
        with pytest.raises(InvalidRecord):
            await MemoryStore().put("diary", {"name": "no id"})
