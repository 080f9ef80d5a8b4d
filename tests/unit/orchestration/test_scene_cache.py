# ABOUTME: Unit tests for SceneCache get-or-generate behavior.
# ABOUTME: Covers cache hits, retries with fallback caching, invalidation and continuations.

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from src.agents.exceptions import ParseError, TransportError
from src.models.diary import SceneCacheEntry
from src.models.narrative import NarrativeMood, Scene
from src.orchestration.scene_cache import SceneCache
from src.storage.repository import SCENES, GameRepository
from src.storage.store import RedisStore
from src.workers.persistence_queue import PersistenceQueue

GENERATED = Scene(title="Night Bells", description="The [npc:monk] waits.", mood=NarrativeMood.MISTERIO)


@pytest.fixture
def narrator() -> AsyncMock:
    mock = AsyncMock()
    mock.narrate_intro = AsyncMock(return_value=GENERATED)
    mock.narrate_continuation = AsyncMock(return_value=GENERATED)
    return mock


@pytest_asyncio.fixture
async def persistence(memory_store):
    queue = PersistenceQueue(memory_store, backoff_seconds=0.001)
    yield queue
    await queue.close()


@pytest.fixture
def cache(repository, narrator, persistence) -> SceneCache:
    return SceneCache(repository, narrator, persistence, generation_attempts=2, retry_wait=0)


class TestGetOrGenerate:
    """Test suite for SceneCache.get_or_generate"""

    @pytest.mark.asyncio
    async def test_hit_returns_cached_without_generation(
        self, cache, memory_store, narrator, narrative_context
    ):
        entry = SceneCacheEntry.from_scene("loc-square", Scene(title="Cached", description="Old"))
        await memory_store.put(SCENES, entry.model_dump(mode="json"))

        scene, from_cache = await cache.get_or_generate(narrative_context)

        assert scene.title == "Cached"
        assert from_cache is True
        narrator.narrate_intro.assert_not_called()

    @pytest.mark.asyncio
    async def test_miss_generates_and_writes_row(
        self, cache, repository, persistence, narrator, narrative_context
    ):
        scene, from_cache = await cache.get_or_generate(narrative_context, log=["a", "b"])

        assert scene == GENERATED
        assert from_cache is False
        await persistence.drain()
        row = await repository.get_scene("loc-square")
        assert row.title == "Night Bells"
        assert row.log == ["a", "b"]

    @pytest.mark.asyncio
    async def test_second_call_served_from_cache(self, cache, narrator, narrative_context):
        """Test get-or-generate is idempotent once a scene was served"""
        first, _ = await cache.get_or_generate(narrative_context)
        second, from_cache = await cache.get_or_generate(narrative_context)

        assert first == second
        assert from_cache is True
        assert narrator.narrate_intro.await_count == 1

    @pytest.mark.asyncio
    async def test_retry_then_success(self, cache, narrator, narrative_context):
        narrator.narrate_intro.side_effect = [TransportError("timeout"), GENERATED]

        scene, _ = await cache.get_or_generate(narrative_context)

        assert scene == GENERATED
        assert narrator.narrate_intro.await_count == 2

    @pytest.mark.asyncio
    async def test_fallback_cached_after_repeated_failure(
        self, cache, repository, persistence, narrator, narrative_context
    ):
        """Test two failed attempts yield the cached fallback scene and later reads hit it"""
        narrator.narrate_intro.side_effect = ParseError("garbage")

        scene, from_cache = await cache.get_or_generate(narrative_context)

        assert scene.title == "Scene in Valdren Square"
        assert from_cache is False
        assert narrator.narrate_intro.await_count == 2

        again, from_cache = await cache.get_or_generate(narrative_context)
        assert again == scene
        assert from_cache is True
        assert narrator.narrate_intro.await_count == 2

    @pytest.mark.asyncio
    async def test_log_snapshot_limited(self, repository, narrator, persistence, narrative_context):
        cache = SceneCache(repository, narrator, persistence, retry_wait=0, log_snapshot=3)

        await cache.get_or_generate(narrative_context, log=[str(i) for i in range(10)])

        await persistence.drain()
        assert (await repository.get_scene("loc-square")).log == ["7", "8", "9"]

    @pytest.mark.asyncio
    async def test_unreadable_row_regenerates(self, cache, memory_store, narrator, narrative_context):
        """Test a corrupt cache row is treated as a miss"""
        await memory_store.put("scenes", {"id": "scene-loc-square", "title": 5})

        scene, from_cache = await cache.get_or_generate(narrative_context)

        assert scene == GENERATED
        assert from_cache is False

    @pytest.mark.asyncio
    async def test_truncated_redis_row_regenerates(self, narrator, narrative_context):
        """Test a half-written Redis value is regenerated instead of crashing the read"""
        pipe = MagicMock()
        pipe.execute = AsyncMock(return_value=[True, 1])
        client = MagicMock()
        client.pipeline.return_value.__aenter__.return_value = pipe
        client.pipeline.return_value.__aexit__.return_value = False
        client.get = AsyncMock(return_value='{"id": "scene-loc-square", "title": "trunc')
        store = RedisStore(client, prefix="adv")
        queue = PersistenceQueue(store, backoff_seconds=0.001)
        cache = SceneCache(GameRepository(store), narrator, queue, retry_wait=0)

        try:
            scene, from_cache = await cache.get_or_generate(narrative_context)
            await queue.drain()
        finally:
            await queue.close()

        assert scene == GENERATED
        assert from_cache is False
        pipe.set.assert_called_once()
        assert pipe.set.call_args.args[0] == "adv:scenes:scene-loc-square"


class TestInvalidation:
    """Test suite for invalidate and regenerate"""

    @pytest.mark.asyncio
    async def test_invalidate_forces_generation(self, cache, narrator, narrative_context):
        await cache.get_or_generate(narrative_context)

        await cache.invalidate("loc-square")
        _, from_cache = await cache.get_or_generate(narrative_context)

        assert from_cache is False
        assert narrator.narrate_intro.await_count == 2

    @pytest.mark.asyncio
    async def test_regenerate_narrates_continuation(
        self, cache, repository, persistence, narrator, narrative_context
    ):
        previous = Scene(title="Before", description="Earlier")
        narrator.narrate_continuation.return_value = Scene(title="After", description="Later")

        scene = await cache.regenerate(narrative_context, ["Mira tried: x [SUCCESS]"], previous)

        assert scene.title == "After"
        narrator.narrate_continuation.assert_awaited_once_with(
            narrative_context, ["Mira tried: x [SUCCESS]"], previous
        )
        await persistence.drain()
        assert (await repository.get_scene("loc-square")).title == "After"

    @pytest.mark.asyncio
    async def test_continuation_failure_uses_fallback(self, cache, narrator, narrative_context):
        narrator.narrate_continuation.side_effect = TransportError("down")

        scene = await cache.regenerate(narrative_context, [])

        assert scene.title == "Scene in Valdren Square"
