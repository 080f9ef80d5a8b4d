# ABOUTME: Get-or-generate cache of narrated scenes, one row per location.
# ABOUTME: Generation retries a fixed number of times, then substitutes and caches a fallback scene.

from collections.abc import Sequence

from loguru import logger
from pydantic import ValidationError

from src.agents.exceptions import ParseError, TransportError
from src.agents.story_narrator import StoryNarrator, fallback_scene
from src.models.diary import SceneCacheEntry, scene_cache_key
from src.models.narrative import NarrativeContext, Scene
from src.storage.exceptions import StoreError
from src.storage.repository import SCENES, GameRepository
from src.workers.llm_retry import llm_retry
from src.workers.persistence_queue import PersistenceQueue


class SceneCache:
    """
    Scene cache keyed by location.

    Rows are written and deleted through the persistence queue; reads drain the
    queue first so a read always observes earlier writes and invalidations.
    """

    def __init__(
        self,
        repository: GameRepository,
        narrator: StoryNarrator,
        persistence: PersistenceQueue,
        generation_attempts: int = 2,
        retry_wait: float = 0.5,
        log_snapshot: int = 10,
    ):
        """
        Initialize the cache.

        Args:
            repository: Store access for cached rows
            narrator: Scene narration agent
            persistence: Queue applying cache writes
            generation_attempts: Narration attempts before the fallback scene
            retry_wait: Initial backoff between attempts
            log_snapshot: Action log lines stored with each row
        """
        self.repository = repository
        self.narrator = narrator
        self.persistence = persistence
        self.log_snapshot = log_snapshot
        self._narrate = llm_retry(
            max_attempts=generation_attempts, min_wait=retry_wait, max_wait=retry_wait * 8
        )(self._narrate_once)

    async def get_or_generate(
        self,
        context: NarrativeContext,
        is_intro: bool = True,
        outcome_summaries: Sequence[str] = (),
        previous_scene: Scene | None = None,
        log: Sequence[str] = (),
    ) -> tuple[Scene, bool]:
        """
        Return the cached scene for the context's location, generating it if needed.

        A round continuation (is_intro=False) always generates. Generation
        failures never propagate: the fallback scene is cached instead.

        Args:
            context: Round snapshot
            is_intro: False when narrating the continuation of a closed round
            outcome_summaries: Resolved outcomes feeding a continuation
            previous_scene: Scene the closed round was played in
            log: Action log; the last lines are stored with the row

        Returns:
            Tuple of (scene, from_cache)
        """
        location_id = context.location.id
        if is_intro:
            cached = await self._read(location_id)
            if cached is not None:
                logger.debug(f"Scene cache hit for {location_id}")
                return cached.to_scene(), True

        try:
            scene = await self._narrate(context, is_intro, outcome_summaries, previous_scene)
        except (TransportError, ParseError) as e:
            logger.warning(
                f"Scene generation failed for {location_id}, using fallback scene: {e}"
            )
            scene = fallback_scene(context.location.name)

        snapshot = list(log)[-self.log_snapshot:] if self.log_snapshot else []
        self.persistence.enqueue(SCENES, SceneCacheEntry.from_scene(location_id, scene, snapshot))
        return scene, False

    async def invalidate(self, location_id: str) -> None:
        """Drop the cached row for a location"""
        self.persistence.enqueue_delete(SCENES, scene_cache_key(location_id))
        logger.debug(f"Scene cache invalidated for {location_id}")

    async def regenerate(
        self,
        context: NarrativeContext,
        outcome_summaries: Sequence[str] = (),
        previous_scene: Scene | None = None,
        log: Sequence[str] = (),
    ) -> Scene:
        """Invalidate the location's row and narrate a continuation"""
        await self.invalidate(context.location.id)
        scene, _ = await self.get_or_generate(
            context,
            is_intro=False,
            outcome_summaries=outcome_summaries,
            previous_scene=previous_scene,
            log=log,
        )
        return scene

    async def _read(self, location_id: str) -> SceneCacheEntry | None:
        await self.persistence.drain()
        try:
            return await self.repository.get_scene(location_id)
        except (StoreError, ValidationError) as e:
            logger.warning(f"Scene cache read failed for {location_id}, regenerating: {e}")
            return None

    async def _narrate_once(
        self,
        context: NarrativeContext,
        is_intro: bool,
        outcome_summaries: Sequence[str],
        previous_scene: Scene | None,
    ) -> Scene:
        if is_intro:
            return await self.narrator.narrate_intro(context)
        return await self.narrator.narrate_continuation(context, outcome_summaries, previous_scene)
