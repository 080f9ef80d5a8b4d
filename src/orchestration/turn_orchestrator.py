# ABOUTME: TurnOrchestrator facade exposing round operations to the UI layer.
# ABOUTME: Wires agents, scene cache, resolution graph and turn queue; handles travel, equip and level-up.

import random
from collections.abc import Callable, Sequence

from loguru import logger
from openai import AsyncOpenAI

from src.agents.action_validator import ActionValidator
from src.agents.llm_client import LLMClient
from src.agents.loot_generator import LootGenerator
from src.agents.outcome_narrator import OutcomeNarrator
from src.agents.story_narrator import StoryNarrator
from src.config.settings import Settings, get_settings
from src.models.actions import ActionSubmission, ValidatedAction
from src.models.character import Character, EquipSlot
from src.models.diary import DiaryEntry
from src.models.game_state import (
    ActionValidationResult,
    LevelUpEvent,
    RollSubmissionResult,
    RoundClosure,
    RoundState,
    TurnPhase,
)
from src.models.narrative import Scene
from src.orchestration.context import build_context, resolve_equipment, with_party
from src.orchestration.exceptions import (
    CharacterNotFound,
    InvalidPhaseTransition,
    ItemNotUsable,
    LevelUpNotPending,
)
from src.orchestration.graph_builder import build_resolution_graph
from src.orchestration.nodes.helpers import find_character, replace_character
from src.orchestration.scene_cache import SceneCache
from src.orchestration.state_machine import TurnQueue
from src.storage.repository import GameRepository
from src.storage.store import RedisStore, connect_redis
from src.utils.dice import roll_d20
from src.utils.inventory import InventoryError, equip, unequip
from src.utils.progression import apply_level_up
from src.workers.persistence_queue import PersistenceQueue


class TurnOrchestrator:
    """
    High-level interface for running an adventure session.

    Round surface:
    - submit_actions(submissions) -> valid/invalid actions
    - submit_roll(character_id, raw) -> resolved outcome, updated party, level-up
    - close_round() -> diary entry, next scene
    """

    def __init__(
        self,
        repository: GameRepository,
        llm_client: LLMClient,
        persistence: PersistenceQueue,
        settings: Settings | None = None,
        roll_fn: Callable[[], int] = roll_d20,
        rng: random.Random | None = None,
        retry_wait: float = 0.5,
    ):
        """
        Initialize orchestrator.

        Args:
            repository: Store access
            llm_client: Shared AI transport
            persistence: Background write queue
            settings: Configuration (default: get_settings())
            roll_fn: Source of natural d20 values
            rng: Random source for fallback loot
            retry_wait: Initial backoff between scene generation attempts
        """
        self.settings = settings or get_settings()
        self.repository = repository
        self.persistence = persistence
        self._roll_fn = roll_fn

        timeout = self.settings.llm_timeout
        self.story_narrator = StoryNarrator(llm_client, self.settings.scene_max_tokens, timeout)
        self.validator = ActionValidator(llm_client, self.settings.validation_max_tokens, timeout)
        self.outcome_narrator = OutcomeNarrator(llm_client, self.settings.outcome_max_tokens, timeout)
        self.loot_generator = LootGenerator(llm_client, self.settings.loot_max_tokens, timeout, rng)

        self.scene_cache = SceneCache(
            repository,
            self.story_narrator,
            persistence,
            generation_attempts=self.settings.scene_generation_attempts,
            retry_wait=retry_wait,
            log_snapshot=self.settings.scene_log_snapshot,
        )
        self.graph = build_resolution_graph(self.outcome_narrator, self.loot_generator, repository)
        self._queue: TurnQueue | None = None

    @classmethod
    async def from_settings(cls, settings: Settings | None = None) -> "TurnOrchestrator":
        """
        Build an orchestrator backed by Redis and OpenAI.

        Raises:
            StoreUnavailable: When Redis is not reachable
        """
        settings = settings or get_settings()
        redis_client = await connect_redis(settings.redis_url)
        store = RedisStore(redis_client, settings.store_key_prefix)
        openai_client = AsyncOpenAI(
            api_key=settings.openai_api_key, base_url=settings.openai_base_url
        )
        return cls(
            repository=GameRepository(store),
            llm_client=LLMClient(openai_client, settings.openai_model),
            persistence=PersistenceQueue(
                store,
                settings.persistence_max_attempts,
                settings.persistence_backoff_seconds,
            ),
            settings=settings,
        )

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @property
    def turn_queue(self) -> TurnQueue:
        if self._queue is None:
            raise InvalidPhaseTransition("No session started; call start() first")
        return self._queue

    @property
    def state(self) -> RoundState:
        return self.turn_queue.state

    async def start(
        self, world_id: str, location_id: str, character_ids: Sequence[str]
    ) -> Scene:
        """
        Load the world and party and serve the location's scene.

        Args:
            world_id: World to play
            location_id: Starting location
            character_ids: Party members

        Returns:
            Cached or freshly narrated scene
        """
        world = await self.repository.get_world(world_id)
        location = await self.repository.get_location(location_id)
        content = await self.repository.get_location_content(location_id)
        party = await self.repository.get_party(character_ids)
        equipment = await resolve_equipment(self.repository, party)

        context = build_context(world, location, content, party, equipment=equipment)
        scene, from_cache = await self.scene_cache.get_or_generate(context, is_intro=True)
        logger.info(
            f"Session started in {location.name} with {len(party)} characters "
            f"(scene from cache: {from_cache})"
        )

        self._queue = TurnQueue(
            RoundState(context=context, scene=scene),
            self.repository,
            self.validator,
            self.graph,
            self.scene_cache,
            self.persistence,
            action_log_limit=self.settings.action_log_limit,
            roll_fn=self._roll_fn,
        )
        return scene

    async def shutdown(self) -> None:
        """Flush pending writes"""
        await self.persistence.close()

    # ------------------------------------------------------------------
    # Round operations
    # ------------------------------------------------------------------

    async def submit_actions(
        self, submissions: Sequence[ActionSubmission]
    ) -> ActionValidationResult:
        return await self.turn_queue.submit_actions(submissions)

    def pending_roll(self) -> ValidatedAction | None:
        return self.turn_queue.pending_roll()

    def cancel_roll(self) -> ValidatedAction:
        return self.turn_queue.cancel_roll()

    async def submit_roll(
        self,
        character_id: str,
        raw: int | None = None,
        item_equipment_id: str | None = None,
    ) -> RollSubmissionResult:
        return await self.turn_queue.submit_roll(character_id, raw, item_equipment_id)

    async def close_round(self) -> RoundClosure:
        return await self.turn_queue.close_round()

    # ------------------------------------------------------------------
    # Between rounds
    # ------------------------------------------------------------------

    def _require_between_rounds(self, operation: str) -> None:
        if self.turn_queue.phase != TurnPhase.AWAITING_ACTIONS:
            raise InvalidPhaseTransition(f"{operation} is only allowed between rounds")

    async def travel(self, location_id: str) -> Scene:
        """
        Move the party to another location.

        The current location's scene is invalidated; the destination's scene is
        served from cache or narrated.
        """
        self._require_between_rounds("Travel")
        context = self.state.context
        await self.scene_cache.invalidate(context.location.id)

        location = await self.repository.get_location(location_id)
        content = await self.repository.get_location_content(location_id)
        new_context = build_context(
            context.world,
            location,
            content,
            context.party,
            context.history,
            context.equipment_map.values(),
        )
        scene, _ = await self.scene_cache.get_or_generate(
            new_context, is_intro=True, log=context.history
        )
        self.turn_queue.replace_context(new_context, scene)
        logger.info(f"Party travelled from {context.location.name} to {location.name}")
        return scene

    async def regenerate_scene(self) -> Scene:
        """Discard the current scene and narrate it again"""
        self._require_between_rounds("Scene regeneration")
        context = self.state.context
        await self.scene_cache.invalidate(context.location.id)
        scene, _ = await self.scene_cache.get_or_generate(
            context, is_intro=True, log=context.history
        )
        self.turn_queue.replace_context(context, scene)
        return scene

    async def _update_character(self, updated: Character) -> Character:
        await self.repository.save_character(updated)
        context = self.state.context
        self.turn_queue.replace_context(
            with_party(context, replace_character(context.party, updated))
        )
        return updated

    def _party_member(self, character_id: str) -> Character:
        member = find_character(self.state.party, character_id)
        if member is None:
            raise CharacterNotFound(f"{character_id} is not in the party")
        return member

    async def equip(self, character_id: str, equipment_id: str) -> Character:
        """
        Equip an owned item in the slot matching its type.

        Raises:
            ItemNotUsable: If the item is unknown, not owned, or not equippable
        """
        self._require_between_rounds("Equipping")
        character = self._party_member(character_id)
        equipment = self.state.context.equipment_map.get(equipment_id)
        if equipment is None:
            raise ItemNotUsable(f"{character.name} does not own {equipment_id}")
        try:
            updated = equip(character, equipment)
        except InventoryError as e:
            raise ItemNotUsable(str(e)) from e
        return await self._update_character(updated)

    async def unequip(self, character_id: str, slot: EquipSlot) -> Character:
        self._require_between_rounds("Unequipping")
        return await self._update_character(unequip(self._party_member(character_id), slot))

    @property
    def pending_level_ups(self) -> tuple[LevelUpEvent, ...]:
        """Level-ups whose attribute points are still unspent"""
        return self.state.pending_level_ups

    async def apply_level_up(
        self,
        character_id: str,
        action_deltas: dict[str, int] | None = None,
        battle_deltas: dict[str, int] | None = None,
    ) -> Character:
        """
        Spend the attribute points of one pending level-up.

        Raises:
            LevelUpNotPending: If the character has no unspent level-up
            ValueError: If the deltas do not spend exactly the level's points
        """
        self._require_between_rounds("Level-up allocation")
        member = self._party_member(character_id)
        if not any(e.character_id == character_id for e in self.pending_level_ups):
            raise LevelUpNotPending(f"{member.name} has no level-up to allocate")
        updated = apply_level_up(member, action_deltas, battle_deltas)
        self.turn_queue.consume_level_up(character_id)
        return await self._update_character(updated)

    async def list_diary(self) -> list[DiaryEntry]:
        """Diary entries of the current world, oldest first"""
        await self.persistence.drain()
        return await self.repository.list_diary_by_world(self.state.context.world.id)
