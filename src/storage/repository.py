# ABOUTME: Typed repository mapping engine models onto ObjectStore collections.
# ABOUTME: Characters and equipment are saved by whole-object overwrite; scene and diary rows arrive via the write queue.

from collections.abc import Iterable
from typing import TypeVar

from pydantic import BaseModel

from src.models.character import Character
from src.models.diary import DiaryEntry, SceneCacheEntry, scene_cache_key
from src.models.equipment import Equipment
from src.models.world import Location, LocationContent, World
from src.storage.exceptions import RecordNotFound
from src.storage.store import ObjectStore

WORLDS = "worlds"
LOCATIONS = "locations"
LOCATION_CONTENT = "location_content"
CHARACTERS = "characters"
EQUIPMENT = "equipment"
SCENES = "scenes"
DIARY = "diary"

M = TypeVar("M", bound=BaseModel)


class GameRepository:
    """Typed access to the persistent store"""

    def __init__(self, store: ObjectStore):
        self.store = store

    async def _load(self, collection: str, rid: str, model: type[M]) -> M | None:
        value = await self.store.get(collection, rid)
        return model.model_validate(value) if value is not None else None

    async def _require(self, collection: str, rid: str, model: type[M]) -> M:
        loaded = await self._load(collection, rid, model)
        if loaded is None:
            raise RecordNotFound(f"{collection}/{rid} not found")
        return loaded

    async def _save(self, collection: str, value: BaseModel) -> None:
        await self.store.put(collection, value.model_dump(mode="json"))

    # ------------------------------------------------------------------
    # World
    # ------------------------------------------------------------------

    async def get_world(self, world_id: str) -> World:
        return await self._require(WORLDS, world_id, World)

    async def save_world(self, world: World) -> None:
        await self._save(WORLDS, world)

    async def get_location(self, location_id: str) -> Location:
        return await self._require(LOCATIONS, location_id, Location)

    async def save_location(self, location: Location) -> None:
        await self._save(LOCATIONS, location)

    async def get_location_content(self, location_id: str) -> LocationContent:
        """Content for a location; empty when none was authored"""
        content = await self._load(LOCATION_CONTENT, location_id, LocationContent)
        return content or LocationContent(id=location_id, location_id=location_id)

    async def save_location_content(self, content: LocationContent) -> None:
        await self._save(LOCATION_CONTENT, content)

    # ------------------------------------------------------------------
    # Characters & equipment
    # ------------------------------------------------------------------

    async def get_character(self, character_id: str) -> Character:
        return await self._require(CHARACTERS, character_id, Character)

    async def get_party(self, character_ids: Iterable[str]) -> list[Character]:
        return [await self.get_character(cid) for cid in character_ids]

    async def save_character(self, character: Character) -> None:
        await self._save(CHARACTERS, character)

    async def get_equipment(self, equipment_id: str) -> Equipment | None:
        return await self._load(EQUIPMENT, equipment_id, Equipment)

    async def save_equipment(self, equipment: Equipment) -> None:
        await self._save(EQUIPMENT, equipment)

    # ------------------------------------------------------------------
    # Scene cache
    # ------------------------------------------------------------------

    async def get_scene(self, location_id: str) -> SceneCacheEntry | None:
        return await self._load(SCENES, scene_cache_key(location_id), SceneCacheEntry)

    # ------------------------------------------------------------------
    # Diary
    # ------------------------------------------------------------------

    async def list_diary_by_world(self, world_id: str) -> list[DiaryEntry]:
        """Diary entries for a world, oldest first"""
        values = await self.store.list_where(DIARY, lambda v: v.get("world_id") == world_id)
        entries = [DiaryEntry.model_validate(v) for v in values]
        return sorted(entries, key=lambda e: e.created_at)
