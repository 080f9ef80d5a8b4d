# ABOUTME: Pydantic models for persisted round history: diary entries and scene cache rows.
# ABOUTME: Diary entries are append-only; scene cache rows are keyed one per location.

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.dice_models import RollOutcome
from src.models.equipment import Rarity
from src.models.narrative import NarrativeMood, Scene


def scene_cache_key(location_id: str) -> str:
    """Cache row id for a location"""
    return f"scene-{location_id}"


class ObtainedItem(BaseModel):
    name: str
    rarity: Rarity


class DiaryAction(BaseModel):
    """One character's action and outcome within a diary entry"""

    model_config = ConfigDict(frozen=True)

    character_name: str
    archetype: str = ""
    target_text: str | None = None
    target_category: str | None = None
    action_text: str
    dice_outcome: RollOutcome
    roll_total: int
    outcome_text: str
    consequence: str = ""
    items_obtained: list[ObtainedItem] = Field(default_factory=list)
    gold_obtained: int = 0


class DiaryEntry(BaseModel):
    """Immutable record of one closed round"""

    model_config = ConfigDict(frozen=True)

    id: str
    world_id: str
    location_id: str
    location_name: str
    scene_title: str
    scene_description: str
    actions: list[DiaryAction] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class SceneCacheEntry(BaseModel):
    """Last-served scene for a location plus an action log snapshot"""

    id: str
    location_id: str
    title: str
    description: str
    mood: NarrativeMood = NarrativeMood.NEUTRO
    log: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_scene(
        cls, location_id: str, scene: Scene, log: list[str] | None = None
    ) -> "SceneCacheEntry":
        return cls(
            id=scene_cache_key(location_id),
            location_id=location_id,
            title=scene.title,
            description=scene.description,
            mood=scene.mood,
            log=list(log or []),
        )

    def to_scene(self) -> Scene:
        return Scene(title=self.title, description=self.description, mood=self.mood)
