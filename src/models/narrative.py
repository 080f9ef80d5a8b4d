# ABOUTME: Pydantic models for narration inputs and outputs: context snapshot, scenes, outcomes and loot.
# ABOUTME: NarrativeContext is a frozen snapshot passed to every AI stage of a round.

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.models.character import Character
from src.models.equipment import Equipment
from src.models.world import Location, LocationContent, World


class NarrativeMood(str, Enum):
    """Emotional tone of a scene"""
    NEUTRO = "Neutro"
    ALEGRE = "Alegre"
    TRISTE = "Triste"
    INSPIRADOR = "Inspirador"
    MEDO = "Medo"
    TENSAO = "Tensão"
    MISTERIO = "Mistério"
    SOMBRIO = "Sombrio"
    COMBATE = "Combate"
    VITORIA = "Vitória"

    @classmethod
    def parse(cls, value: object) -> "NarrativeMood":
        """Map free text to a mood, defaulting to Neutro"""
        for mood in cls:
            if mood.value == value:
                return mood
        return cls.NEUTRO


class NarrativeContext(BaseModel):
    """Immutable world/location/party snapshot for one narration or validation call"""

    model_config = ConfigDict(frozen=True)

    world: World
    location: Location
    content: LocationContent
    party: tuple[Character, ...] = ()
    equipment_map: dict[str, Equipment] = Field(
        default_factory=dict,
        description="equipment_id -> Equipment for every item the party owns"
    )
    history: tuple[str, ...] = Field(
        default=(),
        description="Recent action log lines, oldest first"
    )

    def character(self, character_id: str) -> Character | None:
        for member in self.party:
            if member.id == character_id:
                return member
        return None


class Scene(BaseModel):
    """Narrated scene for a location"""

    title: str
    description: str
    mood: NarrativeMood = NarrativeMood.NEUTRO


class OutcomeNarrative(BaseModel):
    """Narration of one resolved action"""

    text: str
    consequence: str = ""


class ItemGrant(BaseModel):
    """An item to add to a character's inventory"""

    equipment: Equipment
    character_id: str | None = Field(
        default=None,
        description="Recipient suggested by generation; resolved against the party"
    )
    quantity: int = Field(default=1, ge=1)


class GoldChange(BaseModel):
    """A gold delta for a character; negative amounts are clamped at zero balance"""

    character_id: str | None = None
    amount: int


class LootResult(BaseModel):
    """Items and gold produced by the loot stage"""

    items: list[ItemGrant] = Field(default_factory=list)
    gold: list[GoldChange] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items and not self.gold
