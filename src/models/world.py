# ABOUTME: Pydantic models describing the world, its acts, locations and per-location content.
# ABOUTME: Location content lists the items, NPCs, enemies and quests that narration draws from.

from pydantic import BaseModel, Field

from src.models.equipment import EquipmentType, Rarity


class Act(BaseModel):
    """Story act grouping locations under one objective"""

    id: str
    title: str
    description: str = ""
    objective: str = ""
    location_ids: list[str] = Field(default_factory=list)


class World(BaseModel):
    """Top-level adventure world"""

    id: str
    name: str
    description: str = ""
    genre: str = Field(default="fantasia", description="Narrative genre")
    tone: str = Field(default="", description="Narrative tone guidance")
    intro_narrative: str | None = Field(
        default=None,
        description="Pre-written intro used as the base of the first scene"
    )
    acts: list[Act] = Field(default_factory=list)
    current_act_id: str | None = None

    def current_act(self) -> Act | None:
        """Active act, or the first act when none is selected"""
        for act in self.acts:
            if act.id == self.current_act_id:
                return act
        return self.acts[0] if self.acts else None


class Location(BaseModel):
    """A place the party can occupy"""

    id: str
    world_id: str
    name: str
    description: str = ""
    kind: str = Field(default="", description="Location kind, e.g. city, dungeon")
    connected_location_ids: list[str] = Field(default_factory=list)


class LocationItem(BaseModel):
    """Item descriptor defined for a location, used to seed loot"""

    name: str
    type: EquipmentType = EquipmentType.TESOURO
    rarity: Rarity = Rarity.COMUM
    description: str = ""


class Npc(BaseModel):
    """Non-player character present at a location"""

    name: str
    role: str = ""
    description: str = ""


class Enemy(BaseModel):
    """Hostile creature present at a location"""

    name: str
    level: int = Field(default=1, ge=1)
    description: str = ""


class Quest(BaseModel):
    """Objective available at a location"""

    id: str
    title: str
    description: str = ""


class LocationContent(BaseModel):
    """Everything narration can reference at one location"""

    id: str = Field(description="Same as the location id")
    location_id: str
    items: list[LocationItem] = Field(default_factory=list)
    npcs: list[Npc] = Field(default_factory=list)
    enemies: list[Enemy] = Field(default_factory=list)
    quests: list[Quest] = Field(default_factory=list)
    dangers: list[str] = Field(default_factory=list)
