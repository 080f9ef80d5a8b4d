# ABOUTME: Pydantic models for party characters, their attributes, inventory and equip slots.
# ABOUTME: Validators enforce the gold, xp and quantity invariants on every load and save.

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class PrimaryAttribute(str, Enum):
    """The six action attributes an action can be tested against"""
    FORCA = "forca"
    AGILIDADE = "agilidade"
    INTELECTO = "intelecto"
    CARISMA = "carisma"
    VONTADE = "vontade"
    PERCEPCAO = "percepcao"


class EquipSlot(str, Enum):
    """Fixed equip slots"""
    ARMA = "arma"
    ARMADURA = "armadura"
    ESCUDO = "escudo"
    ACESSORIO = "acessorio"


class ActionAttributes(BaseModel):
    """Attributes used for action rolls"""

    forca: int = Field(default=1, ge=0)
    agilidade: int = Field(default=1, ge=0)
    intelecto: int = Field(default=1, ge=0)
    carisma: int = Field(default=1, ge=0)
    vontade: int = Field(default=1, ge=0)
    percepcao: int = Field(default=1, ge=0)

    def value_of(self, attribute: PrimaryAttribute) -> int:
        return getattr(self, attribute.value)


class BattleAttributes(BaseModel):
    """Attributes used in battle"""

    ataque: int = Field(default=1, ge=0)
    defesa: int = Field(default=1, ge=0)
    velocidade: int = Field(default=1, ge=0)
    magia: int = Field(default=0, ge=0)


class InventoryItem(BaseModel):
    """One inventory slot referencing an Equipment definition"""

    id: str = Field(description="Unique slot identifier")
    equipment_id: str = Field(description="Referenced Equipment id")
    quantity: int = Field(ge=1, description="Number of units held (never zero)")


def _empty_slots() -> dict[EquipSlot, str | None]:
    return {slot: None for slot in EquipSlot}


class Character(BaseModel):
    """Party member state, persisted by whole-object overwrite"""

    id: str
    world_id: str
    name: str
    archetype: str = Field(default="", description="Class/archetype label")
    action_attributes: ActionAttributes = Field(default_factory=ActionAttributes)
    battle_attributes: BattleAttributes = Field(default_factory=BattleAttributes)
    hp: int = Field(default=20, ge=0)
    max_hp: int = Field(default=20, ge=1)
    xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    gold: int = Field(default=0, ge=0)
    inventory: list[InventoryItem] = Field(default_factory=list)
    equipped_items: dict[EquipSlot, str | None] = Field(default_factory=_empty_slots)

    @model_validator(mode="after")
    def validate_progression(self) -> "Character":
        """Ensure xp never sits at or above the level-up threshold"""
        if self.xp >= self.xp_needed:
            raise ValueError(
                f"xp {self.xp} must be below level threshold {self.xp_needed}"
            )
        for slot in EquipSlot:
            self.equipped_items.setdefault(slot, None)
        return self

    @property
    def xp_needed(self) -> int:
        """XP required to reach the next level"""
        return self.level * 100

    def quantity_of(self, equipment_id: str) -> int:
        """Total units held of one equipment id"""
        return sum(
            item.quantity for item in self.inventory if item.equipment_id == equipment_id
        )

    def owned_equipment_ids(self) -> set[str]:
        return {item.equipment_id for item in self.inventory}
