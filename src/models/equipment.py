# ABOUTME: Pydantic models for equipment definitions shared by reference across inventories.
# ABOUTME: Includes Rarity ordering with raise/lower helpers, EquipmentType and UsageContext enums.

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Rarity(str, Enum):
    """Item rarity, ordered from most common to rarest"""
    COMUM = "comum"
    INCOMUM = "incomum"
    RARO = "raro"
    EPICO = "epico"
    LENDARIO = "lendario"

    @property
    def rank(self) -> int:
        """Position of this rarity in the ordering (0 = comum)"""
        return _RARITY_ORDER.index(self)

    def raised(self) -> "Rarity":
        """One tier rarer, saturating at lendario"""
        return _RARITY_ORDER[min(self.rank + 1, len(_RARITY_ORDER) - 1)]

    def lowered(self) -> "Rarity":
        """One tier more common, saturating at comum"""
        return _RARITY_ORDER[max(self.rank - 1, 0)]


_RARITY_ORDER = [
    Rarity.COMUM,
    Rarity.INCOMUM,
    Rarity.RARO,
    Rarity.EPICO,
    Rarity.LENDARIO,
]


class EquipmentType(str, Enum):
    """Equipment categories"""
    ARMA = "arma"
    ARMADURA = "armadura"
    ESCUDO = "escudo"
    POCAO = "pocao"
    PERGAMINHO = "pergaminho"
    AMULETO = "amuleto"
    ANEL = "anel"
    FERRAMENTA = "ferramenta"
    MATERIAL = "material"
    CHAVE = "chave"
    TESOURO = "tesouro"


class UsageContext(str, Enum):
    """When an item can be used"""
    BATALHA = "batalha"
    PRE_ACAO = "pre-acao"
    AMBOS = "ambos"
    PASSIVO = "passivo"
    NARRATIVO = "narrativo"


class Equipment(BaseModel):
    """Immutable equipment definition referenced from inventories by id"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique equipment identifier")
    name: str = Field(min_length=1, description="Display name")
    description: str = Field(default="", description="Flavor text")
    type: EquipmentType = Field(description="Equipment category")
    rarity: Rarity = Field(description="Rarity tier")
    bonus: dict[str, int] = Field(
        default_factory=dict,
        description="Attribute name -> bonus applied when the item is used or equipped"
    )
    difficulty_reduction: int = Field(
        default=0,
        ge=0,
        description="Difficulty reduction when used before an action"
    )
    hp_restore: int = Field(default=0, ge=0, description="HP restored on use")
    sell_price: int = Field(default=0, ge=0, description="Gold value when sold")
    consumable: bool = Field(default=False, description="Consumed on use")
    equippable: bool = Field(default=False, description="Can be placed in an equip slot")
    stackable: bool = Field(default=False, description="Stacks into a single inventory slot")
    usage_context: UsageContext = Field(
        default=UsageContext.PASSIVO,
        description="When the item can be used"
    )
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def usable_before_action(self) -> bool:
        """Whether the item can be spent on an action roll"""
        return self.usage_context in (UsageContext.PRE_ACAO, UsageContext.AMBOS)
