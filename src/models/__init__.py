"""Data models for the turn resolution engine"""

from .actions import (
    ActionSubmission,
    RiskLevel,
    SelectedTarget,
    TagCategory,
    ValidatedAction,
)
from .character import (
    ActionAttributes,
    BattleAttributes,
    Character,
    EquipSlot,
    InventoryItem,
    PrimaryAttribute,
)
from .diary import DiaryAction, DiaryEntry, ObtainedItem, SceneCacheEntry, scene_cache_key
from .dice_models import RollOutcome, RollResult
from .equipment import Equipment, EquipmentType, Rarity, UsageContext
from .game_state import (
    ActionValidationResult,
    LevelUpEvent,
    ResolutionState,
    ResolvedOutcome,
    RollSubmissionResult,
    RoundClosure,
    RoundState,
    TurnPhase,
)
from .narrative import (
    GoldChange,
    ItemGrant,
    LootResult,
    NarrativeContext,
    NarrativeMood,
    OutcomeNarrative,
    Scene,
)
from .world import Act, Enemy, Location, LocationContent, LocationItem, Npc, Quest, World

__all__ = [
    # World models
    "World",
    "Act",
    "Location",
    "LocationContent",
    "LocationItem",
    "Npc",
    "Enemy",
    "Quest",
    # Character models
    "Character",
    "ActionAttributes",
    "BattleAttributes",
    "InventoryItem",
    "EquipSlot",
    "PrimaryAttribute",
    # Equipment models
    "Equipment",
    "EquipmentType",
    "Rarity",
    "UsageContext",
    # Action models
    "ActionSubmission",
    "SelectedTarget",
    "TagCategory",
    "RiskLevel",
    "ValidatedAction",
    # Dice models
    "RollOutcome",
    "RollResult",
    # Narrative models
    "NarrativeContext",
    "NarrativeMood",
    "Scene",
    "OutcomeNarrative",
    "ItemGrant",
    "GoldChange",
    "LootResult",
    # History models
    "DiaryAction",
    "DiaryEntry",
    "ObtainedItem",
    "SceneCacheEntry",
    "scene_cache_key",
    # Round state models
    "TurnPhase",
    "LevelUpEvent",
    "ResolvedOutcome",
    "RoundState",
    "ResolutionState",
    "ActionValidationResult",
    "RollSubmissionResult",
    "RoundClosure",
]
