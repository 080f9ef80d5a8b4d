# ABOUTME: Pydantic models for submitted and validated per-character actions.
# ABOUTME: ActionSubmission carries player intent; ValidatedAction is the immutable validator output.

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.models.character import PrimaryAttribute


class TagCategory(str, Enum):
    """Semantic categories of the [category:text] tags embedded in scenes"""
    NPC = "npc"
    ENEMY = "enemy"
    ITEM = "item"
    LOCATION = "location"
    QUEST = "quest"
    DANGER = "danger"
    LORE = "lore"
    SKILL = "skill"
    CHOICE = "choice"


class RiskLevel(str, Enum):
    """Risk classification assigned by validation"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SelectedTarget(BaseModel):
    """Scene element the player picked as the focus of an action"""

    text: str
    category: TagCategory
    label: str | None = Field(default=None, description="Display label for the category")

    @property
    def display_label(self) -> str:
        return self.label or self.category.value


class ActionSubmission(BaseModel):
    """One party member's intent for the round"""

    character_id: str
    text: str = ""
    skip: bool = False
    target: SelectedTarget | None = None

    @property
    def is_actionable(self) -> bool:
        """Non-skipped with non-blank text"""
        return not self.skip and bool(self.text.strip())

    def prompt_text(self) -> str:
        """Action text as sent to validation, prefixed with the selected target"""
        text = self.text.strip()
        if self.target is None:
            return text
        return f"[Target: {self.target.text} ({self.target.display_label})] {text}"


class ValidatedAction(BaseModel):
    """Structured action produced once per submission and consumed once by the dice roll"""

    model_config = ConfigDict(frozen=True)

    character_id: str
    description: str = Field(description="Narrative description of the attempted action")
    primary_attribute: PrimaryAttribute = PrimaryAttribute.PERCEPCAO
    difficulty: int = Field(ge=5, le=20, description="Target number for the roll")
    risk_level: RiskLevel = RiskLevel.MEDIUM
    affects_inventory: bool = False
    valid: bool = True
    reason: str = ""
    target_text: str | None = None
    target_category: TagCategory | None = None
