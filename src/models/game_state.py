# ABOUTME: Round state models for the turn queue and the per-character LangGraph resolution state.
# ABOUTME: Defines round phases, resolved outcomes, level-up events and round-level result objects.

from datetime import UTC, datetime
from enum import Enum
from typing import NotRequired, TypedDict

from pydantic import BaseModel, ConfigDict, Field

from src.models.actions import ValidatedAction
from src.models.character import Character
from src.models.diary import DiaryEntry
from src.models.dice_models import RollOutcome, RollResult
from src.models.equipment import Equipment
from src.models.narrative import LootResult, NarrativeContext, OutcomeNarrative, Scene


class TurnPhase(str, Enum):
    """Phases of the per-round state machine"""
    AWAITING_ACTIONS = "awaiting_actions"
    VALIDATING = "validating"
    RESOLVING = "resolving"
    CLOSING = "closing"


class LevelUpEvent(BaseModel):
    """Emitted when an XP grant crosses the level threshold"""

    model_config = ConfigDict(frozen=True)

    character_id: str
    previous_level: int
    new_level: int
    xp_remaining: int


class ResolvedOutcome(BaseModel):
    """Per-character result of one resolved action"""

    model_config = ConfigDict(frozen=True)

    character_id: str
    character_name: str
    action: ValidatedAction
    roll: RollResult
    narrative: OutcomeNarrative
    items_granted: list[Equipment] = Field(default_factory=list)
    gold_granted: int = 0
    xp_granted: int = 0
    level_up: LevelUpEvent | None = None

    @property
    def outcome(self) -> RollOutcome:
        return self.roll.outcome

    @property
    def roll_total(self) -> int:
        return self.roll.total

    @property
    def difficulty(self) -> int:
        return self.roll.difficulty


class RoundState(BaseModel):
    """Immutable snapshot of one round; every transition produces a new instance"""

    model_config = ConfigDict(frozen=True)

    round_number: int = Field(default=1, ge=1)
    phase: TurnPhase = TurnPhase.AWAITING_ACTIONS
    context: NarrativeContext
    scene: Scene | None = None
    queue: tuple[ValidatedAction, ...] = ()
    invalid_actions: tuple[ValidatedAction, ...] = ()
    outcomes: tuple[ResolvedOutcome, ...] = ()
    log: tuple[str, ...] = ()
    previous_summaries: tuple[str, ...] = Field(
        default=(),
        description="Outcome summaries of the previous round, fed to validation"
    )
    roll_in_flight: bool = False
    closing_in_flight: bool = Field(
        default=False,
        description="Set while close_round awaits narration; a second close is rejected"
    )
    party_stale: bool = Field(
        default=False,
        description="Set when a resolution was interrupted; party must be reloaded"
    )
    pending_level_ups: tuple[LevelUpEvent, ...] = Field(
        default=(),
        description="Level-ups earned this session whose attribute points are not yet spent"
    )
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def party(self) -> tuple[Character, ...]:
        return self.context.party

    @property
    def head(self) -> ValidatedAction | None:
        return self.queue[0] if self.queue else None


class ResolutionState(TypedDict):
    """LangGraph state for resolving one rolled action"""
    context: NarrativeContext
    action: ValidatedAction
    roll: RollResult
    character_name: str
    party: list[Character]
    scene_text: NotRequired[str | None]
    narrative: NotRequired[OutcomeNarrative]
    loot: NotRequired[LootResult]
    items_granted: NotRequired[list[Equipment]]
    gold_granted: NotRequired[int]
    xp_granted: NotRequired[int]
    level_up: NotRequired[LevelUpEvent | None]


# ============================================================================
# Round-level results returned to the UI layer
# ============================================================================


class ActionValidationResult(BaseModel):
    """Result of submitting the round's actions"""

    valid_actions: list[ValidatedAction] = Field(default_factory=list)
    invalid_actions: list[ValidatedAction] = Field(default_factory=list)


class RollSubmissionResult(BaseModel):
    """Result of resolving one queued action"""

    resolved_outcome: ResolvedOutcome
    updated_characters: list[Character]
    level_up: LevelUpEvent | None = None
    remaining: int = Field(ge=0, description="Actions still queued this round")


class RoundClosure(BaseModel):
    """Result of closing a round"""

    diary_entry: DiaryEntry | None = None
    next_scene: Scene
