# ABOUTME: Pydantic models for d20 roll results and the five outcome tiers.
# ABOUTME: RollResult validates that total equals raw plus modifier.

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class RollOutcome(str, Enum):
    """Outcome tier of a d20 roll against a difficulty"""
    CRITICAL_FAIL = "critical-fail"
    FAIL = "fail"
    PARTIAL = "partial"
    SUCCESS = "success"
    CRITICAL = "critical"

    @property
    def is_success(self) -> bool:
        """Partial, success and critical count as successes for loot and XP"""
        return self in (RollOutcome.PARTIAL, RollOutcome.SUCCESS, RollOutcome.CRITICAL)

    @property
    def label(self) -> str:
        return _OUTCOME_LABELS[self]


_OUTCOME_LABELS = {
    RollOutcome.CRITICAL_FAIL: "Critical failure",
    RollOutcome.FAIL: "Failure",
    RollOutcome.PARTIAL: "Partial success",
    RollOutcome.SUCCESS: "Success",
    RollOutcome.CRITICAL: "Critical success",
}


class RollResult(BaseModel):
    """Resolved d20 roll"""

    raw: int = Field(ge=1, le=20, description="Natural d20 value")
    modifier: int = Field(description="Attribute plus item bonus")
    difficulty: int = Field(ge=1, description="Effective difficulty after item reductions")
    total: int = Field(description="raw + modifier")
    outcome: RollOutcome
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def validate_total(self) -> "RollResult":
        """Ensure total is consistent with raw and modifier"""
        if self.total != self.raw + self.modifier:
            raise ValueError(
                f"total {self.total} != raw {self.raw} + modifier {self.modifier}"
            )
        return self
