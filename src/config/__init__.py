"""Configuration module for the turn resolution engine"""

from .prompts import (
    LOOT_SCHEMA,
    LOOT_SYSTEM_PROMPT,
    OUTCOME_SCHEMA,
    OUTCOME_SYSTEM_PROMPT,
    SCENE_SCHEMA,
    STORY_SYSTEM_PROMPT,
    VALIDATION_SCHEMA,
    VALIDATOR_SYSTEM_PROMPT,
)
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "STORY_SYSTEM_PROMPT",
    "SCENE_SCHEMA",
    "VALIDATOR_SYSTEM_PROMPT",
    "VALIDATION_SCHEMA",
    "OUTCOME_SYSTEM_PROMPT",
    "OUTCOME_SCHEMA",
    "LOOT_SYSTEM_PROMPT",
    "LOOT_SCHEMA",
]
