# ABOUTME: Utility module exports for dice resolution, progression, inventory, tags and logging.
# ABOUTME: Every helper here is pure except the loguru configuration in logging.py.

from src.utils.dice import compute_roll_inputs, resolve_roll, roll_d20
from src.utils.inventory import InventoryError, add_item, apply_gold, consume_item, equip, unequip
from src.utils.logging import log_round_event, setup_logging
from src.utils.progression import apply_level_up, grant_experience
from src.utils.tags import extract_tags, strip_tags

__all__ = [
    "roll_d20",
    "resolve_roll",
    "compute_roll_inputs",
    "InventoryError",
    "add_item",
    "consume_item",
    "apply_gold",
    "equip",
    "unequip",
    "grant_experience",
    "apply_level_up",
    "extract_tags",
    "strip_tags",
    "setup_logging",
    "log_round_event",
]
