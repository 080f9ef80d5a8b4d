# ABOUTME: Extraction of [category:text] narrative tags embedded in scene descriptions.
# ABOUTME: Unknown categories are ignored so free brackets in prose never become targets.

import re

from src.models.actions import TagCategory

TAG_PATTERN = re.compile(r"\[([a-z]+):([^\]]+)\]")

_CATEGORIES = {category.value: category for category in TagCategory}


def extract_tags(text: str) -> list[tuple[TagCategory, str]]:
    """
    Extract narrative tags in order of appearance.

    Args:
        text: Scene description

    Returns:
        List of (category, visible text) pairs
    """
    tags = []
    for match in TAG_PATTERN.finditer(text):
        category = _CATEGORIES.get(match.group(1))
        if category is not None:
            tags.append((category, match.group(2).strip()))
    return tags


def strip_tags(text: str) -> str:
    """Replace every known tag with its visible text"""
    def _visible(match: re.Match[str]) -> str:
        if match.group(1) in _CATEGORIES:
            return match.group(2)
        return match.group(0)

    return TAG_PATTERN.sub(_visible, text)
