# ABOUTME: Unit tests for narrative tag extraction.
# ABOUTME: Validates category recognition, ordering and tag stripping.

from src.models.actions import TagCategory
from src.utils.tags import extract_tags, strip_tags


class TestExtractTags:
    """Test suite for extract_tags function"""

    def test_extracts_in_order(self):
        """Test tags come back in order of appearance"""
        text = "You see [npc:Mayor Hedda] beside [item:a rusted key] near [location:the well]."

        assert extract_tags(text) == [
            (TagCategory.NPC, "Mayor Hedda"),
            (TagCategory.ITEM, "a rusted key"),
            (TagCategory.LOCATION, "the well"),
        ]

    def test_unknown_categories_ignored(self):
        """Test brackets with unknown categories are not tags"""
        assert extract_tags("A sign reads [note:closed] and [danger:loose stones].") == [
            (TagCategory.DANGER, "loose stones"),
        ]

    def test_no_tags(self):
        """Test plain prose yields nothing"""
        assert extract_tags("Rain falls on the roofs.") == []


class TestStripTags:
    """Test suite for strip_tags function"""

    def test_replaces_tags_with_visible_text(self):
        """Test tags become their visible text"""
        assert strip_tags("Talk to [npc:Aldo] about [quest:the seal].") == (
            "Talk to Aldo about the seal."
        )

    def test_leaves_unknown_brackets(self):
        """Test unknown brackets are preserved"""
        assert strip_tags("[note:x] stays") == "[note:x] stays"
