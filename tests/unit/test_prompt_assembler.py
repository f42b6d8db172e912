"""Unit tests for prompt assembly from selections and keywords."""

from promptwizard.core.keyword_builder import DEFAULT_KEYWORDS
from promptwizard.core.models import Keyword, Option
from promptwizard.core.prompt_assembler import QUALITY_SUFFIX, assemble_keywords, assemble_prompt


class TestAssemblePrompt:
    """Tests for wizard-mode assembly."""

    def test_subject_only(self):
        assert assemble_prompt({"subject": "Landscape"}) == (
            "Landscape, high quality, detailed, 8k resolution"
        )

    def test_subject_style_mood(self):
        selections = {"subject": "Portrait", "style": "Watercolor", "mood": "Serene"}
        assert assemble_prompt(selections) == (
            "Portrait, in the style of Watercolor, with a Serene mood, "
            "high quality, detailed, 8k resolution"
        )

    def test_empty_selections(self):
        assert assemble_prompt({}) == QUALITY_SUFFIX

    def test_all_categories_in_fixed_order(self):
        selections = {
            "mood": Option(id="m", label="Dramatic"),
            "style": Option(id="s", label="Impressionist"),
            "composition": Option(id="c", label="Rule of Thirds"),
            "elements": Option(id="e", label="Lush Foliage"),
            "setting": Option(id="st", label="Fantasy World"),
            "details": Option(id="d", label="Intricate Details"),
            "subject": Option(id="sub", label="Animal"),
        }
        assert assemble_prompt(selections) == (
            "Animal, with Intricate Details, in Fantasy World, featuring Lush Foliage, "
            "with Rule of Thirds composition, in the style of Impressionist, "
            "with a Dramatic mood, high quality, detailed, 8k resolution"
        )

    def test_insertion_order_does_not_matter(self):
        a = assemble_prompt({"subject": "Cat", "mood": "Joyful", "setting": "Garden"})
        b = assemble_prompt({"setting": "Garden", "mood": "Joyful", "subject": "Cat"})
        assert a == b

    def test_mapping_values(self):
        assert assemble_prompt({"subject": {"id": "cat", "label": "Cat"}}).startswith("Cat, ")

    def test_skipped_and_unknown_categories_ignored(self):
        assert assemble_prompt({"subject": "Cat", "details": None, "weather": "Rain"}) == (
            "Cat, high quality, detailed, 8k resolution"
        )

    def test_multiple_values_joined_with_and(self):
        assert assemble_prompt({"subject": ["Cat", "Dog"]}) == (
            "Cat and Dog, high quality, detailed, 8k resolution"
        )


class TestAssembleKeywords:
    """Tests for tag-mode assembly."""

    def test_defaults_only(self):
        assert assemble_keywords(DEFAULT_KEYWORDS) == QUALITY_SUFFIX

    def test_groups_by_category(self):
        keywords = [
            Keyword(id="a", label="Serene", category="mood"),
            Keyword(id="b", label="Cat", category="subject"),
            Keyword(id="c", label="Dog", category="subject"),
        ]
        assert assemble_keywords(keywords) == (
            "Cat and Dog, with a Serene mood, high quality, detailed, 8k resolution"
        )

    def test_tag_only_categories(self):
        keywords = [
            Keyword(id="t", label="Medieval", category="time"),
            Keyword(id="c", label="Pastel", category="color"),
            Keyword(id="l", label="Golden Hour", category="lighting"),
            Keyword(id="s", label="Castle", category="subject"),
        ]
        assert assemble_keywords(keywords) == (
            "Castle, with Golden Hour lighting, with a Pastel color palette, "
            "set in Medieval era, high quality, detailed, 8k resolution"
        )

    def test_custom_keywords_verbatim_after_clauses(self):
        keywords = [
            Keyword(id="custom-1", label="glowing eyes", category="custom"),
            Keyword(id="s", label="Owl", category="subject"),
            *DEFAULT_KEYWORDS,
        ]
        assert assemble_keywords(keywords) == (
            "Owl, glowing eyes, high quality, detailed, 8k resolution"
        )
