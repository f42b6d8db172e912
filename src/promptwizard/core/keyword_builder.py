"""Tag-mode keyword builder.

Unlike the wizard, which keeps exactly one option per step, the keyword
builder keeps an ordered list of keywords across any number of categories.
Keywords are unique by id.  The two default quality keywords are always
present and cannot be removed.
"""

from __future__ import annotations

import logging

from promptwizard.core.catalog import TAG_CATEGORIES
from promptwizard.core.models import Keyword, Option
from promptwizard.core.prompt_assembler import CUSTOM_CATEGORY, DEFAULT_CATEGORY, assemble_keywords

logger = logging.getLogger(__name__)

DEFAULT_KEYWORDS: tuple[Keyword, ...] = (
    Keyword(id="high-quality", label="High Quality", category=DEFAULT_CATEGORY),
    Keyword(id="detailed", label="Detailed", category=DEFAULT_CATEGORY),
)
DEFAULT_KEYWORD_IDS = frozenset(k.id for k in DEFAULT_KEYWORDS)


class KeywordBuilder:
    """Multi-select prompt builder.

    Attributes:
        active_category (str): Category whose options are on screen.
        selected_keywords (list[Keyword]): Selected keywords in order, always
            starting with the default keywords.
    """

    def __init__(self, active_category: str = TAG_CATEGORIES[0].id) -> None:
        self.active_category = active_category
        self.selected_keywords: list[Keyword] = list(DEFAULT_KEYWORDS)
        self._edited_prompt: str | None = None
        self._custom_counter = 0

    def is_selected(self, keyword_id: str) -> bool:
        return any(k.id == keyword_id for k in self.selected_keywords)

    def set_category(self, category: str) -> None:
        self.active_category = category

    def toggle_option(self, option: Option | Keyword) -> bool:
        """Select *option* if absent, deselect it if present.

        Options are tagged with the active category.  Default keywords stay
        selected.

        Returns:
            Whether the option is selected afterwards.
        """
        if self.is_selected(option.id):
            self.remove_keyword(option.id)
            return self.is_selected(option.id)

        if isinstance(option, Keyword):
            keyword = option
        else:
            keyword = Keyword(id=option.id, label=option.label, category=self.active_category)
        self.selected_keywords.append(keyword)
        return True

    def remove_keyword(self, keyword_id: str) -> None:
        """Remove a keyword by id; default keywords are never removed."""
        if keyword_id in DEFAULT_KEYWORD_IDS:
            return
        self.selected_keywords = [k for k in self.selected_keywords if k.id != keyword_id]

    def add_custom_keyword(self, text: str) -> Keyword | None:
        """Add a free-text keyword; blank text is ignored."""
        label = text.strip()
        if not label:
            return None
        self._custom_counter += 1
        keyword = Keyword(id=f"custom-{self._custom_counter}", label=label, category=CUSTOM_CATEGORY)
        self.selected_keywords.append(keyword)
        logger.debug(f"Added custom keyword '{label}'")
        return keyword

    @property
    def assembled_prompt(self) -> str:
        return assemble_keywords(self.selected_keywords)

    @property
    def prompt(self) -> str:
        if self._edited_prompt is not None:
            return self._edited_prompt
        return self.assembled_prompt

    def edit_prompt(self, text: str) -> None:
        self._edited_prompt = text

    def reset_edited_prompt(self) -> None:
        self._edited_prompt = None

    def reset(self) -> None:
        """Clear every non-default keyword and any prompt override."""
        self.selected_keywords = list(DEFAULT_KEYWORDS)
        self._edited_prompt = None
