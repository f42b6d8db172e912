"""Domain models shared by the wizard, the option generator and the API.

All models are Pydantic models so they validate LLM output and request
payloads with the same rules.  Field names are snake_case in Python and
camelCase on the wire (``GenerationOptions.llm_model`` <-> ``llmModel``).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ServerStatus = Literal["online", "offline", "checking"]
OptionSource = Literal["llm", "fallback"]

DEFAULT_LLM_MODEL = "gemma3:1b"
DEFAULT_PROMPT_TEMPLATE = "illustrious"
DEFAULT_IMAGE_MODEL = "sdxl"


class CamelModel(BaseModel):
    """Base model that accepts and emits camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Category(CamelModel):
    """A prompt category such as ``subject`` or ``mood``."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    description: str = ""


class Option(CamelModel):
    """One selectable option for a category.

    ``id`` is only unique within the option set returned for one request.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    description: str = ""


class Keyword(CamelModel):
    """A tag-mode keyword.

    ``category`` is a category id, ``"custom"`` for free text, or
    ``"default"`` for the non-removable quality keywords.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    category: str


class GenerationOptions(CamelModel):
    """User-chosen generation configuration, persisted across sessions."""

    llm_model: str = Field(default=DEFAULT_LLM_MODEL)
    prompt_template: str = Field(default=DEFAULT_PROMPT_TEMPLATE)
    image_model: str = Field(default=DEFAULT_IMAGE_MODEL)


class OptionsResult(CamelModel):
    """Result of one option-generation request.

    Attributes:
        options: The options to display (always the requested count).
        source: ``"llm"`` when the LLM answered usefully, ``"fallback"`` when
            the static catalog was used instead.
        error: Why the fallback was used, if it was.
    """

    options: list[Option]
    source: OptionSource
    error: str | None = None
