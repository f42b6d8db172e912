"""Pydantic request models for the Prompt Wizard API.

These models define the JSON schema for every POST/PUT endpoint.  FastAPI
uses them for automatic request validation and OpenAPI documentation.
Requests accept camelCase keys (``previousOptions``) as well as snake_case.

Models
------
GenerateOptionsRequest
    Payload for ``POST /api/options/generate``.
AssemblePromptRequest
    Payload for ``POST /api/prompt/assemble``.
KeywordPromptRequest
    Payload for ``POST /api/prompt/keywords``.
EnhancePromptRequest
    Payload for ``POST /api/prompt/enhance``.
GenerateImageRequest
    Payload for ``POST /api/images/generate``.
SettingsUpdateRequest
    Payload for ``PUT /api/settings``.
"""

from __future__ import annotations

from typing import Union

from pydantic import Field

from promptwizard.core.models import CamelModel, GenerationOptions, Keyword, Option

# A selection value: a full option, or just its label.
SelectionValue = Union[Option, str]


class GenerateOptionsRequest(CamelModel):
    """Request body for ``POST /api/options/generate``.

    Attributes:
        step: Category id of the step to generate options for.  Required;
            an empty value is rejected with 400.
        selections: Prior selections keyed by category id.
        reroll: Ask for options different from ``previous_options``.
        previous_options: Labels currently on screen (excluded on reroll).
        model: LLM model name; defaults to the configured model.
    """

    step: str | None = Field(
        default=None,
        description="Category id of the step (e.g. 'subject').",
    )
    selections: dict[str, SelectionValue] = Field(
        default_factory=dict,
        description="Prior selections keyed by category id.",
    )
    reroll: bool = Field(default=False, description="Request different options.")
    previous_options: list[str] = Field(
        default_factory=list,
        description="Labels currently displayed, avoided on reroll.",
    )
    model: str | None = Field(default=None, description="LLM model name.")


class AssemblePromptRequest(CamelModel):
    """Request body for ``POST /api/prompt/assemble``.

    Attributes:
        selections: Selections keyed by category id; values may be options,
            labels, or lists of those.
    """

    selections: dict[str, Union[SelectionValue, list[SelectionValue]]] = Field(
        default_factory=dict,
        description="Selections keyed by category id.",
    )


class KeywordPromptRequest(CamelModel):
    """Request body for ``POST /api/prompt/keywords``."""

    keywords: list[Keyword] = Field(
        default_factory=list,
        description="Selected tag-mode keywords in order.",
    )


class EnhancePromptRequest(CamelModel):
    """Request body for ``POST /api/prompt/enhance``."""

    prompt: str | None = Field(default=None, description="Prompt to enhance.")
    options: GenerationOptions | None = Field(
        default=None,
        description="Generation options; the stored options are used when omitted.",
    )


class GenerateImageRequest(CamelModel):
    """Request body for ``POST /api/images/generate``."""

    prompt: str | None = Field(default=None, description="Final prompt text.")
    options: GenerationOptions | None = Field(default=None, description="Generation options.")


class SettingsUpdateRequest(CamelModel):
    """Request body for ``PUT /api/settings``; omitted fields stay unchanged."""

    llm_model: str | None = None
    prompt_template: str | None = None
    image_model: str | None = None
