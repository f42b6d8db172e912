"""Prompt enhancement strategies.

Two interchangeable strategies rewrite an assembled prompt into richer
prose.  Exactly one is active per deployment, chosen by
``PROMPTWIZARD_ENHANCER_STRATEGY``; they are alternatives, not fallbacks of
each other.

``pattern``
    :class:`PatternEnhancer` extracts the clauses produced by
    :mod:`promptwizard.core.prompt_assembler` with regular expressions and
    re-renders each through a fixed phrase template.  Local and
    deterministic.

``delegated``
    :class:`DelegatedEnhancer` asks the LLM to rewrite the prompt and returns
    its answer verbatim.  Failures raise
    :class:`~promptwizard.core.errors.EnhancementError`.
"""

from __future__ import annotations

import logging
import re

from promptwizard.core.config import PromptWizardConfig
from promptwizard.core.errors import EnhancementError, LLMClientError
from promptwizard.core.llm_client import OllamaClient
from promptwizard.core.models import GenerationOptions

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pattern strategy.
# ---------------------------------------------------------------------------

_SUBJECT_RE = re.compile(r"^([^,]+)")
_DETAILS_RE = re.compile(r"\bwith ([^,]+?(?:details|textures|decoration|patterns))\b", re.I)
_SETTING_RE = re.compile(
    r"\bin (?!the style of)([^,]+?(?:environment|setting|world|scene))\b", re.I
)
_STYLE_RE = re.compile(r"\bstyle of ([^,]+)", re.I)
_MOOD_RE = re.compile(r"\bwith a ([^,]+) mood\b", re.I)
_ELEMENTS_RE = re.compile(r"\bfeaturing ([^,]+)", re.I)
_COMPOSITION_RE = re.compile(r"\bwith ([^,]+) composition\b", re.I)

# First clauses that are not a subject.
_NON_SUBJECT_RE = re.compile(r"^(?:with|in|featuring|high quality)\b", re.I)

_SUBJECT_OPENERS: tuple[tuple[str, str], ...] = (
    ("Portrait", "A captivating and emotive human portrait with striking features"),
    ("Landscape", "A breathtaking landscape with incredible depth and scale"),
    ("Animal", "A majestic animal captured in stunning detail"),
    ("Architecture", "An impressive architectural masterpiece with intricate structural elements"),
    ("Abstract", "A thought-provoking abstract composition with dynamic visual elements"),
)

QUALITY_SENTENCE = (
    "The image exhibits exceptional clarity and definition, with perfect lighting "
    "balance, rich color harmonies, and photorealistic textures. 8K resolution with "
    "impeccable detail preservation."
)


def _group(pattern: re.Pattern, text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1).strip() if match else None


def _subject_opener(prompt: str) -> str:
    subject = _group(_SUBJECT_RE, prompt)
    if not subject or _NON_SUBJECT_RE.match(subject):
        return "A captivating image"
    for keyword, opener in _SUBJECT_OPENERS:
        if keyword in subject:
            return opener
    return f"A stunning {subject.lower()} with remarkable detail"


def pattern_enhance(prompt: str) -> str:
    """Rewrite an assembled prompt with elaborated phrasing.

    Args:
        prompt: A prompt in the shape produced by
            :func:`~promptwizard.core.prompt_assembler.assemble_prompt`.

    Returns:
        The enhanced prompt.  Identical input always yields identical output.
    """
    enhanced = _subject_opener(prompt)

    details = _group(_DETAILS_RE, prompt)
    if details:
        enhanced += f", featuring {details.lower()} that draw the viewer in"

    setting = _group(_SETTING_RE, prompt)
    if setting:
        enhanced += f", set within a {setting.lower()} that creates a perfect backdrop"

    elements = _group(_ELEMENTS_RE, prompt)
    if elements:
        enhanced += f", complemented by {elements.lower()} that add depth and interest"

    composition = _group(_COMPOSITION_RE, prompt)
    if composition:
        enhanced += (
            f", composed with a {composition.lower()} approach that guides the viewer's eye"
        )

    style = _group(_STYLE_RE, prompt)
    if style:
        enhanced += f", rendered in the distinctive style of {style} with masterful technique"

    mood = _group(_MOOD_RE, prompt)
    if mood:
        enhanced += f", evoking a {mood.lower()} atmosphere that resonates with the viewer"

    return f"{enhanced}. {QUALITY_SENTENCE}"


class PatternEnhancer:
    """Local regex-based enhancer (no network)."""

    name = "pattern"

    async def enhance(self, prompt: str, options: GenerationOptions | None = None) -> str:
        return pattern_enhance(prompt)


# ---------------------------------------------------------------------------
# Delegated strategy.
# ---------------------------------------------------------------------------

ENHANCE_SYSTEM_PROMPT = """\
You rewrite prompts for a text-to-image model.

You MUST preserve the subject, setting, style and mood of the input prompt.
You SHOULD add concrete visual detail: materials, lighting, camera framing and color.
You MUST NOT add unrelated subjects, readable text, logos or watermarks.

Output exactly one prompt on a single line. No lists, no markdown, no quotes, \
no explanation."""


def build_enhance_prompt(prompt: str, options: GenerationOptions) -> str:
    """Build the rewrite instruction for the delegated enhancer."""
    return (
        f"Prompt template: {options.prompt_template}\n"
        f"Target image model: {options.image_model}\n"
        f"Rewrite the following prompt so it produces a more detailed, striking image, "
        f"phrased the way the {options.prompt_template} template expects:\n\n"
        f"{prompt}"
    )


class DelegatedEnhancer:
    """LLM-backed enhancer.

    Args:
        client: LLM client, or ``None`` when no LLM server is configured
            (every call then fails with :class:`EnhancementError`).
    """

    name = "delegated"

    def __init__(self, client: OllamaClient | None) -> None:
        self.client = client

    async def enhance(self, prompt: str, options: GenerationOptions | None = None) -> str:
        """Return the LLM's rewrite of *prompt*.

        Raises:
            EnhancementError: If no client is configured, the request fails,
                or the LLM returns an empty answer.
        """
        options = options or GenerationOptions()
        if self.client is None:
            raise EnhancementError("No LLM server configured for prompt enhancement")
        try:
            text = await self.client.generate(
                options.llm_model,
                build_enhance_prompt(prompt, options),
                system=ENHANCE_SYSTEM_PROMPT,
            )
        except LLMClientError as e:
            logger.error(f"Delegated prompt enhancement failed: {e}")
            raise EnhancementError(f"Prompt enhancement failed: {e}") from e

        enhanced = text.strip()
        if not enhanced:
            raise EnhancementError("Prompt enhancement returned an empty response")
        return enhanced


def create_enhancer(
    cfg: PromptWizardConfig, client: OllamaClient | None
) -> PatternEnhancer | DelegatedEnhancer:
    """Return the enhancer selected by ``cfg.enhancer_strategy``."""
    if cfg.enhancer_strategy == "delegated":
        return DelegatedEnhancer(client)
    return PatternEnhancer()
