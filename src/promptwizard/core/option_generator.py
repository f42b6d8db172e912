"""Context-aware option generation with catalog fallback.

The generator asks the LLM for options for one wizard step, given everything
the user has chosen so far, and turns the free-text answer into a fixed-size
list of :class:`~promptwizard.core.models.Option` objects.

Pipeline
--------
1. :func:`build_options_prompt` renders a deterministic instruction from the
   category, the prior selections and (on reroll) the labels to avoid.
2. :meth:`OptionGenerator.generate` sends it as one non-streaming request.
3. :func:`parse_options_response` strips markdown fences and stray quotes,
   parses the JSON (retrying once on the outermost ``[...]`` span), accepts a
   bare array or an ``{"options": [...]}`` object, and validates each element.
4. :func:`normalize_options` truncates or pads the list to exactly
   ``count`` entries.

Any failure in steps 2-3 (or a missing client) falls back to
:func:`~promptwizard.core.catalog.catalog_options`.  The caller always gets a
full option list; the ``source`` and ``error`` fields say what happened.
"""

from __future__ import annotations

import json
import logging
import random
import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from promptwizard.core.catalog import catalog_options, get_category
from promptwizard.core.errors import LLMClientError, OptionParseError
from promptwizard.core.llm_client import OllamaClient
from promptwizard.core.models import Option, OptionsResult

logger = logging.getLogger(__name__)

OPTIONS_SYSTEM_PROMPT = """\
You are an assistant for a text-to-image prompt builder. You generate concise \
options for each step of the image creation process. Respond strictly in JSON.

Response guidelines:
1. Each option's label MUST be brief:
   - subject: a single word or short phrase (e.g. "cat", "red fox", "old castle")
   - details: 1-2 descriptive words (e.g. "sleeping", "running swiftly")
   - setting: a simple location (e.g. "forest", "misty lake", "city street")
   - style: a single art style (e.g. "watercolor", "pixel art")
   - mood: a single mood word (e.g. "peaceful", "mysterious")
   - elements: a single supporting element (e.g. "moonlight", "falling leaves")
   - composition: simple framing (e.g. "close-up", "wide shot")
2. Descriptions are ONE short sentence.
3. IDs are kebab-case versions of the labels.

Example response:
{"options": [{"id": "sleeping-cat", "label": "sleeping cat", \
"description": "A cat curled up in a peaceful slumber."}]}"""

_FENCE_RE = re.compile(r"```(?:json|JSON)?[ \t]*\n?|\n?```")
_QUOTE_CHARS = "\"'`"


def _label_of(value: Any) -> str:
    if isinstance(value, Option):
        return value.label
    if isinstance(value, Mapping):
        return str(value.get("label", ""))
    return str(value)


def serialize_selections(selections: Mapping[str, Any]) -> str:
    """Render prior selections as ``"category: label; ..."`` in insertion order."""
    return "; ".join(
        f"{category}: {_label_of(value)}"
        for category, value in selections.items()
        if _label_of(value)
    )


def build_options_prompt(
    category: str,
    selections: Mapping[str, Any] | None = None,
    *,
    reroll: bool = False,
    previous_labels: Iterable[str] = (),
    count: int = 6,
) -> str:
    """Build the instruction prompt for one option-generation request.

    The output depends only on the arguments, so identical requests produce
    identical prompts.

    Args:
        category: Step/category id (e.g. ``"setting"``).
        selections: Prior selections keyed by category id; values may be
            options, ``{"id", "label"}`` mappings or plain labels.
        reroll: Whether the user asked for different options.
        previous_labels: Labels currently on screen, excluded on reroll.
        count: Number of options to request.

    Returns:
        The prompt text.
    """
    cat = get_category(category)
    context = serialize_selections(selections or {})
    previous = [label for label in previous_labels if label]

    lines = [
        "Task: generate_options",
        f"Current step: {category}",
    ]
    if cat is not None and cat.description:
        lines.append(f"Step description: {cat.description}")
    lines.append(f"Previous selections: {context}" if context else "No previous selections")
    if reroll and previous:
        lines.append(f"Previous options to avoid: {', '.join(previous)}")
    lines += [
        "",
        f"Generate {count} options following the system guidelines for response format.",
        "Remember:",
        "- Keep labels brief and specific",
        "- One short sentence for descriptions",
        "- Make each option distinct and creative",
    ]
    if reroll:
        lines.append("- This is a reroll: provide completely different options")
    lines.append('Return ONLY a JSON object of the form {"options": [...]}, no other text.')
    return "\n".join(lines)


def _strip_wrapping(text: str) -> str:
    cleaned = _FENCE_RE.sub("", text).strip()
    while len(cleaned) >= 2 and cleaned[0] == cleaned[-1] and cleaned[0] in _QUOTE_CHARS:
        cleaned = cleaned[1:-1].strip()
    return cleaned


def parse_options_response(text: str) -> list[Option]:
    """Parse an LLM answer into options.

    Args:
        text: Raw ``response`` text from the LLM.

    Returns:
        The validated options, in the order given (may be fewer or more than
        requested; see :func:`normalize_options`).

    Raises:
        OptionParseError: If the text is not JSON (even after retrying on the
            outermost array span), has the wrong shape, or contains an element
            without string ``id`` and ``label``.
    """
    cleaned = _strip_wrapping(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as first_error:
        start, end = cleaned.find("["), cleaned.rfind("]")
        if start == -1 or end <= start:
            raise OptionParseError(f"Response is not JSON: {first_error}") from first_error
        try:
            data = json.loads(cleaned[start : end + 1])
        except json.JSONDecodeError as e:
            raise OptionParseError(f"Response is not JSON: {e}") from e

    if isinstance(data, list):
        data = {"options": data}
    if not isinstance(data, dict) or not isinstance(data.get("options"), list):
        raise OptionParseError("Response has no 'options' array")

    options: list[Option] = []
    for index, item in enumerate(data["options"]):
        if not isinstance(item, dict):
            raise OptionParseError(f"Option {index} is not an object")
        if not isinstance(item.get("id"), str) or not isinstance(item.get("label"), str):
            raise OptionParseError(f"Option {index} lacks a string 'id' or 'label'")
        description = item.get("description", "")
        if description is None:
            description = ""
        try:
            options.append(
                Option(id=item["id"], label=item["label"], description=description)
            )
        except ValidationError as e:
            raise OptionParseError(f"Option {index} is invalid: {e}") from e
    if not options:
        raise OptionParseError("Response contains no options")
    return options


def normalize_options(options: Iterable[Option], category: str, count: int = 6) -> list[Option]:
    """Truncate or pad *options* to exactly *count* entries.

    Later options repeating an earlier id are dropped.  Placeholder options
    get ids ``"{category}-option-{n}"`` and labels ``"Option {n}"`` where
    ``n`` is the 1-based slot number.  A placeholder id that would collide
    with an existing id gets a numeric suffix.
    """
    result: list[Option] = []
    used: set[str] = set()
    for option in options:
        if len(result) == count:
            break
        if option.id in used:
            continue
        used.add(option.id)
        result.append(option)

    while len(result) < count:
        slot = len(result) + 1
        option_id = f"{category}-option-{slot}"
        suffix = 2
        while option_id in used:
            option_id = f"{category}-option-{slot}-{suffix}"
            suffix += 1
        used.add(option_id)
        result.append(Option(id=option_id, label=f"Option {slot}"))
    return result


class OptionGenerator:
    """Generates step options from the LLM, falling back to the catalog.

    Args:
        client: LLM client, or ``None`` to always use the catalog.
        default_model: Model used when a request does not name one.
        count: Fixed number of options per result.
        temperature: Sampling temperature sent to the LLM.
        top_p: Nucleus sampling threshold sent to the LLM.
        rng: Random source for catalog rerolls.
    """

    def __init__(
        self,
        client: OllamaClient | None,
        *,
        default_model: str = "gemma3:1b",
        count: int = 6,
        temperature: float = 0.8,
        top_p: float = 0.9,
        rng: random.Random | None = None,
    ) -> None:
        self.client = client
        self.default_model = default_model
        self.count = count
        self.temperature = temperature
        self.top_p = top_p
        self._rng = rng or random.Random()

    def fallback(
        self,
        category: str,
        selections: Mapping[str, Any] | None = None,
        *,
        reroll: bool = False,
        previous_labels: Iterable[str] = (),
        error: str | None = None,
    ) -> OptionsResult:
        """Return catalog options for *category* as a fallback result."""
        options = catalog_options(
            category,
            selections,
            reroll=reroll,
            exclude_labels=previous_labels,
            count=self.count,
            rng=self._rng,
        )
        return OptionsResult(
            options=normalize_options(options, category, self.count),
            source="fallback",
            error=error,
        )

    async def generate(
        self,
        category: str,
        selections: Mapping[str, Any] | None = None,
        *,
        reroll: bool = False,
        previous_labels: Iterable[str] = (),
        model: str | None = None,
    ) -> OptionsResult:
        """Generate options for *category*; never raises for backend failures.

        Args:
            category: Step/category id.
            selections: Prior selections keyed by category id.
            reroll: Ask for options different from *previous_labels*.
            previous_labels: Labels currently on screen.
            model: LLM model name; defaults to ``default_model``.

        Returns:
            An :class:`OptionsResult` with exactly ``count`` options.
        """
        previous_labels = list(previous_labels)
        if self.client is None:
            return self.fallback(
                category,
                selections,
                reroll=reroll,
                previous_labels=previous_labels,
                error="No LLM server configured",
            )

        prompt = build_options_prompt(
            category,
            selections,
            reroll=reroll,
            previous_labels=previous_labels,
            count=self.count,
        )
        try:
            text = await self.client.generate(
                model or self.default_model,
                prompt,
                system=OPTIONS_SYSTEM_PROMPT,
                options={"temperature": self.temperature, "top_p": self.top_p},
            )
            options = parse_options_response(text)
        except (LLMClientError, OptionParseError) as e:
            logger.warning(f"Option generation for '{category}' fell back to catalog: {e}")
            return self.fallback(
                category,
                selections,
                reroll=reroll,
                previous_labels=previous_labels,
                error=str(e),
            )

        logger.info(f"Generated {len(options)} options for '{category}' via LLM")
        return OptionsResult(
            options=normalize_options(options, category, self.count),
            source="llm",
        )
