"""Prompt assembly from category selections.

The assembler turns the user's choices into a single natural-language prompt
by emitting one clause per selected category, in a fixed order, each with a
fixed connective phrase, followed by a fixed quality suffix.

Clause Order
------------
::

    subject       {label}
    details       with {label}
    setting       in {label}
    elements      featuring {label}
    composition   with {label} composition
    style         in the style of {label}
    mood          with a {label} mood
    lighting      with {label} lighting          (tag mode only)
    color         with a {label} color palette   (tag mode only)
    time          set in {label} era             (tag mode only)
    custom        {label}                        (tag mode only)

    high quality, detailed, 8k resolution

Clauses are joined with ``", "``.  A category with several values (tag mode)
joins its labels with ``" and "`` before substitution.  Categories without a
selection are omitted; the order of the input mapping never matters.

Usage
-----
::

    assemble_prompt({"style": "Watercolor", "subject": "Portrait"})
    # 'Portrait, in the style of Watercolor, high quality, detailed, 8k resolution'
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from promptwizard.core.models import Keyword, Option

QUALITY_SUFFIX = "high quality, detailed, 8k resolution"

# ---------------------------------------------------------------------------
# Clause templates, in precedence order.  The first seven are the wizard
# steps; the rest only occur in tag mode.
# ---------------------------------------------------------------------------

CLAUSE_TEMPLATES: tuple[tuple[str, str], ...] = (
    ("subject", "{label}"),
    ("details", "with {label}"),
    ("setting", "in {label}"),
    ("elements", "featuring {label}"),
    ("composition", "with {label} composition"),
    ("style", "in the style of {label}"),
    ("mood", "with a {label} mood"),
)

TAG_CLAUSE_TEMPLATES: tuple[tuple[str, str], ...] = (
    ("lighting", "with {label} lighting"),
    ("color", "with a {label} color palette"),
    ("time", "set in {label} era"),
)

CUSTOM_CATEGORY = "custom"
DEFAULT_CATEGORY = "default"


def _label(value: Any) -> str:
    if isinstance(value, (Option, Keyword)):
        return value.label.strip()
    if isinstance(value, Mapping):
        return str(value.get("label") or "").strip()
    return str(value).strip()


def _joined_label(value: Any) -> str:
    """Return the label text for one selection value.

    Strings, options and ``{"label": ...}`` mappings are single values; any
    other iterable is treated as several values joined with ``" and "``.
    """
    if value is None:
        return ""
    if isinstance(value, (str, Option, Keyword, Mapping)):
        return _label(value)
    labels = [label for label in (_label(v) for v in value) if label]
    return " and ".join(labels)


def _render(selections: Mapping[str, Any], templates: Iterable[tuple[str, str]]) -> list[str]:
    parts: list[str] = []
    for category, template in templates:
        label = _joined_label(selections.get(category))
        if label:
            parts.append(template.format(label=label))
    return parts


def assemble_prompt(selections: Mapping[str, Any]) -> str:
    """Assemble a prompt from wizard selections.

    Args:
        selections: Mapping of category id to the selected value.  Values may
            be :class:`Option` objects, ``{"label": ...}`` mappings, plain
            strings, or sequences of those.  Unknown categories are ignored.

    Returns:
        The assembled prompt.  An empty mapping yields only the quality
        suffix.
    """
    parts = _render(selections, CLAUSE_TEMPLATES)

    # Fixed quality suffix, always last.
    parts.append(QUALITY_SUFFIX)
    return ", ".join(parts)


def assemble_keywords(keywords: Iterable[Keyword]) -> str:
    """Assemble a prompt from tag-mode keywords.

    Keywords are grouped by category in first-seen order.  Category clauses
    come first, then custom keywords verbatim, then the quality suffix.
    Default keywords are already expressed by the quality suffix and are not
    rendered again.

    Args:
        keywords: Selected keywords in selection order.

    Returns:
        The assembled prompt.
    """
    grouped: dict[str, list[str]] = {}
    for keyword in keywords:
        label = keyword.label.strip()
        if not label or keyword.category == DEFAULT_CATEGORY:
            continue
        grouped.setdefault(keyword.category, []).append(label)

    parts = _render(grouped, (*CLAUSE_TEMPLATES, *TAG_CLAUSE_TEMPLATES))

    # Custom free-text keywords keep their own wording.
    parts.extend(grouped.get(CUSTOM_CATEGORY, []))

    parts.append(QUALITY_SUFFIX)
    return ", ".join(parts)
