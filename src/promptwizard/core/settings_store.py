"""File-backed persistence for :class:`GenerationOptions`.

The store keeps a single JSON file (``generation_options.json`` in the data
directory).  It is read once at startup and rewritten synchronously on every
change.  Loading is forgiving: a missing, empty or corrupt file yields the
defaults, and blank or missing fields are filled in from the defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from promptwizard.core.models import GenerationOptions

logger = logging.getLogger(__name__)


def _load_json(path: Path, default):
    """Load a JSON file from disk, returning *default* on any failure."""
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return default
    return default


def _save_json(path: Path, data) -> None:
    """Persist a Python object to a JSON file with 2-space indentation."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def merge_with_defaults(raw) -> GenerationOptions:
    """Build options from a (possibly partial) mapping.

    Missing, blank or non-string fields take their default value.  Both
    camelCase and snake_case keys are accepted.
    """
    defaults = GenerationOptions()
    if not isinstance(raw, dict):
        return defaults

    values = {}
    for name, field in GenerationOptions.model_fields.items():
        value = raw.get(field.alias, raw.get(name))
        if isinstance(value, str) and value.strip():
            values[name] = value.strip()
        else:
            values[name] = getattr(defaults, name)
    return GenerationOptions(**values)


class GenerationOptionsStore:
    """Load-once, save-on-change store for the user's generation options.

    Args:
        path: JSON file location.

    Attributes:
        options (GenerationOptions): Current options.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.options = GenerationOptions()

    def load(self) -> GenerationOptions:
        """Read the file, filling any gaps with defaults."""
        self.options = merge_with_defaults(_load_json(self.path, {}))
        logger.info(f"Loaded generation options from {self.path}: {self.options}")
        return self.options

    def save(self) -> None:
        _save_json(self.path, self.options.model_dump(by_alias=True))

    def update(self, **changes) -> GenerationOptions:
        """Apply *changes* (snake_case or camelCase names), persist, and return.

        Raises:
            ValueError: If a change names an unknown field or an empty value.
        """
        data = self.options.model_dump()
        for key, value in changes.items():
            name = next(
                (n for n, f in GenerationOptions.model_fields.items() if key in (n, f.alias)),
                None,
            )
            if name is None:
                raise ValueError(f"Unknown generation option: {key}")
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Generation option '{key}' must be a non-empty string")
            data[name] = value.strip()

        try:
            self.options = GenerationOptions(**data)
        except ValidationError as e:
            raise ValueError(str(e)) from e
        self.save()
        return self.options
