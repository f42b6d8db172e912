"""Shared pytest fixtures for Prompt Wizard tests."""

import asyncio
import shutil
import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi.testclient import TestClient

from promptwizard.core.config import PromptWizardConfig
from promptwizard.core.models import Option, OptionsResult
from promptwizard.core.option_generator import OptionGenerator


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> PromptWizardConfig:
    """Create a test configuration with no backends and a temporary data dir.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        PromptWizardConfig instance for testing
    """
    return PromptWizardConfig(
        ollama_url=None,
        image_backend_url=None,
        dev_mode=False,
        data_dir=str(temp_dir / "data"),
        enhancer_strategy="pattern",
        _env_file=None,
    )


@pytest.fixture
def test_client(test_config: PromptWizardConfig) -> Generator[TestClient, None, None]:
    """FastAPI TestClient running the full lifespan against ``test_config``.

    No LLM or image backend is configured, so every backend call takes its
    local fallback path.
    """
    from promptwizard.api.main import app

    with patch("promptwizard.api.main.config", test_config):
        with TestClient(app) as client:
            yield client


@pytest.fixture
def mock_llm_client() -> Mock:
    """A stand-in for OllamaClient with async methods.

    Returns:
        Mock whose ``generate``, ``list_models`` and ``ping`` are AsyncMocks
    """
    client = Mock()
    client.generate = AsyncMock(return_value="[]")
    client.list_models = AsyncMock(return_value=[])
    client.ping = AsyncMock(return_value=True)
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def sample_options() -> list[Option]:
    """Six distinct options for testing.

    Returns:
        List of Option objects
    """
    return [
        Option(id=f"opt-{i}", label=f"Label {i}", description=f"Description {i}")
        for i in range(1, 7)
    ]


class ControlledOptionProvider:
    """Option provider whose fetches complete only when the test releases them.

    Each call to ``generate`` records the request and waits on its own
    ``asyncio.Event``; ``release(n, options)`` resolves the n-th call.
    """

    def __init__(self):
        self.calls: list[dict] = []
        self._events: list[asyncio.Event] = []
        self._results: list[OptionsResult | None] = []

    async def generate(self, category, selections=None, *, reroll=False,
                       previous_labels=(), model=None):
        self.calls.append({
            "category": category,
            "selections": dict(selections or {}),
            "reroll": reroll,
            "previous_labels": list(previous_labels),
            "model": model,
        })
        event = asyncio.Event()
        self._events.append(event)
        self._results.append(None)
        index = len(self._events) - 1
        await event.wait()
        return self._results[index]

    def release(self, index: int, options: list[Option], source: str = "llm") -> None:
        self._results[index] = OptionsResult(options=options, source=source)
        self._events[index].set()


@pytest.fixture
def controlled_source() -> ControlledOptionProvider:
    return ControlledOptionProvider()


@pytest.fixture
def catalog_generator() -> OptionGenerator:
    """OptionGenerator without an LLM client (always uses the catalog)."""
    return OptionGenerator(None)
