"""Prompt Wizard - FastAPI Application.

This module is the single entry point for the web service.  It defines the
FastAPI ``app`` instance, all REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
- **Configuration** comes from :data:`~promptwizard.core.config.config`
  (``PROMPTWIZARD_*`` environment variables).
- **Backend clients** (the LLM client, the image backend, the status
  monitor) are constructed in the lifespan handler and stored on
  ``app.state``; nothing holds a module-level client.
- **Backend failures** degrade to local data: catalog options, mock model
  list, placeholder images, ``offline`` status.  The one exception is the
  delegated prompt enhancer, whose failures are reported as HTTP 502.
- **Generation options** are persisted to a JSON file in the data directory,
  loaded once at startup and rewritten on every change.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
GET       ``/api/config``               Steps, categories, strategy, options
POST      ``/api/options/generate``     Options for one wizard step
POST      ``/api/prompt/assemble``      Prompt from wizard selections
POST      ``/api/prompt/keywords``      Prompt from tag-mode keywords
POST      ``/api/prompt/enhance``       Enhanced prompt
POST      ``/api/images/generate``      Image for a prompt
GET       ``/api/images/{id}``          Placeholder PNG
GET       ``/api/models``               Available LLM models
GET       ``/api/status``               Backend reachability
GET       ``/api/settings``             Stored generation options
PUT       ``/api/settings``             Update generation options
========  ============================  ====================================

Usage
-----
CLI (installed entry point)::

    promptwizard

Direct invocation::

    python -m promptwizard.api.main
"""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from promptwizard import __version__
from promptwizard.api.models import (
    AssemblePromptRequest,
    EnhancePromptRequest,
    GenerateImageRequest,
    GenerateOptionsRequest,
    KeywordPromptRequest,
    SettingsUpdateRequest,
)
from promptwizard.core.catalog import TAG_CATEGORIES, WIZARD_STEPS, has_category
from promptwizard.core.config import config
from promptwizard.core.errors import ConfigurationError, EnhancementError, LLMClientError
from promptwizard.core.image_backend import ImageBackend, render_placeholder
from promptwizard.core.keyword_builder import DEFAULT_KEYWORDS
from promptwizard.core.llm_client import OllamaClient
from promptwizard.core.option_generator import OptionGenerator
from promptwizard.core.prompt_assembler import assemble_keywords, assemble_prompt
from promptwizard.core.prompt_enhancer import create_enhancer
from promptwizard.core.settings_store import GenerationOptionsStore
from promptwizard.core.status import StatusMonitor

logger = logging.getLogger(__name__)

_IMAGE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

# Served by /api/models when the LLM server cannot be reached.
MOCK_MODELS: list[dict] = [
    {
        "name": "llama2",
        "modified_at": "2024-03-28T10:23:45Z",
        "size": 4200000000,
        "digest": "sha256:abc123",
        "details": {
            "format": "gguf",
            "family": "llama",
            "families": ["llama"],
            "parameter_size": "7B",
        },
    },
    {
        "name": "mistral",
        "modified_at": "2024-03-28T10:23:45Z",
        "size": 4800000000,
        "digest": "sha256:def456",
        "details": {
            "format": "gguf",
            "family": "mistral",
            "families": ["mistral"],
            "parameter_size": "7B",
        },
    },
]


# ---------------------------------------------------------------------------
# Application lifecycle - backend clients setup and teardown.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    On startup:
        Builds the LLM client (when an LLM URL is configured), the option
        generator, the configured prompt enhancer, the image backend, and the
        generation options store, and starts the status monitor.

    On shutdown:
        Stops the status monitor and closes the LLM client.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    # --- Startup -----------------------------------------------------------
    try:
        llm_url = config.resolve_ollama_url()
    except ConfigurationError as e:
        logger.warning(f"{e}; option generation will use the static catalog.")
        llm_url = None

    client = OllamaClient(llm_url, timeout=config.request_timeout) if llm_url else None
    app.state.llm_client = client
    app.state.option_generator = OptionGenerator(
        client,
        default_model=config.default_llm_model,
        count=config.options_count,
        temperature=config.llm_temperature,
        top_p=config.llm_top_p,
    )
    app.state.enhancer = create_enhancer(config, client)
    app.state.image_backend = ImageBackend(config.image_backend_url, timeout=config.request_timeout)

    app.state.settings_store = GenerationOptionsStore(config.settings_file)
    app.state.settings_store.load()

    app.state.status_monitor = StatusMonitor(
        llm_url,
        config.image_backend_url,
        interval=config.status_poll_interval,
        timeout=config.probe_timeout,
    )
    app.state.status_monitor.start()
    logger.info(f"Prompt Wizard started (enhancer={app.state.enhancer.name}, llm={llm_url}).")

    yield  # Application runs here.

    # --- Shutdown ----------------------------------------------------------
    await app.state.status_monitor.stop()
    if client is not None:
        await client.aclose()
    logger.info("Backend clients closed on shutdown.")


# ---------------------------------------------------------------------------
# FastAPI application instance.
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Prompt Wizard",
    description="Guided prompt assembly for text-to-image generation.",
    version=__version__,
    lifespan=lifespan,
)

# Allow cross-origin requests so the frontend can be served from a different
# port during development.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@app.get("/api/config")
async def get_config() -> dict:
    """Return the static configuration the frontend needs on page load.

    Returns:
        Dictionary with ``version``, ``steps`` (wizard steps in order),
        ``categories`` (tag-mode categories), ``defaultKeywords``,
        ``enhancerStrategy`` and the stored ``generationOptions``.
    """
    return {
        "version": __version__,
        "steps": [s.model_dump(by_alias=True) for s in WIZARD_STEPS],
        "categories": [c.model_dump(by_alias=True) for c in TAG_CATEGORIES],
        "defaultKeywords": [k.model_dump(by_alias=True) for k in DEFAULT_KEYWORDS],
        "enhancerStrategy": app.state.enhancer.name,
        "generationOptions": app.state.settings_store.options.model_dump(by_alias=True),
    }


@app.post("/api/options/generate")
async def generate_options(req: GenerateOptionsRequest) -> dict:
    """Generate options for one wizard step.

    Falls back to the static catalog whenever the LLM is unavailable or
    answers with something unusable; the response says which source was
    used.

    Args:
        req: Validated :class:`GenerateOptionsRequest` payload.

    Returns:
        Dictionary with ``options``, ``source`` and, on fallback, ``error``.

    Raises:
        HTTPException: 400 if ``step`` is missing or unknown.
    """
    step = (req.step or "").strip()
    if not step:
        raise HTTPException(status_code=400, detail="Step is required")
    if not has_category(step):
        raise HTTPException(status_code=400, detail=f"Unknown step: {step}")

    model = req.model or app.state.settings_store.options.llm_model
    result = await app.state.option_generator.generate(
        step,
        req.selections,
        reroll=req.reroll,
        previous_labels=req.previous_options,
        model=model,
    )
    return result.model_dump(by_alias=True, exclude_none=True)


@app.post("/api/prompt/assemble")
async def assemble(req: AssemblePromptRequest) -> dict:
    """Assemble a prompt from wizard selections.

    Raises:
        HTTPException: 400 if no selections are given.
    """
    if not req.selections:
        raise HTTPException(status_code=400, detail="Selections are required")
    return {"prompt": assemble_prompt(req.selections)}


@app.post("/api/prompt/keywords")
async def assemble_from_keywords(req: KeywordPromptRequest) -> dict:
    """Assemble a prompt from tag-mode keywords."""
    return {"prompt": assemble_keywords(req.keywords)}


@app.post("/api/prompt/enhance")
async def enhance_prompt(req: EnhancePromptRequest) -> dict:
    """Enhance a prompt with the configured strategy.

    Returns:
        Dictionary with ``enhancedPrompt`` and the ``strategy`` used.

    Raises:
        HTTPException: 400 if no prompt is given; 502 if the delegated
            enhancer fails.
    """
    if not req.prompt or not req.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")

    options = req.options or app.state.settings_store.options
    enhancer = app.state.enhancer
    try:
        enhanced = await enhancer.enhance(req.prompt, options)
    except EnhancementError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    return {"enhancedPrompt": enhanced, "strategy": enhancer.name}


@app.post("/api/images/generate")
async def generate_image(req: GenerateImageRequest) -> dict:
    """Generate (or stand in for) an image for a prompt.

    Returns:
        Dictionary with ``imageUrl``, ``prompt`` and ``timestamp``.

    Raises:
        HTTPException: 400 if no prompt is given.
    """
    if not req.prompt or not req.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")

    options = req.options or app.state.settings_store.options
    image = await app.state.image_backend.generate(req.prompt, options)
    return image.to_dict()


@app.get("/api/images/{image_id}")
async def get_placeholder_image(image_id: str) -> Response:
    """Serve the placeholder PNG for an image id.

    Raises:
        HTTPException: 400 if the id contains unexpected characters.
    """
    if not _IMAGE_ID_RE.match(image_id):
        raise HTTPException(status_code=400, detail="Invalid image id")
    return Response(content=render_placeholder(image_id), media_type="image/png")


@app.get("/api/models")
async def list_models() -> dict:
    """List LLM models from the server, or a fixed mock set on failure.

    Returns:
        Dictionary with ``models``, ``source`` (``"live"`` or ``"mock"``) and,
        for mock data, ``error``.
    """
    client: OllamaClient | None = app.state.llm_client
    if client is None:
        return {"models": MOCK_MODELS, "source": "mock", "error": "No LLM server configured"}
    try:
        models = await client.list_models()
    except LLMClientError as e:
        logger.warning(f"Failed to list models, using mock data: {e}")
        return {"models": MOCK_MODELS, "source": "mock", "error": str(e)}
    return {"models": models, "source": "live"}


@app.get("/api/status")
async def get_status() -> dict:
    """Probe both backends now and return their status.

    Returns:
        Dictionary with ``llmServer``, ``comfyServer`` and ``timestamp``.
    """
    return await app.state.status_monitor.check_once()


@app.get("/api/settings")
async def get_settings() -> dict:
    """Return the stored generation options."""
    return app.state.settings_store.options.model_dump(by_alias=True)


@app.put("/api/settings")
async def update_settings(req: SettingsUpdateRequest) -> dict:
    """Update and persist generation options.

    Raises:
        HTTPException: 400 if a provided value is blank.
    """
    changes = req.model_dump(exclude_none=True)
    try:
        options = app.state.settings_store.update(**changes)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return options.model_dump(by_alias=True)


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from
    :data:`~promptwizard.core.config.config`.  This function is registered as
    the ``promptwizard`` console script in ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "promptwizard.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
