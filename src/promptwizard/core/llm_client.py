"""Async client for an Ollama-compatible LLM server.

:class:`OllamaClient` wraps a single :class:`httpx.AsyncClient`.  It is
constructed explicitly (by the FastAPI lifespan, a test, or a script) and
closed with :meth:`OllamaClient.aclose`; nothing in the package keeps a
module-level client.

Only three server endpoints are used:

========  ===============  ============================================
Method    Path             Purpose
========  ===============  ============================================
GET       ``/``            Reachability probe
GET       ``/api/tags``    List installed models
POST      ``/api/generate`` Single non-streaming completion
========  ===============  ============================================

Every transport error, timeout and non-2xx response is raised as
:class:`~promptwizard.core.errors.LLMClientError` so callers handle one
exception type.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from promptwizard.core.config import PromptWizardConfig
from promptwizard.core.errors import LLMClientError

logger = logging.getLogger(__name__)


class OllamaClient:
    """Thin async wrapper around the Ollama HTTP API.

    Attributes:
        base_url (str): Server base URL without a trailing slash.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(cls, cfg: PromptWizardConfig) -> OllamaClient:
        """Build a client from configuration.

        Raises:
            ConfigurationError: If no LLM base URL is configured.
        """
        return cls(cfg.resolve_ollama_url(), timeout=cfg.request_timeout)

    async def __aenter__(self) -> OllamaClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise LLMClientError(f"LLM server request {method} {path} failed: {e}") from e
        if response.is_error:
            raise LLMClientError(
                f"LLM server responded to {method} {path} with status {response.status_code}"
            )
        return response

    async def generate(
        self,
        model: str,
        prompt: str,
        *,
        system: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> str:
        """Run a single non-streaming completion.

        Args:
            model: Model name known to the server (e.g. ``"gemma3:1b"``).
            prompt: The user prompt.
            system: Optional system prompt.
            options: Sampling options such as ``temperature`` and ``top_p``.

        Returns:
            The ``response`` text field of the server's answer.

        Raises:
            LLMClientError: On transport failure, non-2xx status, or a body
                without a string ``response`` field.
        """
        payload: dict[str, Any] = {"model": model, "prompt": prompt, "stream": False}
        if system:
            payload["system"] = system
        if options:
            payload["options"] = options

        logger.debug(f"Sending generate request to {self.base_url} (model={model})")
        response = await self._request("POST", "/api/generate", json=payload)
        try:
            data = response.json()
        except ValueError as e:
            raise LLMClientError("LLM server returned a non-JSON body") from e

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise LLMClientError("LLM server response has no 'response' text field")
        return text

    async def list_models(self) -> list[dict[str, Any]]:
        """Return the model descriptors reported by ``/api/tags``.

        Raises:
            LLMClientError: On transport failure, non-2xx status, or a body
                without a ``models`` list.
        """
        response = await self._request("GET", "/api/tags")
        try:
            data = response.json()
        except ValueError as e:
            raise LLMClientError("LLM server returned a non-JSON model list") from e

        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            raise LLMClientError("LLM server model list has no 'models' array")
        return [m for m in models if isinstance(m, dict) and m.get("name")]

    async def ping(self) -> bool:
        """Return ``True`` if the server root answers with a 2xx status."""
        try:
            await self._request("GET", "/")
        except LLMClientError as e:
            logger.debug(f"LLM ping failed: {e}")
            return False
        return True
