"""Unit tests for OllamaClient using httpx.MockTransport."""

import asyncio
import json

import httpx
import pytest

from promptwizard.core.config import PromptWizardConfig
from promptwizard.core.errors import ConfigurationError, LLMClientError
from promptwizard.core.llm_client import OllamaClient


def _client(handler) -> OllamaClient:
    return OllamaClient("http://llm.test/", transport=httpx.MockTransport(handler))


def _run(client: OllamaClient, coro_factory):
    async def runner():
        async with client:
            return await coro_factory(client)

    return asyncio.run(runner())


class TestGenerate:
    """POST /api/generate."""

    def test_sends_non_streaming_payload(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "hello"})

        text = _run(
            _client(handler),
            lambda c: c.generate("gemma3:1b", "hi", system="sys", options={"temperature": 0.5}),
        )

        assert text == "hello"
        assert seen["path"] == "/api/generate"
        assert seen["body"] == {
            "model": "gemma3:1b",
            "prompt": "hi",
            "stream": False,
            "system": "sys",
            "options": {"temperature": 0.5},
        }

    def test_error_status_raises(self):
        client = _client(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(LLMClientError, match="status 500"):
            _run(client, lambda c: c.generate("m", "p"))

    def test_missing_response_field_raises(self):
        client = _client(lambda request: httpx.Response(200, json={"done": True}))
        with pytest.raises(LLMClientError):
            _run(client, lambda c: c.generate("m", "p"))

    def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(LLMClientError, match="failed"):
            _run(_client(handler), lambda c: c.generate("m", "p"))


class TestListModels:
    """GET /api/tags."""

    def test_returns_named_models(self):
        body = {"models": [{"name": "gemma3:1b", "size": 1}, {"size": 2}, "junk"]}
        client = _client(lambda request: httpx.Response(200, json=body))
        models = _run(client, lambda c: c.list_models())
        assert models == [{"name": "gemma3:1b", "size": 1}]

    def test_bad_shape_raises(self):
        client = _client(lambda request: httpx.Response(200, json=["nope"]))
        with pytest.raises(LLMClientError):
            _run(client, lambda c: c.list_models())


class TestPing:
    def test_ping_true(self):
        client = _client(lambda request: httpx.Response(200, text="Ollama is running"))
        assert _run(client, lambda c: c.ping()) is True

    def test_ping_false_on_error(self):
        client = _client(lambda request: httpx.Response(503))
        assert _run(client, lambda c: c.ping()) is False


class TestFromConfig:
    def test_requires_url(self, test_config):
        with pytest.raises(ConfigurationError):
            OllamaClient.from_config(test_config)

    def test_uses_configured_url(self, temp_dir):
        cfg = PromptWizardConfig(
            data_dir=str(temp_dir), ollama_url="http://llm:11434/", _env_file=None
        )
        client = OllamaClient.from_config(cfg)
        try:
            assert client.base_url == "http://llm:11434"
        finally:
            asyncio.run(client.aclose())
