"""Configuration management for Prompt Wizard.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PROMPTWIZARD_
prefix, allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PROMPTWIZARD_* prefix)
2. .env file in the project root
3. Default values defined in PromptWizardConfig

Example .env file:
    PROMPTWIZARD_OLLAMA_URL=http://localhost:11434
    PROMPTWIZARD_IMAGE_BACKEND_URL=http://localhost:8188
    PROMPTWIZARD_ENHANCER_STRATEGY=delegated
    PROMPTWIZARD_DATA_DIR=data

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
The LLM client itself is *not* global: it is constructed from this config by
the FastAPI lifespan (or by the caller) and passed in explicitly.

Usage Example
-------------
    from promptwizard.core.config import config

    print(config.ollama_url)
    print(config.resolve_ollama_url())

LLM Base URL
------------
``ollama_url`` has no production default.  When it is unset,
:meth:`PromptWizardConfig.resolve_ollama_url` raises
:class:`~promptwizard.core.errors.ConfigurationError` unless ``dev_mode`` is
enabled, in which case the local development address is used.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from promptwizard.core.errors import ConfigurationError

DEV_OLLAMA_URL = "http://localhost:11434"


class PromptWizardConfig(BaseSettings):
    """Main configuration for Prompt Wizard.

    Values are loaded from environment variables with the PROMPTWIZARD_ prefix,
    with fallback to defaults defined here.  ``data_dir`` is created on
    initialization if it doesn't exist.

    Attributes
    ----------
    Backends:
        ollama_url : str | None
            Base URL of the Ollama-compatible LLM server (no production default)
        image_backend_url : str | None
            Base URL of the image-generation backend; placeholder images are
            served when unset
        dev_mode : bool
            Allow the local development LLM address when ollama_url is unset
        request_timeout : float
            Timeout in seconds for LLM and image backend requests
        probe_timeout : float
            Timeout in seconds for status probes

    Prompt Generation:
        default_llm_model : str
            LLM model used when a request does not name one
        enhancer_strategy : Literal["pattern", "delegated"]
            Which prompt enhancer serves /api/prompt/enhance
        options_count : int
            Number of options returned per wizard step
        llm_temperature : float
            Sampling temperature for option generation
        llm_top_p : float
            Nucleus sampling threshold for option generation

    Status:
        status_poll_interval : float
            Seconds between background status probes

    Paths:
        data_dir : Path
            Directory holding persisted generation options

    Server:
        server_host : str
            Bind address for uvicorn
        server_port : int
            Port for uvicorn (1024-65535)
        log_level : str
            Root logging level applied by main()

    Examples
    --------
        >>> custom_config = PromptWizardConfig(
        ...     ollama_url="http://gpu-box:11434",
        ...     enhancer_strategy="delegated",
        ... )
        >>> custom_config.resolve_ollama_url()
        'http://gpu-box:11434'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROMPTWIZARD_",
        case_sensitive=False,
    )

    # Backends
    ollama_url: str | None = Field(
        default=None,
        description="Base URL of the Ollama-compatible LLM server",
    )
    image_backend_url: str | None = Field(
        default=None,
        description="Base URL of the image-generation backend (placeholder images when unset)",
    )
    dev_mode: bool = Field(
        default=False,
        description="Use the local development LLM address when ollama_url is unset",
    )
    request_timeout: float = Field(
        default=60.0,
        description="Timeout in seconds for LLM and image backend requests",
        gt=0,
    )
    probe_timeout: float = Field(
        default=5.0,
        description="Timeout in seconds for status probes",
        gt=0,
    )

    # Prompt generation
    default_llm_model: str = Field(
        default="gemma3:1b",
        description="LLM model used when a request does not name one",
    )
    enhancer_strategy: Literal["pattern", "delegated"] = Field(
        default="pattern",
        description="Prompt enhancer: 'pattern' (local regex) or 'delegated' (LLM rewrite)",
    )
    options_count: int = Field(
        default=6,
        description="Number of options returned per wizard step",
        ge=1,
        le=12,
    )
    llm_temperature: float = Field(default=0.8, ge=0.0, le=2.0)
    llm_top_p: float = Field(default=0.9, gt=0.0, le=1.0)

    # Status polling
    status_poll_interval: float = Field(
        default=30.0,
        description="Seconds between background status probes",
        gt=0,
    )

    # Paths
    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding persisted generation options",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    def __init__(self, **kwargs):
        """Initialize configuration and create the data directory."""
        super().__init__(**kwargs)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def settings_file(self) -> Path:
        """Path of the persisted GenerationOptions JSON file."""
        return self.data_dir / "generation_options.json"

    def resolve_ollama_url(self) -> str:
        """Return the LLM base URL without a trailing slash.

        Raises:
            ConfigurationError: If ``ollama_url`` is unset and ``dev_mode`` is off.
        """
        if self.ollama_url:
            return self.ollama_url.rstrip("/")
        if self.dev_mode:
            return DEV_OLLAMA_URL
        raise ConfigurationError("PROMPTWIZARD_OLLAMA_URL is not set")


# Global configuration instance
# Loads values from environment variables (PROMPTWIZARD_* prefix) and .env file.
config = PromptWizardConfig()
