"""Prompt Wizard - guided prompt assembly for text-to-image generation."""

__version__ = "0.3.0"

from promptwizard.core.config import PromptWizardConfig, config
from promptwizard.core.prompt_assembler import assemble_keywords, assemble_prompt
from promptwizard.core.wizard import PromptWizard

__all__ = [
    "PromptWizard",
    "PromptWizardConfig",
    "assemble_keywords",
    "assemble_prompt",
    "config",
]
