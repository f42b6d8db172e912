"""Core functionality for guided prompt building.

- **PromptWizardConfig / config**: settings loaded from PROMPTWIZARD_* variables
- **catalog**: static categories and options, reroll sampling
- **OllamaClient**: explicitly constructed async LLM client
- **OptionGenerator**: LLM option generation with catalog fallback
- **assemble_prompt / assemble_keywords**: deterministic prompt assembly
- **PatternEnhancer / DelegatedEnhancer**: prompt enhancement strategies
- **PromptWizard / KeywordBuilder**: wizard and tag-mode builder state
- **GenerationOptionsStore**: persisted user options
- **ImageBackend**: image backend proxy with placeholder images
- **StatusMonitor**: backend reachability polling
"""

from promptwizard.core.config import PromptWizardConfig, config
from promptwizard.core.keyword_builder import KeywordBuilder
from promptwizard.core.llm_client import OllamaClient
from promptwizard.core.option_generator import OptionGenerator
from promptwizard.core.prompt_assembler import assemble_keywords, assemble_prompt
from promptwizard.core.prompt_enhancer import DelegatedEnhancer, PatternEnhancer, create_enhancer
from promptwizard.core.wizard import PromptWizard

__all__ = [
    "DelegatedEnhancer",
    "KeywordBuilder",
    "OllamaClient",
    "OptionGenerator",
    "PatternEnhancer",
    "PromptWizard",
    "PromptWizardConfig",
    "assemble_keywords",
    "assemble_prompt",
    "config",
    "create_enhancer",
]
