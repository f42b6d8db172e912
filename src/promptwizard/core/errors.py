"""Exception hierarchy for Prompt Wizard."""


class PromptWizardError(Exception):
    """Base class for all Prompt Wizard errors."""


class ConfigurationError(PromptWizardError):
    """Required configuration is missing or invalid."""


class LLMClientError(PromptWizardError):
    """The LLM server was unreachable or answered with a non-success status."""


class OptionParseError(PromptWizardError):
    """An LLM response could not be turned into a list of options."""


class EnhancementError(PromptWizardError):
    """The delegated prompt enhancer failed."""
