"""
LLM factory for creating provider instances.

Supports: OpenAI GPT, Anthropic Claude, Google Gemini and OpenRouter
(OpenAI-compatible endpoints) and local OpenAI-compatible servers.
"""

from ..config import LLMConfig, Settings
from .anthropic import AnthropicLLM
from .base import BaseLLM
from .openai import OpenAILLM
from .unsupported import UnsupportedLLM

SUPPORTED_PROVIDERS = ("openai", "anthropic", "google", "openrouter", "local")


def create_llm(config: LLMConfig | None = None, settings: Settings | None = None) -> BaseLLM:
    """Create an LLM instance based on configuration.

    Provider routing:
    - openai -> OpenAILLM (native OpenAI SDK)
    - anthropic -> AnthropicLLM (native Anthropic SDK)
    - google -> OpenAILLM (Gemini OpenAI-compatible endpoint)
    - openrouter -> OpenAILLM (OpenAI-compatible endpoint)
    - local -> OpenAILLM (LM Studio / Ollama style server)
    - anything else -> UnsupportedLLM
    """
    if config is None:
        if settings is None:
            from ..config import get_settings
            settings = get_settings()
        config = settings.get_llm_config()

    provider = config.provider

    if provider == "anthropic":
        return AnthropicLLM(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            summary_temperature=config.summary_temperature,
        )
    elif provider in ("openai", "google", "openrouter", "local"):
        return OpenAILLM(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            summary_temperature=config.summary_temperature,
            name=provider,
        )
    else:
        return UnsupportedLLM(provider)


def create_llm_for_provider(provider: str, settings: Settings | None = None) -> BaseLLM:
    """Create an LLM for a provider tag using the application settings."""
    if settings is None:
        from ..config import get_settings
        settings = get_settings()
    return create_llm(settings.get_llm_config(provider))
