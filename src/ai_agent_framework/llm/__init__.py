"""
LLM module for multi-provider AI model support.

Providers:
- OpenAI GPT (native SDK)
- Anthropic Claude (native SDK)
- Google Gemini, OpenRouter and local servers (via OpenAI-compatible endpoints)
"""

from .base import BaseLLM, LLMMessage, LLMResponse
from .anthropic import AnthropicLLM
from .openai import OpenAILLM
from .unsupported import UnsupportedLLM
from .factory import SUPPORTED_PROVIDERS, create_llm, create_llm_for_provider

__all__ = [
    "BaseLLM",
    "LLMMessage",
    "LLMResponse",
    "AnthropicLLM",
    "OpenAILLM",
    "UnsupportedLLM",
    "SUPPORTED_PROVIDERS",
    "create_llm",
    "create_llm_for_provider",
]
