"""
Placeholder provider for tags with no implementation.
"""

import structlog

from ..exceptions import UnsupportedProviderError
from .base import BaseLLM, LLMMessage, LLMResponse

logger = structlog.get_logger()


class UnsupportedLLM(BaseLLM):
    """Fails every call with ``UnsupportedProviderError``."""

    def __init__(self, provider: str):
        super().__init__(api_key="", model="")
        self._provider = provider

    @property
    def provider_name(self) -> str:
        return self._provider

    async def generate(
        self,
        messages: list[LLMMessage],
        system_prompt: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        logger.warning("Call to unsupported provider", provider=self._provider)
        raise UnsupportedProviderError(
            f"LLM provider '{self._provider}' is not supported",
            provider=self._provider,
        )
