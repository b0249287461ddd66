"""
Anthropic Claude LLM provider.
"""

from typing import Any

import anthropic
import structlog

from ..exceptions import ProviderError
from .base import BaseLLM, LLMMessage, LLMResponse

logger = structlog.get_logger()

RETRYABLE_ERRORS = (anthropic.RateLimitError, anthropic.APIConnectionError)


class AnthropicLLM(BaseLLM):
    """Anthropic Claude LLM provider."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        base_url: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        summary_temperature: float = 0.3,
    ):
        super().__init__(api_key, model, base_url, max_tokens, temperature, summary_temperature)
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
        )

    @property
    def provider_name(self) -> str:
        return "anthropic"

    def _convert_messages(self, messages: list[LLMMessage]) -> list[dict[str, Any]]:
        """Convert LLMMessages to Anthropic format."""
        return [
            {"role": msg.role, "content": msg.content}
            for msg in messages
            if msg.role != "system"
        ]

    def _extract_system_prompt(self, messages: list[LLMMessage]) -> str | None:
        """Extract system prompt from messages."""
        for msg in messages:
            if msg.role == "system":
                return msg.content
        return None

    async def generate(
        self,
        messages: list[LLMMessage],
        system_prompt: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a response from Claude."""
        system = system_prompt or self._extract_system_prompt(messages)
        converted_messages = self._convert_messages(messages)

        kwargs: dict[str, Any] = {
            "model": model or self.model,
            "max_tokens": max_tokens or self.max_tokens,
            "temperature": self.temperature if temperature is None else temperature,
            "messages": converted_messages,
        }

        if system:
            kwargs["system"] = system

        try:
            response = await self.client.messages.create(**kwargs)
        except anthropic.APIError as e:
            logger.error("Anthropic API error", error=str(e))
            raise ProviderError(
                f"Failed to generate response: {e}",
                provider="anthropic",
                retryable=isinstance(e, RETRYABLE_ERRORS),
            ) from e

        content = "".join(
            block.text for block in response.content if block.type == "text"
        )

        return LLMResponse(
            content=content,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            model=response.model,
            stop_reason=response.stop_reason,
            raw_response=response,
        )
