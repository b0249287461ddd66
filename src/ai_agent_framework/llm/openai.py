"""
OpenAI GPT LLM provider (also works with OpenRouter, Gemini's OpenAI endpoint
and local OpenAI-compatible servers).
"""

from typing import Any

import openai
import structlog

from ..exceptions import ProviderError
from .base import BaseLLM, LLMMessage, LLMResponse

logger = structlog.get_logger()

RETRYABLE_ERRORS = (openai.RateLimitError, openai.APIConnectionError)


class OpenAILLM(BaseLLM):
    """OpenAI GPT LLM provider."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        summary_temperature: float = 0.3,
        name: str = "openai",
    ):
        super().__init__(api_key, model, base_url, max_tokens, temperature, summary_temperature)
        self._name = name
        self.client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
        )

    @property
    def provider_name(self) -> str:
        return self._name

    def _convert_messages(self, messages: list[LLMMessage]) -> list[dict[str, Any]]:
        """Convert LLMMessages to OpenAI format."""
        return [{"role": msg.role, "content": msg.content} for msg in messages]

    async def generate(
        self,
        messages: list[LLMMessage],
        system_prompt: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a response from GPT."""
        converted_messages = self._convert_messages(messages)

        if system_prompt:
            converted_messages.insert(0, {"role": "system", "content": system_prompt})

        kwargs: dict[str, Any] = {
            "model": model or self.model,
            "temperature": self.temperature if temperature is None else temperature,
            "messages": converted_messages,
        }

        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        try:
            response = await self.client.chat.completions.create(**kwargs)
        except openai.APIError as e:
            logger.error("OpenAI API error", provider=self._name, error=str(e))
            raise ProviderError(
                f"Failed to generate response: {e}",
                provider=self._name,
                retryable=isinstance(e, RETRYABLE_ERRORS),
            ) from e

        if not response.choices:
            raise ProviderError("Provider returned no choices", provider=self._name)

        choice = response.choices[0]

        return LLMResponse(
            content=choice.message.content or "",
            input_tokens=response.usage.prompt_tokens if response.usage else 0,
            output_tokens=response.usage.completion_tokens if response.usage else 0,
            model=response.model,
            stop_reason=choice.finish_reason,
            raw_response=response,
        )
