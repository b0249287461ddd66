"""
Base classes for LLM providers.

Every provider implements ``generate``; the two operations the agent engine
uses, ``complete`` and ``summarize``, are built on top of it here.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Literal

from ..schemas import AIEngine

DEFAULT_COMPLETION_TEMPERATURE = 0.7
DEFAULT_COMPLETION_MAX_TOKENS = 1000
DEFAULT_SUMMARY_TEMPERATURE = 0.3

SUMMARIZER_SYSTEM_PROMPT = (
    "You are a skilled text summarizer. Create a concise summary that "
    "captures the key points of the following text."
)


@dataclass
class LLMMessage:
    """A message in the conversation."""

    role: Literal["user", "assistant", "system"]
    content: str


@dataclass
class LLMResponse:
    """Response from an LLM."""

    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = ""
    stop_reason: str | None = None
    raw_response: Any = None


class BaseLLM(ABC):
    """Base class for LLM providers."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        max_tokens: int = DEFAULT_COMPLETION_MAX_TOKENS,
        temperature: float = DEFAULT_COMPLETION_TEMPERATURE,
        summary_temperature: float = DEFAULT_SUMMARY_TEMPERATURE,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.summary_temperature = summary_temperature

    @abstractmethod
    async def generate(
        self,
        messages: list[LLMMessage],
        system_prompt: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a response from the LLM.

        Raises:
            ProviderError: if the provider call fails for any reason.
        """
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the provider name."""
        pass

    async def complete(
        self,
        prompt: str,
        context: list[LLMMessage],
        engine: AIEngine | None = None,
    ) -> str:
        """Answer ``prompt`` given the assembled context entries.

        System entries in ``context`` become the system prompt; the remaining
        entries are sent in order, followed by the prompt itself.
        """
        system_parts = [entry.content for entry in context if entry.role == "system"]
        messages = [entry for entry in context if entry.role != "system"]
        messages.append(LLMMessage(role="user", content=prompt))

        params = engine.parameters if engine else None
        temperature = params.temperature if params and params.temperature is not None else None
        max_tokens = params.max_tokens if params and params.max_tokens is not None else None

        response = await self.generate(
            messages=messages,
            system_prompt="\n\n".join(system_parts) or None,
            model=self._resolve_model(engine),
            temperature=temperature if temperature is not None else self.temperature,
            max_tokens=max_tokens if max_tokens is not None else self.max_tokens,
        )
        return response.content

    async def summarize(self, text: str, engine: AIEngine | None = None) -> str:
        """Condense ``text`` into a short summary.

        The engine's temperature applies when set, otherwise the lower summary
        temperature.
        """
        params = engine.parameters if engine else None
        temperature = self.summary_temperature
        if params and params.temperature is not None:
            temperature = params.temperature

        response = await self.generate(
            messages=[LLMMessage(role="user", content=text)],
            system_prompt=SUMMARIZER_SYSTEM_PROMPT,
            model=self._resolve_model(engine),
            temperature=temperature,
        )
        return response.content.strip()

    def _resolve_model(self, engine: AIEngine | None) -> str:
        if engine and engine.model:
            return engine.model
        return self.model
