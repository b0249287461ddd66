"""
Shared fixtures.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from ai_agent_framework.schemas import AIEngine, ExperienceSettings, Persona


def _as_mock(behaviour, default: str) -> AsyncMock:
    if behaviour is None:
        return AsyncMock(return_value=default)
    if isinstance(behaviour, str):
        return AsyncMock(return_value=behaviour)
    return AsyncMock(side_effect=behaviour)


@pytest.fixture
def make_llm():
    """Build an LLM double. ``complete``/``summarize`` may be a return value,
    an exception or a callable side effect."""

    def factory(complete=None, summarize=None) -> MagicMock:
        llm = MagicMock()
        llm.provider_name = "openai"
        llm.model = "test-model"
        llm.complete = _as_mock(complete, "ok")
        llm.summarize = _as_mock(summarize, "summary")
        return llm

    return factory


@pytest.fixture
def ack_responses():
    """complete() side effect answering ack-1, ack-2, ..."""
    calls = {"n": 0}

    def respond(prompt, context, engine=None):
        calls["n"] += 1
        return f"ack-{calls['n']}"

    return respond


@pytest.fixture
def persona():
    return Persona(
        traits=["friendly", "curious"],
        backstory="Raised by librarians.",
        instructions="Answer briefly.",
    )


@pytest.fixture
def engine():
    return AIEngine(provider="openai", model="gpt-4o")


@pytest.fixture
def conversation_settings():
    return ExperienceSettings(memory_type="conversation", summarization_enabled=True)
