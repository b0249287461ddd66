"""
Tests for the memory policy and summarization trigger.
"""

import pytest

from ai_agent_framework.agent.conversation import ConversationLog, MessageRole
from ai_agent_framework.agent.memory import (
    CONVERSATION_WINDOW,
    LONG_TERM_WINDOW,
    SUMMARIZED_WINDOW,
    select_window,
    window_size,
)
from ai_agent_framework.agent.summarization import is_summarization_due
from ai_agent_framework.schemas import ExperienceSettings


def _log(n: int) -> ConversationLog:
    log = ConversationLog()
    for i in range(n):
        log.add(MessageRole.USER if i % 2 == 0 else MessageRole.ASSISTANT, f"m{i}")
    return log


def test_window_constants():
    """Test the window sizes."""
    assert CONVERSATION_WINDOW == 10
    assert SUMMARIZED_WINDOW == 5
    assert LONG_TERM_WINDOW == 15


@pytest.mark.parametrize(
    "memory_type,bound",
    [("conversation", 10), ("summarized", 5), ("long_term", 15), ("telepathic", 0), ("", 0)],
)
@pytest.mark.parametrize("length", [0, 3, 5, 12, 40])
def test_window_bound(memory_type, bound, length):
    """Test the window never exceeds the memory type's bound."""
    log = _log(length)
    window = select_window(log, ExperienceSettings(memory_type=memory_type))
    assert len(window) == min(length, bound)


@pytest.mark.parametrize("memory_type", ["conversation", "summarized", "long_term"])
def test_window_is_contiguous_suffix(memory_type):
    """Test the window is the tail of the log."""
    log = _log(23)
    window = select_window(log, ExperienceSettings(memory_type=memory_type))

    assert window == log.messages[len(log) - len(window):]


def test_unknown_memory_type_does_not_raise():
    """Test unknown memory types select nothing."""
    settings = ExperienceSettings(memory_type="not-a-real-type")
    assert select_window(_log(4), settings) == []
    assert window_size("not-a-real-type") == 0


def test_select_window_does_not_mutate_log():
    """Test selecting a window leaves the log alone."""
    log = _log(20)
    select_window(log, ExperienceSettings(memory_type="conversation"))
    assert len(log) == 20


@pytest.mark.parametrize("count", [0, 1, 2, 5, 9, 11, 19, 21])
def test_summarization_not_due(count):
    """Test counts that do not trigger summarization."""
    assert not is_summarization_due(ExperienceSettings(summarization_enabled=True), count)


@pytest.mark.parametrize("count", [10, 20, 30])
def test_summarization_due_on_multiples_of_ten(count):
    """Test summarization triggers on multiples of ten."""
    assert is_summarization_due(ExperienceSettings(summarization_enabled=True), count)


@pytest.mark.parametrize("count", [10, 20, 30])
def test_summarization_disabled(count):
    """Test summarization never triggers when disabled."""
    assert not is_summarization_due(ExperienceSettings(summarization_enabled=False), count)
