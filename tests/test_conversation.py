"""
Tests for the conversation log.
"""

import pytest

from ai_agent_framework.agent.conversation import ConversationLog, Message, MessageRole


def _log(n: int) -> ConversationLog:
    log = ConversationLog()
    for i in range(n):
        log.add(MessageRole.USER, f"Message {i}")
    return log


def test_append_keeps_order():
    """Test messages are kept in append order."""
    log = ConversationLog()
    log.add(MessageRole.USER, "Hello!")
    log.add(MessageRole.ASSISTANT, "Hi there!")

    assert log.size() == 2
    assert [m.role for m in log] == ["user", "assistant"]
    assert [m.content for m in log] == ["Hello!", "Hi there!"]


def test_role_enum_is_stored_as_plain_string():
    """Test enum roles are stored as plain strings."""
    message = Message(role=MessageRole.SYSTEM, content="x")
    assert message.role == "system"
    assert type(message.role) is str


def test_append_rejects_missing_content():
    """Test that a message without content is rejected."""
    log = ConversationLog()
    with pytest.raises(ValueError):
        log.append(Message(role="user", content=None))  # type: ignore[arg-type]
    assert log.size() == 0


def test_window_returns_last_n():
    """Test the window holds the last n messages."""
    log = _log(100)
    window = log.window(10)

    assert len(window) == 10
    assert window[0].content == "Message 90"
    assert window[-1].content == "Message 99"


def test_window_shorter_log():
    """Test windowing a log shorter than the window."""
    log = _log(3)
    assert [m.content for m in log.window(10)] == ["Message 0", "Message 1", "Message 2"]


def test_window_zero_or_negative_is_empty():
    """Test non-positive window sizes."""
    log = _log(3)
    assert log.window(0) == []
    assert log.window(-1) == []


def test_window_is_an_independent_copy():
    """Test the window does not share state with the log."""
    log = _log(3)
    window = log.window(2)

    log.add(MessageRole.USER, "later")
    window.append(Message(role="user", content="mine"))

    assert [m.content for m in window[:2]] == ["Message 1", "Message 2"]
    assert log.size() == 4


def test_messages_property_is_a_copy():
    """Test the messages property returns a copy."""
    log = _log(2)
    messages = log.messages
    messages.clear()
    assert log.size() == 2


def test_copy_does_not_share_appends():
    """Test copies of a log are independent."""
    log = _log(2)
    clone = log.copy()
    clone.add(MessageRole.USER, "only in clone")

    assert log.size() == 2
    assert clone.size() == 3


def test_to_dict_shape():
    """Test the stored history shape."""
    log = _log(1)
    data = log.to_dict()

    assert list(data) == ["messages"]
    assert data["messages"][0]["role"] == "user"
    assert data["messages"][0]["content"] == "Message 0"
    assert isinstance(data["messages"][0]["timestamp"], str)


def test_message_is_immutable():
    """Test messages cannot be modified."""
    message = Message(role="user", content="x")
    with pytest.raises(AttributeError):
        message.content = "y"  # type: ignore[misc]
