"""
Conversation log: the ordered, append-only message history of one agent.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Iterator


class MessageRole(str, Enum):
    """Message roles for conversation."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """A single message. Immutable once created."""

    role: str
    content: str
    timestamp: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if isinstance(self.role, MessageRole):
            object.__setattr__(self, "role", self.role.value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }


class ConversationLog:
    """Ordered sequence of messages. Position is the only sequence number."""

    def __init__(self, messages: Iterable[Message] | None = None):
        self._messages: list[Message] = list(messages or [])

    def append(self, message: Message) -> None:
        """Add a message to the end of the log."""
        if message.role is None or message.content is None:
            raise ValueError("Message role and content are required")
        self._messages.append(message)

    def add(self, role: MessageRole | str, content: str) -> Message:
        """Create a message stamped with the current time and append it."""
        message = Message(role=role, content=content)
        self.append(message)
        return message

    def window(self, n: int) -> list[Message]:
        """Return a copy of the last ``n`` messages in original order."""
        if n <= 0:
            return []
        return list(self._messages[-n:])

    def size(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> list[Message]:
        """A copy of every message."""
        return list(self._messages)

    def copy(self) -> "ConversationLog":
        return ConversationLog(self._messages)

    def to_dict(self) -> dict[str, Any]:
        return {"messages": [m.to_dict() for m in self._messages]}

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConversationLog):
            return NotImplemented
        return self._messages == other._messages

    def __repr__(self) -> str:
        return f"ConversationLog(size={len(self._messages)})"
