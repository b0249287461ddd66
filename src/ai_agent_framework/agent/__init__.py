"""
Agent module - the conversational engine.

Includes:
- AgentSession: Per-agent turn processing over an LLM
- AgentManager: Load, run and persist stored agents
- ConversationLog: Ordered message history
- Memory policy, summarization trigger and context assembly
"""

from .context import build_context
from .conversation import ConversationLog, Message, MessageRole
from .core import AgentSession
from .manager import AgentManager
from .memory import select_window
from .state import AgentSessionState, AgentStatus
from .summarization import RunningSummary, is_summarization_due

__all__ = [
    "AgentSession",
    "AgentManager",
    "AgentSessionState",
    "AgentStatus",
    "ConversationLog",
    "Message",
    "MessageRole",
    "RunningSummary",
    "build_context",
    "is_summarization_due",
    "select_window",
]
