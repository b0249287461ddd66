"""
Durable agent state: status, conversation log and running summary.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from pydantic import ValidationError

from ..exceptions import StateValidationError
from ..schemas import StoredAgentState
from .conversation import ConversationLog, Message
from .summarization import RunningSummary


class AgentStatus(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    ERROR = "error"


@dataclass
class AgentSessionState:
    """Everything about an agent that must survive a restart."""

    agent_id: int
    status: str = AgentStatus.IDLE.value
    log: ConversationLog = field(default_factory=ConversationLog)
    summary: RunningSummary = field(default_factory=RunningSummary)

    def copy(self) -> "AgentSessionState":
        """Independent copy; later changes to either side are not shared."""
        return AgentSessionState(
            agent_id=self.agent_id,
            status=self.status,
            log=self.log.copy(),
            summary=replace(self.summary),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "experienceSummary": self.summary.to_dict(),
            "conversationHistory": self.log.to_dict(),
        }

    @classmethod
    def from_dict(cls, agent_id: int, data: dict[str, Any]) -> "AgentSessionState":
        """Rebuild state from its JSON form.

        Raises:
            StateValidationError: if the data does not have the stored shape.
        """
        try:
            stored = StoredAgentState.model_validate(data)
        except ValidationError as e:
            raise StateValidationError(f"Invalid state for agent {agent_id}: {e}") from e

        log = ConversationLog(
            Message(role=m.role, content=m.content, timestamp=m.timestamp)
            for m in stored.conversation_history.messages
        )
        summary = RunningSummary(
            text=stored.experience_summary.last_summary,
            interaction_count=stored.experience_summary.interactions,
            last_updated=stored.experience_summary.last_updated,
        )
        return cls(agent_id=agent_id, status=stored.status, log=log, summary=summary)
