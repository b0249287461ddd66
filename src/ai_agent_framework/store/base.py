"""
Store interface for templates, agents and agent state.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from ..agent.state import AgentSessionState
from ..exceptions import AgentNotFoundError
from ..schemas import (
    ActiveAgent,
    ActiveAgentCreate,
    ActiveAgentUpdate,
    AgentTemplate,
    AgentTemplateCreate,
    AgentTemplateUpdate,
)

NULLABLE_FIELDS = frozenset({"template_id"})


def changed_fields(data: BaseModel) -> dict[str, Any]:
    """Fields explicitly set on a partial update, keyed by attribute name.

    An explicit null only clears fields that may be null.
    """
    return {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }


class AgentStore(ABC):
    """Persistence for templates and active agents.

    Lifecycle: ``init()`` before use, ``shutdown()`` when done. Lookups of
    missing records raise ``NotFoundError`` subclasses; backend failures raise
    ``PersistenceError``.
    """

    @abstractmethod
    async def init(self) -> None:
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        pass

    # Templates

    @abstractmethod
    async def create_template(self, data: AgentTemplateCreate) -> AgentTemplate:
        pass

    @abstractmethod
    async def get_template(self, template_id: int) -> AgentTemplate:
        pass

    @abstractmethod
    async def list_templates(self) -> list[AgentTemplate]:
        pass

    @abstractmethod
    async def update_template(self, template_id: int, data: AgentTemplateUpdate) -> AgentTemplate:
        pass

    @abstractmethod
    async def delete_template(self, template_id: int) -> None:
        """Delete a template. Agents built from it keep running state but lose
        their template reference."""
        pass

    # Agents

    @abstractmethod
    async def create_agent(self, data: ActiveAgentCreate) -> ActiveAgent:
        pass

    @abstractmethod
    async def get_agent(self, agent_id: int) -> ActiveAgent:
        pass

    @abstractmethod
    async def list_agents(self) -> list[ActiveAgent]:
        pass

    @abstractmethod
    async def update_agent(self, agent_id: int, data: ActiveAgentUpdate) -> ActiveAgent:
        pass

    @abstractmethod
    async def delete_agent(self, agent_id: int) -> None:
        pass

    # State

    async def load_state(self, agent_id: int) -> AgentSessionState | None:
        """Load an agent's conversational state, or None if the agent is gone.

        Raises:
            StateValidationError: if the stored blobs are malformed.
        """
        try:
            agent = await self.get_agent(agent_id)
        except AgentNotFoundError:
            return None

        return AgentSessionState.from_dict(agent_id, {
            "status": agent.status,
            "experienceSummary": agent.experience_summary,
            "conversationHistory": agent.conversation_history,
        })

    async def save_state(self, agent_id: int, state: AgentSessionState) -> None:
        """Replace the stored state of an agent with ``state``."""
        data = state.to_dict()
        await self.update_agent(agent_id, ActiveAgentUpdate(
            status=data["status"],
            experience_summary=data["experienceSummary"],
            conversation_history=data["conversationHistory"],
        ))
