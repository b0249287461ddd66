"""
In-process store. Useful for tests, demos and single-process deployments
that do not need durability across restarts.
"""

import copy
from datetime import datetime, timezone
from typing import Any

import structlog

from ..exceptions import AgentNotFoundError, PersistenceError, TemplateNotFoundError
from ..schemas import (
    ActiveAgent,
    ActiveAgentCreate,
    ActiveAgentUpdate,
    AgentTemplate,
    AgentTemplateCreate,
    AgentTemplateUpdate,
)
from .base import AgentStore, changed_fields

logger = structlog.get_logger()


class InMemoryAgentStore(AgentStore):
    """Keeps records as plain dict snapshots, never as live objects."""

    def __init__(self) -> None:
        self._templates: dict[int, dict[str, Any]] = {}
        self._agents: dict[int, dict[str, Any]] = {}
        self._next_template_id = 1
        self._next_agent_id = 1
        self._ready = False

    async def init(self) -> None:
        self._ready = True
        logger.info("In-memory store initialized")

    async def shutdown(self) -> None:
        self._templates.clear()
        self._agents.clear()
        self._ready = False
        logger.info("In-memory store shut down")

    def _require_ready(self) -> None:
        if not self._ready:
            raise PersistenceError("Store is not initialized")

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    # ------------------------------------------------------------------ #
    # Templates
    # ------------------------------------------------------------------ #

    async def create_template(self, data: AgentTemplateCreate) -> AgentTemplate:
        self._require_ready()
        now = self._now()
        template = AgentTemplate(
            id=self._next_template_id,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self._next_template_id += 1
        self._templates[template.id] = template.model_dump()
        return template

    async def get_template(self, template_id: int) -> AgentTemplate:
        self._require_ready()
        record = self._templates.get(template_id)
        if record is None:
            raise TemplateNotFoundError(f"Template {template_id} not found")
        return AgentTemplate.model_validate(copy.deepcopy(record))

    async def list_templates(self) -> list[AgentTemplate]:
        self._require_ready()
        return [AgentTemplate.model_validate(copy.deepcopy(r)) for r in self._templates.values()]

    async def update_template(self, template_id: int, data: AgentTemplateUpdate) -> AgentTemplate:
        current = await self.get_template(template_id)
        merged = AgentTemplate.model_validate({
            **current.model_dump(),
            **changed_fields(data),
            "updated_at": self._now(),
        })
        self._templates[template_id] = merged.model_dump()
        return merged

    async def delete_template(self, template_id: int) -> None:
        self._require_ready()
        if self._templates.pop(template_id, None) is None:
            raise TemplateNotFoundError(f"Template {template_id} not found")
        for record in self._agents.values():
            if record["template_id"] == template_id:
                record["template_id"] = None

    # ------------------------------------------------------------------ #
    # Agents
    # ------------------------------------------------------------------ #

    async def create_agent(self, data: ActiveAgentCreate) -> ActiveAgent:
        self._require_ready()
        if data.template_id is not None and data.template_id not in self._templates:
            raise TemplateNotFoundError(f"Template {data.template_id} not found")

        now = self._now()
        agent = ActiveAgent(
            id=self._next_agent_id,
            name=data.name,
            template_id=data.template_id,
            created_at=now,
            updated_at=now,
        )
        self._next_agent_id += 1
        self._agents[agent.id] = agent.model_dump()
        return agent

    async def get_agent(self, agent_id: int) -> ActiveAgent:
        self._require_ready()
        record = self._agents.get(agent_id)
        if record is None:
            raise AgentNotFoundError(f"Agent {agent_id} not found")
        return ActiveAgent.model_validate(copy.deepcopy(record))

    async def list_agents(self) -> list[ActiveAgent]:
        self._require_ready()
        return [ActiveAgent.model_validate(copy.deepcopy(r)) for r in self._agents.values()]

    async def update_agent(self, agent_id: int, data: ActiveAgentUpdate) -> ActiveAgent:
        current = await self.get_agent(agent_id)
        changes = changed_fields(data)
        template_id = changes.get("template_id")
        if template_id is not None and template_id not in self._templates:
            raise TemplateNotFoundError(f"Template {template_id} not found")

        merged = ActiveAgent.model_validate({
            **current.model_dump(),
            **copy.deepcopy(changes),
            "updated_at": self._now(),
        })
        self._agents[agent_id] = merged.model_dump()
        return merged

    async def delete_agent(self, agent_id: int) -> None:
        self._require_ready()
        if self._agents.pop(agent_id, None) is None:
            raise AgentNotFoundError(f"Agent {agent_id} not found")
