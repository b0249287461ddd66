"""
Agent management: load an agent, run a turn, persist the result.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Callable

import structlog

from ..config import Settings, get_settings
from ..exceptions import AgentConfigurationError, PersistenceError
from ..llm import BaseLLM, create_llm_for_provider
from ..schemas import ActiveAgent, ActiveAgentCreate, ActiveAgentUpdate
from .core import AgentSession
from .state import AgentSessionState

if TYPE_CHECKING:
    from ..store import AgentStore

logger = structlog.get_logger()

LLMFactory = Callable[[str], BaseLLM]


class AgentManager:
    """Runs turns against stored agents.

    Turns for the same agent are serialized with a per-agent lock; different
    agents run concurrently. Each turn is persisted as a single snapshot
    after all in-memory changes are done.
    """

    def __init__(
        self,
        store: "AgentStore",
        llm_factory: LLMFactory | None = None,
        settings: Settings | None = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self._llm_factory = llm_factory or (
            lambda provider: create_llm_for_provider(provider, self.settings)
        )
        self._llms: dict[str, BaseLLM] = {}
        self._locks: dict[int, asyncio.Lock] = {}
        self._lock_users: dict[int, int] = {}

    def get_llm(self, provider: str) -> BaseLLM:
        """Get (and cache) the LLM for a provider tag."""
        if provider not in self._llms:
            self._llms[provider] = self._llm_factory(provider)
        return self._llms[provider]

    @asynccontextmanager
    async def _agent_lock(self, agent_id: int) -> AsyncIterator[None]:
        """Hold the agent's lock. The lock is dropped once nobody holds or
        waits for it, so unknown ids leave nothing behind."""
        lock = self._locks.setdefault(agent_id, asyncio.Lock())
        self._lock_users[agent_id] = self._lock_users.get(agent_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[agent_id] -= 1
            if self._lock_users[agent_id] == 0:
                del self._lock_users[agent_id]
                del self._locks[agent_id]

    async def create_agent(self, template_id: int, name: str | None = None) -> ActiveAgent:
        """Instantiate an idle agent with empty state from a template."""
        template = await self.store.get_template(template_id)
        agent = await self.store.create_agent(ActiveAgentCreate(
            name=name or template.name,
            template_id=template.id,
        ))
        logger.info("Agent created from template", agent_id=agent.id, template_id=template.id)
        return agent

    async def load_session(self, agent_id: int) -> AgentSession:
        """Build a session for a stored agent from its template and state."""
        agent = await self.store.get_agent(agent_id)
        if agent.template_id is None:
            raise AgentConfigurationError(f"Agent {agent_id} has no template")

        template = await self.store.get_template(agent.template_id)
        state = await self.store.load_state(agent_id) or AgentSessionState(agent_id=agent_id)

        return AgentSession.from_template(
            agent_id,
            template,
            self.get_llm(template.ai_engine.provider),
            state=state,
        )

    async def process_message(self, agent_id: int, message: str) -> tuple[str, str]:
        """Run one turn for an agent and persist the outcome.

        Returns the reply and the agent's status. A failed turn is still
        persisted (user message kept, status ``error``) before the error is
        re-raised; if that save fails too, it is logged and the original error
        still wins.
        """
        async with self._agent_lock(agent_id):
            session = await self.load_session(agent_id)

            try:
                response = await session.process_message(message)
            except Exception:
                try:
                    await self.store.save_state(agent_id, session.snapshot())
                except PersistenceError as e:
                    logger.error("Failed to persist failed turn", agent_id=agent_id, error=str(e))
                raise

            await self.store.save_state(agent_id, session.snapshot())

            logger.info(
                "Processed message",
                agent_id=agent_id,
                interactions=session.interaction_count,
                status=session.status,
            )
            return response, session.status

    async def reset_agent(self, agent_id: int) -> ActiveAgent:
        """Clear an agent's conversation and summary."""
        async with self._agent_lock(agent_id):
            await self.store.save_state(agent_id, AgentSessionState(agent_id=agent_id))
            logger.info("Agent state reset", agent_id=agent_id)
            return await self.store.get_agent(agent_id)

    async def update_agent(self, agent_id: int, data: ActiveAgentUpdate) -> ActiveAgent:
        async with self._agent_lock(agent_id):
            return await self.store.update_agent(agent_id, data)

    async def delete_agent(self, agent_id: int) -> None:
        async with self._agent_lock(agent_id):
            await self.store.delete_agent(agent_id)
