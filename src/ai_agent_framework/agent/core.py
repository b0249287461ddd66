"""
Core agent session - the turn engine.

For each user message it:
1. Records the message in the conversation log
2. Selects the history window allowed by the memory policy
3. Builds the prompt context from the persona and running summary
4. Calls the model and records the reply
5. Refreshes the running summary when one is due

A session is a pure in-memory state machine. It never touches the store;
whoever drives it persists ``snapshot()`` once per turn. Calls against one
session must not overlap: the caller serializes them.
"""

from typing import Any

import structlog

from ..llm import BaseLLM
from ..schemas import AgentTemplate, AIEngine, ExperienceSettings, Persona
from .context import build_context
from .conversation import ConversationLog, MessageRole
from .memory import select_window
from .state import AgentSessionState, AgentStatus
from .summarization import RunningSummary, is_summarization_due, refresh_summary

logger = structlog.get_logger()


class AgentSession:
    """Stateful conversation with one agent."""

    def __init__(
        self,
        agent_id: int,
        llm: BaseLLM,
        persona: Persona | None = None,
        engine: AIEngine | None = None,
        experience: ExperienceSettings | None = None,
        state: AgentSessionState | None = None,
    ):
        self.agent_id = agent_id
        self.llm = llm
        self.persona = persona or Persona()
        self.engine = engine or AIEngine(provider=llm.provider_name, model=llm.model)
        self.experience = experience or ExperienceSettings()
        self._state = state if state is not None else AgentSessionState(agent_id=agent_id)

    @classmethod
    def from_template(
        cls,
        agent_id: int,
        template: AgentTemplate,
        llm: BaseLLM,
        state: AgentSessionState | None = None,
    ) -> "AgentSession":
        """Create a session configured by ``template``."""
        return cls(
            agent_id=agent_id,
            llm=llm,
            persona=template.persona,
            engine=template.ai_engine,
            experience=template.experience_settings,
            state=state,
        )

    @property
    def status(self) -> str:
        return self._state.status

    @property
    def summary(self) -> RunningSummary:
        return self._state.summary

    @property
    def history(self) -> ConversationLog:
        return self._state.log

    @property
    def interaction_count(self) -> int:
        return self._state.summary.interaction_count

    def _record(self, role: MessageRole, content: str) -> None:
        self._state.log.add(role, content)
        self._state.summary.interaction_count += 1

    async def process_message(self, message: str) -> str:
        """Run one turn and return the assistant's reply.

        If the model call fails or is cancelled, the user message stays in the
        log, no assistant message is recorded, the status becomes ``error``
        and the exception propagates. Summarization failures are logged and
        ignored.
        """
        self._state.status = AgentStatus.ACTIVE.value

        try:
            self._record(MessageRole.USER, message)

            windowed = select_window(self._state.log, self.experience)
            context = build_context(
                self.persona,
                self._state.summary,
                windowed,
                self.interaction_count,
            )

            response = await self.llm.complete(message, context, self.engine)

            self._record(MessageRole.ASSISTANT, response)

            if is_summarization_due(self.experience, self.interaction_count):
                await refresh_summary(self.llm, self._state.log, self._state.summary, self.engine)

            self._state.status = AgentStatus.IDLE.value
            return response

        except Exception as e:
            logger.error("Error processing message", agent_id=self.agent_id, error=str(e))
            raise

        finally:
            # Reached with ACTIVE only when the turn did not complete.
            if self._state.status == AgentStatus.ACTIVE.value:
                self._state.status = AgentStatus.ERROR.value

    def snapshot(self) -> AgentSessionState:
        """Independent copy of the current state, safe to hand to a store."""
        return self._state.copy()

    def to_dict(self) -> dict[str, Any]:
        return self._state.to_dict()
