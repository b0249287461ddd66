"""
Pydantic schemas for templates, agents and their stored state.

JSON field names are camelCase so blobs written by earlier deployments
(``experienceSummary``, ``conversationHistory``, ``memoryType``...) load as-is.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting either case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MemoryType(str, Enum):
    """Known memory strategies."""
    CONVERSATION = "conversation"
    SUMMARIZED = "summarized"
    LONG_TERM = "long_term"


class RetentionPeriod(str, Enum):
    """Declared retention periods. Not enforced by the engine."""
    SESSION = "session"
    HOURS_24 = "24_hours"
    DAYS_7 = "7_days"
    DAYS_30 = "30_days"
    INDEFINITE = "indefinite"


# --------------------------------------------------------------------------- #
# Template configuration
# --------------------------------------------------------------------------- #

class Persona(CamelModel):
    """Who the agent is."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    traits: list[str] = Field(default_factory=list)
    backstory: str = ""
    instructions: str = ""


class AIEngineParameters(CamelModel):
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)


class AIEngine(CamelModel):
    """Which provider and model an agent talks to."""

    provider: str = "openai"
    model: str = "gpt-4o"
    parameters: AIEngineParameters = Field(default_factory=AIEngineParameters)


class ExperienceSettings(CamelModel):
    """Memory policy for an agent.

    ``memory_type`` stays a plain string: unknown values are accepted here and
    resolved to an empty history window by the memory policy.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    memory_type: str = MemoryType.CONVERSATION.value
    retention_period: RetentionPeriod = RetentionPeriod.SESSION
    summarization_enabled: bool = True


class AgentTemplateCreate(CamelModel):
    name: str = Field(min_length=1)
    role: str = ""
    description: str = ""
    persona: Persona = Field(default_factory=Persona)
    ai_engine: AIEngine = Field(default_factory=AIEngine)
    experience_settings: ExperienceSettings = Field(default_factory=ExperienceSettings)


class AgentTemplateUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    role: str | None = None
    description: str | None = None
    persona: Persona | None = None
    ai_engine: AIEngine | None = None
    experience_settings: ExperienceSettings | None = None


class AgentTemplate(AgentTemplateCreate):
    id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


# --------------------------------------------------------------------------- #
# Stored conversational state
# --------------------------------------------------------------------------- #

AgentStatusValue = Literal["idle", "active", "error"]


class StoredMessage(CamelModel):
    role: Literal["user", "assistant", "system"]
    content: str
    timestamp: datetime


class StoredHistory(CamelModel):
    messages: list[StoredMessage] = Field(default_factory=list)


class StoredSummary(CamelModel):
    interactions: int = Field(default=0, ge=0)
    last_summary: str = ""
    last_updated: datetime | None = None


class StoredAgentState(CamelModel):
    status: AgentStatusValue = "idle"
    experience_summary: StoredSummary = Field(default_factory=StoredSummary)
    conversation_history: StoredHistory = Field(default_factory=StoredHistory)


# --------------------------------------------------------------------------- #
# Active agents
# --------------------------------------------------------------------------- #

class ActiveAgentCreate(CamelModel):
    name: str = Field(min_length=1)
    template_id: int | None = None


class ActiveAgentUpdate(CamelModel):
    """Partial update of an agent.

    State blobs are checked against the stored shape and dumped back to their
    camelCase JSON form. Status can only be set to a resting value (`idle` or
    `error`); `active` belongs to a turn in progress.
    """

    name: str | None = Field(default=None, min_length=1)
    template_id: int | None = None
    status: Literal["idle", "error"] | None = None
    experience_summary: StoredSummary | None = None
    conversation_history: StoredHistory | None = None

    @field_serializer("experience_summary", "conversation_history")
    def dump_state_blob(self, v: CamelModel | None) -> dict[str, Any] | None:
        return v.model_dump(by_alias=True, mode="json") if v is not None else None


class ActiveAgent(CamelModel):
    """An agent instance. Summary and history are kept as opaque JSON blobs
    and validated when loaded into a session."""

    id: int
    name: str
    template_id: int | None = None
    status: str = "idle"
    experience_summary: dict[str, Any] = Field(default_factory=dict)
    conversation_history: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


# --------------------------------------------------------------------------- #
# Chat
# --------------------------------------------------------------------------- #

class ProcessRequest(BaseModel):
    message: str = Field(min_length=1)


class ProcessResponse(BaseModel):
    response: str
    status: str
