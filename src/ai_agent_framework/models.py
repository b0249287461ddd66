"""
Database models for the AI Agent Framework

Uses SQLAlchemy 2.0 async ORM for database operations.
"""

from datetime import datetime
from pathlib import Path
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, func, make_url
from sqlalchemy.ext.asyncio import AsyncAttrs, AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all models."""
    pass


class AgentTemplateRow(Base):
    """Persona + model configuration that agents are instantiated from."""

    __tablename__ = "agent_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(255), default="")
    description: Mapped[str] = mapped_column(Text, default="")

    persona: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    ai_engine: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    experience_settings: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())


class ActiveAgentRow(Base):
    """A running agent and its conversational state."""

    __tablename__ = "active_agents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    template_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("agent_templates.id", ondelete="SET NULL"), nullable=True
    )

    # State
    status: Mapped[str] = mapped_column(String(20), default="idle")
    experience_summary: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    conversation_history: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())


async def init_database(database_url: str) -> tuple[AsyncEngine, async_sessionmaker]:
    """Initialize the database and return the engine and session maker."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return engine, async_sessionmaker(engine, expire_on_commit=False)
