"""
Relational store backed by SQLAlchemy's async ORM.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..exceptions import AgentNotFoundError, PersistenceError, TemplateNotFoundError
from ..models import ActiveAgentRow, AgentTemplateRow, init_database
from ..schemas import (
    ActiveAgent,
    ActiveAgentCreate,
    ActiveAgentUpdate,
    AgentTemplate,
    AgentTemplateCreate,
    AgentTemplateUpdate,
    AIEngine,
    ExperienceSettings,
    Persona,
)
from .base import AgentStore, changed_fields

logger = structlog.get_logger()


def _template_from_row(row: AgentTemplateRow) -> AgentTemplate:
    return AgentTemplate(
        id=row.id,
        name=row.name,
        role=row.role or "",
        description=row.description or "",
        persona=Persona.model_validate(row.persona or {}),
        ai_engine=AIEngine.model_validate(row.ai_engine or {}),
        experience_settings=ExperienceSettings.model_validate(row.experience_settings or {}),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _agent_from_row(row: ActiveAgentRow) -> ActiveAgent:
    return ActiveAgent(
        id=row.id,
        name=row.name,
        template_id=row.template_id,
        status=row.status,
        experience_summary=row.experience_summary or {},
        conversation_history=row.conversation_history or {},
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _apply_template(row: AgentTemplateRow, template: AgentTemplate) -> None:
    row.name = template.name
    row.role = template.role
    row.description = template.description
    row.persona = template.persona.model_dump(by_alias=True, mode="json")
    row.ai_engine = template.ai_engine.model_dump(by_alias=True, mode="json")
    row.experience_settings = template.experience_settings.model_dump(by_alias=True, mode="json")


class SQLAgentStore(AgentStore):
    """Store templates and agents in a SQL database."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self._engine: AsyncEngine | None = None
        self._session_maker: async_sessionmaker | None = None

    async def init(self) -> None:
        try:
            self._engine, self._session_maker = await init_database(self.database_url)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to initialize database: {e}") from e
        logger.info("Database initialized", url=self._engine.url.render_as_string(hide_password=True))

    async def shutdown(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_maker = None
        logger.info("Database connection closed")

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        if self._session_maker is None:
            raise PersistenceError("Store is not initialized")
        try:
            async with self._session_maker() as db:
                yield db
        except SQLAlchemyError as e:
            logger.error("Database error", error=str(e))
            raise PersistenceError(str(e)) from e

    # ------------------------------------------------------------------ #
    # Templates
    # ------------------------------------------------------------------ #

    async def create_template(self, data: AgentTemplateCreate) -> AgentTemplate:
        async with self._session() as db:
            row = AgentTemplateRow()
            _apply_template(row, AgentTemplate(id=0, **data.model_dump()))
            db.add(row)
            await db.commit()
            await db.refresh(row)
            logger.info("Created template", template_id=row.id, name=row.name)
            return _template_from_row(row)

    async def _get_template_row(self, db: AsyncSession, template_id: int) -> AgentTemplateRow:
        row = await db.get(AgentTemplateRow, template_id)
        if row is None:
            raise TemplateNotFoundError(f"Template {template_id} not found")
        return row

    async def get_template(self, template_id: int) -> AgentTemplate:
        async with self._session() as db:
            return _template_from_row(await self._get_template_row(db, template_id))

    async def list_templates(self) -> list[AgentTemplate]:
        async with self._session() as db:
            result = await db.execute(select(AgentTemplateRow).order_by(AgentTemplateRow.id))
            return [_template_from_row(row) for row in result.scalars().all()]

    async def update_template(self, template_id: int, data: AgentTemplateUpdate) -> AgentTemplate:
        async with self._session() as db:
            row = await self._get_template_row(db, template_id)
            merged = AgentTemplate.model_validate({
                **_template_from_row(row).model_dump(),
                **changed_fields(data),
            })
            _apply_template(row, merged)
            await db.commit()
            await db.refresh(row)
            return _template_from_row(row)

    async def delete_template(self, template_id: int) -> None:
        async with self._session() as db:
            row = await self._get_template_row(db, template_id)
            # SQLite does not enforce ON DELETE SET NULL without the pragma.
            await db.execute(
                update(ActiveAgentRow)
                .where(ActiveAgentRow.template_id == template_id)
                .values(template_id=None)
            )
            await db.delete(row)
            await db.commit()
            logger.info("Deleted template", template_id=template_id)

    # ------------------------------------------------------------------ #
    # Agents
    # ------------------------------------------------------------------ #

    async def create_agent(self, data: ActiveAgentCreate) -> ActiveAgent:
        async with self._session() as db:
            if data.template_id is not None:
                await self._get_template_row(db, data.template_id)

            row = ActiveAgentRow(
                name=data.name,
                template_id=data.template_id,
                status="idle",
                experience_summary={},
                conversation_history={},
            )
            db.add(row)
            await db.commit()
            await db.refresh(row)
            logger.info("Created agent", agent_id=row.id, template_id=row.template_id)
            return _agent_from_row(row)

    async def _get_agent_row(self, db: AsyncSession, agent_id: int) -> ActiveAgentRow:
        row = await db.get(ActiveAgentRow, agent_id)
        if row is None:
            raise AgentNotFoundError(f"Agent {agent_id} not found")
        return row

    async def get_agent(self, agent_id: int) -> ActiveAgent:
        async with self._session() as db:
            return _agent_from_row(await self._get_agent_row(db, agent_id))

    async def list_agents(self) -> list[ActiveAgent]:
        async with self._session() as db:
            result = await db.execute(select(ActiveAgentRow).order_by(ActiveAgentRow.id))
            return [_agent_from_row(row) for row in result.scalars().all()]

    async def update_agent(self, agent_id: int, data: ActiveAgentUpdate) -> ActiveAgent:
        async with self._session() as db:
            row = await self._get_agent_row(db, agent_id)
            changes = changed_fields(data)

            if changes.get("template_id") is not None:
                await self._get_template_row(db, changes["template_id"])

            for key, value in changes.items():
                setattr(row, key, value)

            await db.commit()
            await db.refresh(row)
            return _agent_from_row(row)

    async def delete_agent(self, agent_id: int) -> None:
        async with self._session() as db:
            row = await self._get_agent_row(db, agent_id)
            await db.delete(row)
            await db.commit()
            logger.info("Deleted agent", agent_id=agent_id)
