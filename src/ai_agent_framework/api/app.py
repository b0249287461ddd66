"""
FastAPI application factory.

Exposes agent templates, active agents and the chat endpoint. The store and
agent manager live on ``app.state``; the lifespan handler opens and closes
the store.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..agent import AgentManager
from ..agent.manager import LLMFactory
from ..config import Settings, get_settings
from ..exceptions import (
    AgentConfigurationError,
    NotFoundError,
    PersistenceError,
    ProviderError,
)
from ..schemas import (
    ActiveAgent,
    ActiveAgentCreate,
    ActiveAgentUpdate,
    AgentTemplate,
    AgentTemplateCreate,
    AgentTemplateUpdate,
    ProcessRequest,
    ProcessResponse,
)
from ..store import AgentStore, create_store

logger = structlog.get_logger()

API_VERSION = "1.0.0"


def _manager(request: Request) -> AgentManager:
    return request.app.state.manager


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"message": "Validation error", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"message": str(exc)})

    @app.exception_handler(AgentConfigurationError)
    async def bad_configuration(request: Request, exc: AgentConfigurationError):
        return JSONResponse(status_code=400, content={"message": str(exc)})

    @app.exception_handler(ProviderError)
    async def provider_error(request: Request, exc: ProviderError):
        return JSONResponse(
            status_code=502,
            content={"message": str(exc), "provider": exc.provider, "status": "error"},
        )

    @app.exception_handler(PersistenceError)
    async def persistence_error(request: Request, exc: PersistenceError):
        return JSONResponse(status_code=500, content={"message": str(exc)})


def create_app(
    settings: Settings | None = None,
    store: AgentStore | None = None,
    llm_factory: LLMFactory | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    store = store or create_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        await store.init()
        app.state.store = store
        app.state.manager = AgentManager(store, llm_factory=llm_factory, settings=settings)
        logger.info("Application started", store=type(store).__name__)

        yield

        await store.shutdown()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        description="Create, store and run AI agent configurations",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    # ------------------------------------------------------------------ #
    # Health
    # ------------------------------------------------------------------ #
    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": API_VERSION,
            "store": settings.store_backend,
            "default_provider": settings.default_provider,
        }

    # ------------------------------------------------------------------ #
    # Agent templates
    # ------------------------------------------------------------------ #
    @app.get("/api/templates", response_model=list[AgentTemplate], response_model_by_alias=True)
    async def list_templates(request: Request):
        return await _manager(request).store.list_templates()

    @app.get("/api/templates/{template_id}", response_model=AgentTemplate, response_model_by_alias=True)
    async def get_template(template_id: int, request: Request):
        return await _manager(request).store.get_template(template_id)

    @app.post(
        "/api/templates",
        status_code=201,
        response_model=AgentTemplate,
        response_model_by_alias=True,
    )
    async def create_template(body: AgentTemplateCreate, request: Request):
        return await _manager(request).store.create_template(body)

    @app.put("/api/templates/{template_id}", response_model=AgentTemplate, response_model_by_alias=True)
    async def update_template(template_id: int, body: AgentTemplateUpdate, request: Request):
        return await _manager(request).store.update_template(template_id, body)

    @app.delete("/api/templates/{template_id}", status_code=204)
    async def delete_template(template_id: int, request: Request):
        await _manager(request).store.delete_template(template_id)
        return Response(status_code=204)

    # ------------------------------------------------------------------ #
    # Active agents
    # ------------------------------------------------------------------ #
    @app.get("/api/agents", response_model=list[ActiveAgent], response_model_by_alias=True)
    async def list_agents(request: Request):
        return await _manager(request).store.list_agents()

    @app.get("/api/agents/{agent_id}", response_model=ActiveAgent, response_model_by_alias=True)
    async def get_agent(agent_id: int, request: Request):
        return await _manager(request).store.get_agent(agent_id)

    @app.post("/api/agents", status_code=201, response_model=ActiveAgent, response_model_by_alias=True)
    async def create_agent(body: ActiveAgentCreate, request: Request):
        manager = _manager(request)
        if body.template_id is None:
            return await manager.store.create_agent(body)
        return await manager.create_agent(body.template_id, name=body.name)

    @app.put("/api/agents/{agent_id}", response_model=ActiveAgent, response_model_by_alias=True)
    async def update_agent(agent_id: int, body: ActiveAgentUpdate, request: Request):
        return await _manager(request).update_agent(agent_id, body)

    @app.delete("/api/agents/{agent_id}", status_code=204)
    async def delete_agent(agent_id: int, request: Request):
        await _manager(request).delete_agent(agent_id)
        return Response(status_code=204)

    @app.post("/api/agents/{agent_id}/reset", response_model=ActiveAgent, response_model_by_alias=True)
    async def reset_agent(agent_id: int, request: Request):
        return await _manager(request).reset_agent(agent_id)

    # ------------------------------------------------------------------ #
    # Agent interaction
    # ------------------------------------------------------------------ #
    @app.post("/api/agents/{agent_id}/process", response_model=ProcessResponse)
    async def process_message(agent_id: int, body: ProcessRequest, request: Request):
        """Send a message to an agent and return its reply."""
        response, status = await _manager(request).process_message(agent_id, body.message)
        return ProcessResponse(response=response, status=status)

    return app
