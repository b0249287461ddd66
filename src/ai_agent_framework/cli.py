"""
Command-line interface for the AI Agent Framework.
"""

import argparse
import asyncio
import sys

import structlog
import uvicorn

from .config import Settings, get_settings
from .logging_config import setup_logging

logger = structlog.get_logger()


def main() -> None:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="ai-agents",
        description="AI Agent Framework - create, store and run AI agents",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default=None, help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    subparsers.add_parser("init", help="Create the database tables")

    config_parser = subparsers.add_parser("config", help="Show configuration")
    config_parser.add_argument("--check", action="store_true", help="Check configuration validity")

    chat_parser = subparsers.add_parser("chat", help="Chat with a stored agent")
    chat_parser.add_argument("agent_id", type=int, help="ID of the active agent")

    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "serve":
        run_server(args.host or settings.host, args.port or settings.port, args.reload)
    elif args.command == "init":
        asyncio.run(init_store(settings))
    elif args.command == "config":
        show_config(settings, args.check)
    elif args.command == "chat":
        asyncio.run(chat(settings, args.agent_id))
    else:
        parser.print_help()


def run_server(host: str, port: int, reload: bool) -> None:
    """Run the FastAPI server."""
    logger.info("Starting AI Agent Framework server", host=host, port=port)

    uvicorn.run(
        "ai_agent_framework.api.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
        log_level="info",
    )


async def init_store(settings: Settings) -> None:
    """Create the backing store's schema."""
    from .store import create_store

    store = create_store(settings)
    await store.init()
    await store.shutdown()
    print(f"Store initialized ({settings.store_backend}: {settings.database_url})")


def show_config(settings: Settings, check: bool) -> None:
    """Print the effective configuration, masking secrets."""
    def mask(value: str) -> str:
        return f"{value[:4]}..." if value else "(not set)"

    print(f"App:              {settings.app_name}")
    print(f"Server:           {settings.host}:{settings.port}")
    print(f"Store:            {settings.store_backend}")
    print(f"Database:         {settings.database_url}")
    print(f"Default provider: {settings.default_provider} ({settings.default_model})")
    print(f"OpenAI key:       {mask(settings.openai_api_key)}")
    print(f"Anthropic key:    {mask(settings.anthropic_api_key)}")
    print(f"Google key:       {mask(settings.google_api_key)}")
    print(f"OpenRouter key:   {mask(settings.openrouter_api_key)}")
    print(f"Local server:     {settings.local_base_url}")

    if check:
        problems = check_config(settings)
        for problem in problems:
            print(f"  ! {problem}")
        if problems:
            sys.exit(1)
        print("Configuration OK")


def check_config(settings: Settings) -> list[str]:
    """Return a list of configuration problems."""
    problems = []
    key = settings.get_llm_config().api_key
    if not key:
        problems.append(f"No API key configured for default provider '{settings.default_provider}'")
    if settings.store_backend == "sql" and not settings.database_url:
        problems.append("DATABASE_URL is empty")
    return problems


async def chat(settings: Settings, agent_id: int) -> None:
    """Interactive chat with a stored agent."""
    from .agent import AgentManager
    from .exceptions import AgentFrameworkError
    from .store import create_store

    store = create_store(settings)
    await store.init()
    manager = AgentManager(store, settings=settings)

    try:
        agent = await store.get_agent(agent_id)
        print(f"Chatting with {agent.name} (Ctrl-D to quit)")

        while True:
            try:
                message = await asyncio.to_thread(input, "> ")
            except EOFError:
                break

            if not message.strip():
                continue

            try:
                response, _ = await manager.process_message(agent_id, message)
            except AgentFrameworkError as e:
                print(f"[error] {e}")
                continue

            print(response)
    finally:
        await store.shutdown()


if __name__ == "__main__":
    main()
