"""
Persistence for templates, agents and conversational state.
"""

from ..config import Settings
from .base import AgentStore
from .memory import InMemoryAgentStore
from .sql import SQLAgentStore


def create_store(settings: Settings) -> AgentStore:
    """Create the store selected by ``settings.store_backend``."""
    if settings.store_backend == "memory":
        return InMemoryAgentStore()
    return SQLAgentStore(settings.database_url)


__all__ = [
    "AgentStore",
    "InMemoryAgentStore",
    "SQLAgentStore",
    "create_store",
]
