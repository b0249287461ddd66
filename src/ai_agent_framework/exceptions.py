"""
Exception hierarchy for the agent framework.
"""


class AgentFrameworkError(Exception):
    """Base class for all framework errors."""


class ProviderError(AgentFrameworkError):
    """A model provider call failed (timeout, rate limit, bad response...)."""

    def __init__(self, message: str, provider: str = "", retryable: bool = False):
        super().__init__(message)
        self.provider = provider
        self.retryable = retryable


class UnsupportedProviderError(ProviderError):
    """The requested provider has no implementation."""


class PersistenceError(AgentFrameworkError):
    """A store operation failed."""


class StateValidationError(PersistenceError):
    """Stored agent state does not have the expected shape."""


class NotFoundError(AgentFrameworkError):
    """A requested record does not exist."""


class AgentNotFoundError(NotFoundError):
    pass


class TemplateNotFoundError(NotFoundError):
    pass


class AgentConfigurationError(AgentFrameworkError):
    """An agent cannot run with its current configuration."""
