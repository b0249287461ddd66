"""
Memory policy: which part of the conversation log feeds a model call.
"""

import structlog

from ..schemas import ExperienceSettings, MemoryType
from .conversation import ConversationLog, Message

logger = structlog.get_logger()

CONVERSATION_WINDOW = 10
SUMMARIZED_WINDOW = 5  # the running summary stands in for the rest
LONG_TERM_WINDOW = 15

WINDOW_SIZES: dict[str, int] = {
    MemoryType.CONVERSATION.value: CONVERSATION_WINDOW,
    MemoryType.SUMMARIZED.value: SUMMARIZED_WINDOW,
    MemoryType.LONG_TERM.value: LONG_TERM_WINDOW,
}


def window_size(memory_type: str) -> int:
    """Number of recent messages kept for ``memory_type``; 0 if unknown."""
    if isinstance(memory_type, MemoryType):
        memory_type = memory_type.value
    return WINDOW_SIZES.get(memory_type, 0)


def select_window(log: ConversationLog, settings: ExperienceSettings) -> list[Message]:
    """Select the recent messages to include as model context.

    Unknown memory types select nothing rather than failing, so a turn with a
    malformed policy still reaches the model.
    """
    size = window_size(settings.memory_type)
    if size == 0:
        logger.warning("Unknown memory type, using empty window", memory_type=settings.memory_type)
        return []
    return log.window(size)
