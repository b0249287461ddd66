"""
Running summary - periodic condensation of the conversation.

Every ``SUMMARIZATION_INTERVAL`` logged messages the most recent messages are
sent to the model for summarizing. The summary is best-effort: a failed or
cancelled summarization leaves the previous summary in place and never fails
the turn that triggered it.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog

from ..llm.base import BaseLLM
from ..schemas import AIEngine, ExperienceSettings
from .conversation import ConversationLog, utcnow

logger = structlog.get_logger()

SUMMARIZATION_INTERVAL = 10
SUMMARY_SOURCE_MESSAGES = 10


@dataclass
class RunningSummary:
    """Condensed memory beyond the raw history window."""

    text: str = ""
    interaction_count: int = 0
    last_updated: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "interactions": self.interaction_count,
            "lastSummary": self.text,
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
        }


def is_summarization_due(settings: ExperienceSettings, interaction_count: int) -> bool:
    """Whether a summarization pass is due at ``interaction_count``."""
    return (
        settings.summarization_enabled
        and interaction_count > 0
        and interaction_count % SUMMARIZATION_INTERVAL == 0
    )


def build_summary_transcript(log: ConversationLog, limit: int = SUMMARY_SOURCE_MESSAGES) -> str:
    """Render the last ``limit`` messages as ``role: content`` lines."""
    return "\n".join(f"{msg.role}: {msg.content}" for msg in log.window(limit))


async def refresh_summary(
    llm: BaseLLM,
    log: ConversationLog,
    summary: RunningSummary,
    engine: AIEngine | None = None,
) -> bool:
    """Replace the summary text with a fresh summary of recent messages.

    Returns True if the summary was updated.
    """
    transcript = build_summary_transcript(log)

    try:
        text = await llm.summarize(transcript, engine)
    except asyncio.CancelledError:
        logger.warning("Summarization cancelled, keeping previous summary")
        return False
    except Exception as e:
        logger.error("Error updating experience summary", error=str(e))
        return False

    summary.text = text
    summary.last_updated = utcnow()

    logger.info(
        "Experience summary updated",
        interactions=summary.interaction_count,
        summary_length=len(text),
    )
    return True
