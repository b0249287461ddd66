"""
Context assembly: persona preamble plus the selected history window.
"""

from ..llm.base import LLMMessage
from ..schemas import Persona
from .conversation import Message
from .summarization import RunningSummary

NO_PREVIOUS_INTERACTIONS = "No previous interactions."

SYSTEM_PREAMBLE = """You are an AI assistant with the following traits: {traits}.
Background: {backstory}
Instructions: {instructions}

Current interaction count: {interaction_count}
Previous summary: {summary}"""


def render_message(message: Message) -> str:
    return f"{message.role}: {message.content}"


def build_system_preamble(
    persona: Persona,
    summary: RunningSummary,
    interaction_count: int,
) -> str:
    return SYSTEM_PREAMBLE.format(
        traits=", ".join(persona.traits),
        backstory=persona.backstory,
        instructions=persona.instructions,
        interaction_count=interaction_count,
        summary=summary.text or NO_PREVIOUS_INTERACTIONS,
    )


def build_context(
    persona: Persona,
    summary: RunningSummary,
    windowed: list[Message],
    interaction_count: int,
) -> list[LLMMessage]:
    """Build the ordered context entries for a model call.

    The first entry is always the system preamble. Each windowed message
    follows as a user-role line of the form ``"{role}: {content}"``; the
    speaker is carried in the text.
    """
    context = [
        LLMMessage(
            role="system",
            content=build_system_preamble(persona, summary, interaction_count),
        )
    ]
    context.extend(LLMMessage(role="user", content=render_message(msg)) for msg in windowed)
    return context
