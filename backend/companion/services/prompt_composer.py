"""
Prompt composer: mode template + mood + trailing history + the new user turn.

Output is a single plain-text prompt ending with the assistant cue, e.g.

    <template>

    Previous conversation:
    User: hi
    D.R.O.S.S: hey!

    User (happy): this is awesome

    D.R.O.S.S:
"""
from collections.abc import Mapping, Sequence
from typing import Any

from companion.config import settings
from companion.services.types import Mode, Mood, Role

FRIEND_TEMPLATE = """You are {name} ({full_name}), a caring AI companion focused on emotional support and daily wellness.

Your role:
- Be empathetic and conversational, like a close friend
- Keep responses concise (2-4 sentences) unless user asks for detail
- Detect and respond to the user's mood sensitively
- Don't overwhelm with information - prioritize emotional connection
- Ask follow-up questions to understand their state better

Current detected mood: {mood}. Respond accordingly."""

RESEARCH_TEMPLATE = """You are {name} in Research Mode - a deep-thinking AI that helps explore topics thoroughly.

Your role:
- Provide detailed, well-structured explanations
- Break down complex topics into understandable parts
- Cite reasoning and suggest further areas to explore
- Be intellectually curious and thorough
- Ask clarifying questions when needed"""

CODE_TEMPLATE = """You are {name} in Code Mode - a programming assistant helping debug and explain code.

Your role:
- Help debug errors and explain technical concepts
- Provide code examples when relevant
- Ask about the specific technology stack (React, Angular, Node, etc.)
- Suggest best practices and optimizations
- Keep explanations clear and actionable"""

TEMPLATES: dict[Mode, str] = {
    Mode.FRIEND: FRIEND_TEMPLATE,
    Mode.RESEARCH: RESEARCH_TEMPLATE,
    Mode.CODE: CODE_TEMPLATE,
}


def system_prompt(mode: Mode | str | None, mood: Mood | str) -> str:
    """Template for the mode (friend when unrecognized) with name and mood filled in."""
    template = TEMPLATES.get(Mode.parse(mode) or Mode.FRIEND, FRIEND_TEMPLATE)
    return template.format(
        name=settings.assistant_name,
        full_name=settings.assistant_full_name,
        mood=_label(mood),
    )


def _label(value: Any) -> str:
    return value.value if isinstance(value, (Mood, Mode, Role)) else str(value)


def _speaker(role: Any) -> str:
    return "User" if _label(role) == Role.USER.value else settings.assistant_name


def format_history(history: Sequence[Mapping[str, Any]], max_turns: int | None = None) -> str:
    """Last max_turns turns as "Speaker: content" lines, oldest first."""
    if max_turns is None:
        max_turns = settings.prompt_history_turns
    if max_turns <= 0:
        return ""
    return "\n".join(
        f"{_speaker(turn.get('role'))}: {turn.get('content', '')}" for turn in list(history)[-max_turns:]
    )


def build_prompt(
    mode: Mode | str | None,
    mood: Mood | str,
    trailing_history: Sequence[Mapping[str, Any]],
    new_message: str,
    *,
    max_turns: int | None = None,
) -> str:
    return (
        f"{system_prompt(mode, mood)}\n\n"
        f"Previous conversation:\n{format_history(trailing_history, max_turns)}\n\n"
        f"User ({_label(mood)}): {new_message}\n\n"
        f"{settings.assistant_name}:"
    )
