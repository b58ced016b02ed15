"""
Typed definitions shared by the classifier, composer, store and routes.

Mood and Mode are str enums so they serialize as their plain labels.
Store records are TypedDicts with ISO-8601 timestamps, ready for JSON.
"""
from enum import Enum
from typing import TypedDict


class Mood(str, Enum):
    """Detected emotional tone of the latest user message."""

    HAPPY = "happy"
    SAD = "sad"
    STRESSED = "stressed"
    EXCITED = "excited"
    NEUTRAL = "neutral"


class Mode(str, Enum):
    """Topical register steering prompt template selection."""

    FRIEND = "friend"
    RESEARCH = "research"
    CODE = "code"

    @classmethod
    def parse(cls, value: "str | Mode | None") -> "Mode | None":
        """Mode for a label, or None when absent or unknown."""
        if value is None:
            return None
        if isinstance(value, Mode):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class TurnRecord(TypedDict):
    """One row of the conversations table."""
    id: int
    session_id: str
    role: str
    content: str
    mood: str | None
    mode: str | None
    timestamp: str | None


class SessionSummary(TypedDict):
    """Session row plus its live turn count."""
    id: str
    title: str
    created_at: str | None
    updated_at: str | None
    message_count: int
