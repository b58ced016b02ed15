"""
Keyword classifier for mood and mode.

One table-driven matcher: an ordered list of (pattern, label) rules, first match
wins, no scoring. Mood and mode detection differ only in their tables and default.
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Generic, TypeVar

from companion.services.types import Mode, Mood

Label = TypeVar("Label")


def keyword_pattern(keywords: Iterable[str]) -> re.Pattern[str]:
    """Case-insensitive alternation matching any keyword as a substring."""
    return re.compile("|".join(re.escape(k) for k in keywords), re.IGNORECASE)


class KeywordClassifier(Generic[Label]):
    """Ordered (pattern, label) rules; returns the first matching label or the default."""

    def __init__(self, rules: Sequence[tuple[re.Pattern[str], Label]]) -> None:
        self._rules = tuple(rules)

    @classmethod
    def from_table(cls, table: Sequence[tuple[Label, Iterable[str]]]) -> KeywordClassifier[Label]:
        return cls([(keyword_pattern(keywords), label) for label, keywords in table])

    def classify(self, text: str | None, default: Label) -> Label:
        if not text or not text.strip():
            return default
        for pattern, label in self._rules:
            if pattern.search(text):
                return label
        return default


# Priority order matters: happy, sad, stressed, excited.
MOOD_KEYWORDS: tuple[tuple[Mood, tuple[str, ...]], ...] = (
    (Mood.HAPPY, ("happy", "great", "awesome", "amazing", "wonderful")),
    (Mood.SAD, ("sad", "depressed", "down", "lonely", "upset")),
    (Mood.STRESSED, ("stress", "anxious", "worried", "overwhelmed", "tired", "drained")),
    (Mood.EXCITED, ("excited", "can't wait", "looking forward", "pumped")),
)

# Code wins over research.
MODE_KEYWORDS: tuple[tuple[Mode, tuple[str, ...]], ...] = (
    (
        Mode.CODE,
        (
            "code", "debug", "error", "function", "component", "api", "bug",
            "programming", "react", "angular", "typescript",
        ),
    ),
    (
        Mode.RESEARCH,
        ("research", "learn", "explain", "how does", "what is", "tell me about", "study"),
    ),
)

mood_classifier: KeywordClassifier[Mood] = KeywordClassifier.from_table(MOOD_KEYWORDS)
mode_classifier: KeywordClassifier[Mode] = KeywordClassifier.from_table(MODE_KEYWORDS)


def detect_mood(text: str | None) -> Mood:
    return mood_classifier.classify(text, Mood.NEUTRAL)


def detect_mode(text: str | None, current_mode: Mode | str | None = None) -> Mode:
    """Mode for this message; keeps current_mode (or friend) when no keyword matches."""
    return mode_classifier.classify(text, Mode.parse(current_mode) or Mode.FRIEND)
