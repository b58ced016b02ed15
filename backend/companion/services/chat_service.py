"""
Chat service: classify -> persist user turn -> load history -> generate -> persist reply.

Also owns the session lifecycle (create / rename / delete). The store is injected
and is blocking, so every store call is moved off the event loop with
asyncio.to_thread; generation is awaited directly. Steps run strictly in
sequence and a failing step stops the pipeline without undoing earlier commits.
"""
import asyncio
import logging
import time
import uuid
from dataclasses import dataclass

from companion.config import settings
from companion.core.constants import (
    DEFAULT_SESSION_TITLE,
    LOG_MESSAGE_PREVIEW_CHARS,
    MSG_EMPTY_MESSAGE,
    MSG_EMPTY_TITLE,
    MSG_INVALID_REQUEST,
    SESSION_ID_MAX_LENGTH,
    SESSION_ID_PREFIX,
    SESSION_TITLE_ELLIPSIS,
    SESSION_TITLE_MAX_CHARS,
    SESSION_TITLE_MAX_LENGTH,
)
from companion.core.errors import ValidationError
from companion.services.chat_store import ChatStore
from companion.services.classifier import detect_mode, detect_mood
from companion.services.generation import GenerationClient
from companion.services.prompt_composer import build_prompt
from companion.services.types import Mode, Mood, Role, SessionSummary, TurnRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatReply:
    response: str
    mood: Mood
    mode: Mode


def create_session_id() -> str:
    """Generate a new session id."""
    return f"{SESSION_ID_PREFIX}{uuid.uuid4().hex}"


def session_title_from(message: str) -> str:
    """Title for a session started by this message: its first characters."""
    text = " ".join(message.split())
    if not text:
        return DEFAULT_SESSION_TITLE
    if len(text) <= SESSION_TITLE_MAX_CHARS:
        return text
    return text[:SESSION_TITLE_MAX_CHARS].rstrip() + SESSION_TITLE_ELLIPSIS


def _clean_title(title: str | None) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError(MSG_EMPTY_TITLE)
    if len(cleaned) > SESSION_TITLE_MAX_LENGTH:
        raise ValidationError(MSG_INVALID_REQUEST)
    return cleaned


class ChatService:
    def __init__(self, store: ChatStore, generator: GenerationClient) -> None:
        self.store = store
        self.generator = generator

    async def chat(
        self,
        message: str | None,
        session_id: str | None = None,
        mode: Mode | str | None = None,
    ) -> ChatReply:
        """Run one chat turn and return the reply with the detected mood and mode."""
        started = time.perf_counter()
        text = (message or "").strip()
        if not text:
            raise ValidationError(MSG_EMPTY_MESSAGE)
        sid = (session_id or "").strip() or settings.default_session_id
        if len(sid) > SESSION_ID_MAX_LENGTH:
            raise ValidationError(MSG_INVALID_REQUEST)

        mood = detect_mood(text)
        detected_mode = detect_mode(text, mode)
        logger.info(
            "chat [%s] mode=%s mood=%s message=%r",
            sid,
            detected_mode.value,
            mood.value,
            text[:LOG_MESSAGE_PREVIEW_CHARS],
        )

        await asyncio.to_thread(self.store.create_session, sid, session_title_from(text))
        user_turn_id = await asyncio.to_thread(
            self.store.save_turn, sid, Role.USER, text, mood, detected_mode
        )
        history = await asyncio.to_thread(self.store.list_history, sid, settings.context_history_limit)
        previous = [t for t in history if t["id"] != user_turn_id]

        prompt = build_prompt(detected_mode, mood, previous, text)
        response = await self.generator.respond(prompt)

        await asyncio.to_thread(
            self.store.save_turn, sid, Role.ASSISTANT, response, mood, detected_mode
        )
        logger.info("chat [%s] replied in %.0fms", sid, (time.perf_counter() - started) * 1000)
        return ChatReply(response=response, mood=mood, mode=detected_mode)

    async def history(self, session_id: str, limit: int | None = None) -> list[TurnRecord]:
        if limit is None:
            limit = settings.history_limit
        return await asyncio.to_thread(self.store.list_history, session_id, limit)

    async def list_sessions(self) -> list[SessionSummary]:
        return await asyncio.to_thread(self.store.list_sessions)

    async def create_session(self, title: str | None = None) -> dict[str, str]:
        """New session with a fresh id; title defaults to "New Chat"."""
        session_id = create_session_id()
        final_title = _clean_title(title) if (title or "").strip() else DEFAULT_SESSION_TITLE
        await asyncio.to_thread(self.store.create_session, session_id, final_title)
        logger.info("Session %s created", session_id)
        return {"id": session_id, "title": final_title}

    async def rename_session(self, session_id: str, title: str | None) -> None:
        """Raises NotFoundError for an unknown id."""
        await asyncio.to_thread(self.store.rename_session, session_id, _clean_title(title))

    async def delete_session(self, session_id: str) -> None:
        """Raises NotFoundError for an unknown id."""
        await asyncio.to_thread(self.store.delete_session, session_id)
        logger.info("Session %s deleted", session_id)
