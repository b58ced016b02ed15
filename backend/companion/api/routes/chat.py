"""
Chat endpoint and conversation history.
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from companion.api.deps import get_chat_service
from companion.core.constants import MSG_CHAT_FAILED, MSG_EMPTY_MESSAGE, SESSION_ID_MAX_LENGTH
from companion.core.errors import STATUS_INTERNAL_ERROR, ValidationError
from companion.services.chat_service import ChatService
from companion.services.types import Mode, Mood

router = APIRouter()
logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str | None = None
    # omitted: the default session
    session_id: str | None = Field(default=None, alias="sessionId", max_length=SESSION_ID_MAX_LENGTH)
    mode: str | None = None  # current mode from the client; unknown values are ignored


class ChatResponse(BaseModel):
    response: str
    mood: Mood
    mode: Mode


def _fallback(body: ChatRequest, response: str, status_code: int) -> JSONResponse:
    """Canned reply in the normal chat shape: neutral mood, the client's current mode."""
    payload = ChatResponse(
        response=response,
        mood=Mood.NEUTRAL,
        mode=Mode.parse(body.mode) or Mode.FRIEND,
    )
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))


@router.post("/chat", response_model=ChatResponse)
async def chat(body: ChatRequest, service: ChatService = Depends(get_chat_service)):
    """
    Send a message; the reply carries the detected mood and mode.
    Pass sessionId to keep the conversation in a session (created on first message).
    """
    try:
        reply = await service.chat(body.message, session_id=body.session_id, mode=body.mode)
    except ValidationError as e:
        return _fallback(body, MSG_EMPTY_MESSAGE, e.status_code)
    except Exception:  # noqa: BLE001
        logger.exception("Chat failed (session=%s)", body.session_id)
        return _fallback(body, MSG_CHAT_FAILED, STATUS_INTERNAL_ERROR)
    return ChatResponse(response=reply.response, mood=reply.mood, mode=reply.mode)


@router.get("/history/{session_id}")
async def get_history(session_id: str, service: ChatService = Depends(get_chat_service)):
    """Turns of the session, oldest first (most recent history_limit turns)."""
    return await service.history(session_id)
