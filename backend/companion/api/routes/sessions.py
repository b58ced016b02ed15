"""
Session management: list, create, rename, delete.
Unknown ids on rename/delete raise NotFoundError (404, see main exception handlers).
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from companion.api.deps import get_chat_service
from companion.core.constants import SESSION_TITLE_MAX_LENGTH
from companion.services.chat_service import ChatService

router = APIRouter(prefix="/sessions")


class CreateSessionRequest(BaseModel):
    title: str | None = Field(default=None, max_length=SESSION_TITLE_MAX_LENGTH)


class RenameSessionRequest(BaseModel):
    title: str | None = Field(default=None, max_length=SESSION_TITLE_MAX_LENGTH)


class CreateSessionResponse(BaseModel):
    id: str
    title: str


class SuccessResponse(BaseModel):
    success: bool


@router.get("")
async def list_sessions(service: ChatService = Depends(get_chat_service)):
    """All sessions, most recently updated first, with message_count."""
    return await service.list_sessions()


@router.post("", response_model=CreateSessionResponse)
async def create_session(
    body: CreateSessionRequest | None = None,
    service: ChatService = Depends(get_chat_service),
) -> CreateSessionResponse:
    created = await service.create_session(body.title if body else None)
    return CreateSessionResponse(**created)


@router.patch("/{session_id}", response_model=SuccessResponse)
async def rename_session(
    session_id: str,
    body: RenameSessionRequest,
    service: ChatService = Depends(get_chat_service),
) -> SuccessResponse:
    await service.rename_session(session_id, body.title)
    return SuccessResponse(success=True)


@router.delete("/{session_id}", response_model=SuccessResponse)
async def delete_session(session_id: str, service: ChatService = Depends(get_chat_service)) -> SuccessResponse:
    await service.delete_session(session_id)
    return SuccessResponse(success=True)
