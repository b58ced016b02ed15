"""
Route dependencies: the chat service built at startup and the credential gate.
"""
from fastapi import Request

from companion.config import settings
from companion.core.errors import ConfigurationError
from companion.services.chat_service import ChatService


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def require_generation_config() -> None:
    """Reject API calls with 503 until the provider credential is configured."""
    if not settings.gemini_ready:
        raise ConfigurationError()
