from companion.services.chat_service import ChatReply, ChatService, create_session_id
from companion.services.chat_store import ChatStore
from companion.services.classifier import detect_mode, detect_mood
from companion.services.generation import GenerationClient
from companion.services.prompt_composer import build_prompt

__all__ = [
    "ChatReply",
    "ChatService",
    "ChatStore",
    "GenerationClient",
    "build_prompt",
    "create_session_id",
    "detect_mode",
    "detect_mood",
]
