from companion.models.chat_session import ChatSession
from companion.models.turn import Turn

__all__ = [
    "ChatSession",
    "Turn",
]
