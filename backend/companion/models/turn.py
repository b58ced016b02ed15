"""
Conversation turn: one user or assistant message, append-only.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from companion.core.constants import SESSION_ID_MAX_LENGTH
from companion.db.base import Base
from companion.models.clock import utcnow


class Turn(Base):
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(SESSION_ID_MAX_LENGTH), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False)
    role = Column(String(16), nullable=False)  # "user" | "assistant"
    content = Column(Text, nullable=False)
    mood = Column(String(16), nullable=True, index=True)
    mode = Column(String(16), nullable=True, index=True)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    session = relationship("ChatSession", back_populates="turns")

    __table_args__ = (Index("ix_conversations_session_timestamp", "session_id", "timestamp"),)
