"""
Chat session: a named conversation thread grouping turns.
"""
from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from companion.core.constants import SESSION_ID_MAX_LENGTH, SESSION_TITLE_MAX_LENGTH
from companion.db.base import Base
from companion.models.clock import utcnow


class ChatSession(Base):
    __tablename__ = "sessions"

    id = Column(String(SESSION_ID_MAX_LENGTH), primary_key=True)
    title = Column(String(SESSION_TITLE_MAX_LENGTH), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    # Turns go with the session through ON DELETE CASCADE; they are not loaded first.
    turns = relationship(
        "Turn",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
