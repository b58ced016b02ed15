"""
Chat store: sessions and conversation turns in the relational database.

Explicit lifecycle: open() builds the engine (and tables when configured),
close() disposes it. Every operation runs in its own short-lived ORM session,
so the store can be shared across threads (the async service calls it via
asyncio.to_thread). SQLAlchemy failures surface as PersistenceError.
"""
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import TypeVar

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from companion.core.errors import NotFoundError, PersistenceError
from companion.db import Base, build_engine, build_session_factory
from companion.models import ChatSession, Turn
from companion.models.clock import utcnow
from companion.services.types import Mode, Mood, Role, SessionSummary, TurnRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _label(value: Mood | Mode | Role | str | None) -> str | None:
    if value is None:
        return None
    return value.value if isinstance(value, (Mood, Mode, Role)) else str(value)


def _turn_record(row: Turn) -> TurnRecord:
    return {
        "id": row.id,
        "session_id": row.session_id,
        "role": row.role,
        "content": row.content,
        "mood": row.mood,
        "mode": row.mode,
        "timestamp": _iso(row.timestamp),
    }


def _session_summary(row: ChatSession, message_count: int) -> SessionSummary:
    return {
        "id": row.id,
        "title": row.title,
        "created_at": _iso(row.created_at),
        "updated_at": _iso(row.updated_at),
        "message_count": int(message_count or 0),
    }


class ChatStore:
    """Sessions (upsert) and turns (append-only) over SQLAlchemy."""

    def __init__(self, database_url: str, *, create_all: bool = True) -> None:
        self.database_url = database_url
        self.create_all = create_all
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> "ChatStore":
        if self._engine is not None:
            return self
        try:
            engine = build_engine(self.database_url)
            if self.create_all:
                Base.metadata.create_all(engine)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not open store: {e}") from e
        self._engine = engine
        self._session_factory = build_session_factory(engine)
        logger.info("Chat store opened (%s)", engine.url.render_as_string(hide_password=True))
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Chat store closed")

    def __enter__(self) -> "ChatStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        if self._session_factory is None:
            raise PersistenceError("Chat store is not open")
        db = self._session_factory()
        try:
            yield db
        finally:
            db.close()

    def _run(self, action: str, fn: Callable[[Session], T]) -> T:
        """Run fn in a fresh session; roll back and wrap SQLAlchemy errors."""
        with self._session() as db:
            try:
                return fn(db)
            except SQLAlchemyError as e:
                db.rollback()
                logger.warning("Store %s failed: %s", action, e, exc_info=True)
                raise PersistenceError(f"Store {action} failed") from e

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(self, session_id: str, title: str) -> bool:
        """Insert the session unless the id exists (existing title untouched). True if created."""

        def _create(db: Session) -> bool:
            if db.get(ChatSession, session_id) is not None:
                return False
            db.add(ChatSession(id=session_id, title=title))
            try:
                db.commit()
            except IntegrityError:
                # Lost a race with a concurrent insert of the same id.
                db.rollback()
                return False
            return True

        return self._run("create_session", _create)

    def get_session(self, session_id: str) -> SessionSummary | None:
        def _get(db: Session) -> SessionSummary | None:
            row = db.get(ChatSession, session_id)
            if row is None:
                return None
            count = db.scalar(select(func.count(Turn.id)).where(Turn.session_id == session_id))
            return _session_summary(row, count)

        return self._run("get_session", _get)

    def list_sessions(self) -> list[SessionSummary]:
        """All sessions, most recently updated first, each with a live turn count."""

        def _list(db: Session) -> list[SessionSummary]:
            stmt = (
                select(ChatSession, func.count(Turn.id))
                .outerjoin(Turn, Turn.session_id == ChatSession.id)
                .group_by(ChatSession.id)
                .order_by(ChatSession.updated_at.desc(), ChatSession.created_at.desc(), ChatSession.id.desc())
            )
            return [_session_summary(row, count) for row, count in db.execute(stmt).all()]

        return self._run("list_sessions", _list)

    def rename_session(self, session_id: str, title: str) -> None:
        def _rename(db: Session) -> None:
            row = db.get(ChatSession, session_id)
            if row is None:
                raise NotFoundError()
            row.title = title
            row.updated_at = utcnow()
            db.commit()

        self._run("rename_session", _rename)

    def delete_session(self, session_id: str) -> None:
        """Delete the session and, by cascade, its turns."""

        def _delete(db: Session) -> None:
            row = db.get(ChatSession, session_id)
            if row is None:
                raise NotFoundError()
            db.delete(row)
            db.commit()

        self._run("delete_session", _delete)

    def touch_session(self, session_id: str) -> None:
        def _touch(db: Session) -> None:
            row = db.get(ChatSession, session_id)
            if row is None:
                raise NotFoundError()
            row.updated_at = utcnow()
            db.commit()

        self._run("touch_session", _touch)

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    def save_turn(
        self,
        session_id: str,
        role: Role | str,
        content: str,
        mood: Mood | str | None = None,
        mode: Mode | str | None = None,
    ) -> int:
        """Append one turn and touch its session in the same transaction. Returns the turn id."""

        def _save(db: Session) -> int:
            session_row = db.get(ChatSession, session_id)
            if session_row is None:
                raise NotFoundError()
            now = utcnow()
            turn = Turn(
                session_id=session_id,
                role=_label(role),
                content=content,
                mood=_label(mood),
                mode=_label(mode),
                timestamp=now,
            )
            db.add(turn)
            session_row.updated_at = now
            db.commit()
            return turn.id

        return self._run("save_turn", _save)

    def list_history(self, session_id: str, limit: int = 20) -> list[TurnRecord]:
        """Most recent `limit` turns of the session, oldest first."""
        if limit <= 0:
            return []

        def _history(db: Session) -> list[TurnRecord]:
            stmt = (
                select(Turn)
                .where(Turn.session_id == session_id)
                .order_by(Turn.timestamp.desc(), Turn.id.desc())
                .limit(limit)
            )
            rows = list(db.scalars(stmt).all())
            rows.reverse()
            return [_turn_record(r) for r in rows]

        return self._run("list_history", _history)
