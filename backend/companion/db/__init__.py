from companion.db.base import Base
from companion.db.session import build_engine, build_session_factory
from companion.db.tables import ALL_TABLE_NAMES

__all__ = ["Base", "build_engine", "build_session_factory", "ALL_TABLE_NAMES"]
