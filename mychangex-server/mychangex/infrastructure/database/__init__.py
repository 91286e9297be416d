"""Database infrastructure helpers (engine, sessions, migrations)."""

from .base import Base
from .session import AsyncSessionFactory, get_session, get_session_factory, init_db

__all__ = ["Base", "AsyncSessionFactory", "get_session", "get_session_factory", "init_db"]
