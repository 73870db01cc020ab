"""Database helpers and SQLModel metadata setup."""
from .base import dispose_engine, get_engine, get_session, init_db

__all__ = ["dispose_engine", "get_engine", "get_session", "init_db"]
