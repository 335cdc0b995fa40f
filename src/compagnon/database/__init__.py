"""Local datastore for character documents and reference items."""

from .engine import close_db, get_engine, get_session, init_db

__all__ = ["get_engine", "get_session", "init_db", "close_db"]
