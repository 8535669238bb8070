"""Database helpers (engine/session export) for the SQL record store."""

from .session import Base, get_engine, get_session, reset_engine

__all__ = ["Base", "get_engine", "get_session", "reset_engine"]
