"""Engine and session plumbing for ``SQLRecordStore``.

One engine per process, built lazily from ``DATABASE_URL``. Sessions are
short-lived: the store opens one per operation and commits explicitly.
"""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from bookreview.core.config import get_settings

Base = declarative_base()


@lru_cache
def get_engine() -> Engine:
    url = (get_settings().database_url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be configured when STORAGE_BACKEND=sql.")
    connect_args = {}
    if url.startswith("sqlite"):
        # request handlers run in a thread pool and share pooled connections
        connect_args["check_same_thread"] = False
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


@lru_cache
def _get_sessionmaker() -> sessionmaker:
    # entities are built from rows after commit, so rows must stay loaded
    return sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)


def reset_engine() -> None:
    """Dispose the cached engine so the next call reads DATABASE_URL again."""
    if get_engine.cache_info().currsize:
        get_engine().dispose()
    _get_sessionmaker.cache_clear()
    get_engine.cache_clear()


@contextmanager
def get_session() -> Iterator[Session]:
    session: Session = _get_sessionmaker()()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
