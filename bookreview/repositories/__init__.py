"""
Persistence adapters.

Every backend implements ``RecordStore`` (see ``base``); services depend on
that contract and never touch files or sessions directly. ``create_store``
builds the backend named by ``STORAGE_BACKEND`` once at startup.
"""

from __future__ import annotations

from typing import Optional

from bookreview.core.config import Settings, get_settings

from .base import (
    CorruptCollectionError,
    PersistenceError,
    RecordStore,
    any_of,
    contains_ci,
    equals,
)


def create_store(settings: Optional[Settings] = None) -> RecordStore:
    settings = settings or get_settings()
    if settings.storage_backend == "memory":
        from .memory_storage import MemoryRecordStore

        return MemoryRecordStore()
    if settings.storage_backend == "sql":
        from .sql_repository import SQLRecordStore

        return SQLRecordStore()
    from .json_storage import JsonRecordStore

    return JsonRecordStore(settings.data_dir)


__all__ = [
    "CorruptCollectionError",
    "PersistenceError",
    "RecordStore",
    "any_of",
    "contains_ci",
    "create_store",
    "equals",
]
