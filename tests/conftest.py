from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the bookreview package importable for local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bookreview.core import config as core_config  # noqa: E402
from bookreview.db import models  # noqa: E402
from bookreview.db import session as db_session  # noqa: E402
from bookreview.repositories.json_storage import JsonRecordStore  # noqa: E402
from bookreview.repositories.memory_storage import MemoryRecordStore  # noqa: E402
from bookreview.repositories.sql_repository import SQLRecordStore  # noqa: E402


def _clear_caches() -> None:
    db_session.reset_engine()
    core_config.get_settings.cache_clear()


@pytest.fixture()
def sql_store(tmp_path, monkeypatch):
    """SQL store on a temporary SQLite file, fully torn down so the file is never left locked."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    _clear_caches()

    store = SQLRecordStore()
    engine = db_session.get_engine()

    yield store

    try:
        models.Base.metadata.drop_all(bind=engine)
    except Exception:
        pass
    _clear_caches()


@pytest.fixture()
def json_store(tmp_path):
    return JsonRecordStore(tmp_path / "data")


@pytest.fixture()
def memory_store():
    return MemoryRecordStore()


@pytest.fixture(params=["memory", "json", "sql"])
def store(request):
    """Every backend, for tests of the shared record store contract."""
    return request.getfixturevalue(f"{request.param}_store")
