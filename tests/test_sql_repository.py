"""
Smoke tests for the SQLRecordStore against a temporary SQLite database.
"""
from __future__ import annotations

import threading
from datetime import datetime, timezone

import pytest

from bookreview.core.config import get_settings
from bookreview.db import models
from bookreview.db import session as db_session
from bookreview.domain.entities import Book, Review, User
from bookreview.repositories.base import PersistenceError


def test_cascade_delete_runs_in_one_transaction(sql_store):
    book = sql_store.insert(Book, {"title": "Clean Code", "author": "Robert C. Martin"})
    other = sql_store.insert(Book, {"title": "Refactoring", "author": "Martin Fowler"})
    for user_id in (1, 2, 3):
        sql_store.insert(Review, {"book_id": book.id, "user_id": user_id, "rating": 5, "content": "Essential reading."})
    kept = sql_store.insert(Review, {"book_id": other.id, "user_id": 1, "rating": 4, "content": "Very practical advice."})

    assert sql_store.delete(Book, book.id) is True
    assert sql_store.list(Review) == [kept]
    assert sql_store.delete(Book, book.id) is False


def test_import_entity_keeps_ids_and_timestamps(sql_store):
    created = datetime(2024, 3, 1, 10, 15, 30, 250000, tzinfo=timezone.utc)
    sql_store.import_entity(Book(id=7, title="Imported", author="Someone", created_at=created))
    book = sql_store.get(Book, 7)
    assert book is not None
    assert book.created_at == created
    assert sql_store.insert(Book, {"title": "Next", "author": "X"}).id == 8


def test_duplicate_username_is_a_persistence_error(sql_store):
    sql_store.insert(User, {"username": "alice", "password": "hash"})
    with pytest.raises(PersistenceError):
        sql_store.insert(User, {"username": "alice", "password": "other"})
    assert len(sql_store.list(User)) == 1


def test_missing_tables_degrade_reads(sql_store):
    sql_store.insert(Book, {"title": "T", "author": "A"})
    models.Base.metadata.drop_all(bind=db_session.get_engine())

    assert sql_store.list(Book) == []
    assert sql_store.get(Book, 1) is None
    assert sql_store.health() == {
        "status": "degraded",
        "backend": "sql",
        "read_errors": {"books": sql_store.read_errors["books"]},
    }
    with pytest.raises(PersistenceError):
        sql_store.insert(Book, {"title": "T", "author": "A"})


@pytest.mark.parametrize("huge_id", [2**63, 2**70, -(2**70)])
def test_ids_beyond_integer_column_are_absent(sql_store, huge_id):
    book = sql_store.insert(Book, {"title": "T", "author": "A"})
    assert sql_store.get(Book, huge_id) is None
    assert sql_store.update(Book, huge_id, {"title": "x"}) is None
    assert sql_store.delete(Book, huge_id) is False
    assert sql_store.delete(Review, huge_id) is False
    assert sql_store.list(Book) == [book]
    assert sql_store.read_errors == {}


def test_store_is_usable_from_worker_threads(sql_store):
    errors = []

    def _worker(n):
        try:
            for i in range(5):
                sql_store.insert(Review, {"book_id": 1, "user_id": n, "rating": 4, "content": f"thread {n} review {i}"})
        except Exception as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)

    threads = [threading.Thread(target=_worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert [r.id for r in sql_store.list(Review)] == list(range(1, 21))


def test_reset_engine_picks_up_a_new_database_url(sql_store, tmp_path, monkeypatch):
    sql_store.insert(Book, {"title": "T", "author": "A"})
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'other.db'}")
    db_session.reset_engine()
    get_settings.cache_clear()
    assert db_session.get_engine().url.database.endswith("other.db")
