"""
Record store contract shared by every persistence backend.

Routers and services only see ``RecordStore``: six operations generic over
the entity kind (``User``, ``Book``, ``Review``), passed as the class::

    book = store.insert(Book, {"title": "Clean Code", "author": "Robert C. Martin"})
    store.find_by(Book, contains_ci("title", "clean"))  # -> [book]
    store.delete(Book, book.id)                          # reviews go with it

``WholeCollectionStore`` implements the contract for media that read and
rewrite an entire collection per mutation (JSON files, memory). Mutations on a
collection are serialized by a per-collection lock; reads never take it.
"""
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from contextlib import ExitStack, contextmanager
from dataclasses import replace
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, TypeVar

from bookreview.core.logging import get_logger
from bookreview.domain.entities import ENTITY_KINDS, STORE_MANAGED, Book, Entity, Review, utcnow

E = TypeVar("E", bound=Entity)
Predicate = Callable[[Any], bool]

logger = get_logger(__name__)


class PersistenceError(Exception):
    """A collection could not be written, or read back for a mutation."""


class CorruptCollectionError(PersistenceError):
    """The persisted collection exists but cannot be parsed. It is never overwritten."""


def contains_ci(attr: str, needle: str) -> Predicate:
    """Case-insensitive substring match on ``attr``; ``None`` values never match."""
    lowered = (needle or "").lower()

    def _match(entity: Any) -> bool:
        value = getattr(entity, attr, None)
        return value is not None and lowered in str(value).lower()

    return _match


def equals(attr: str, value: Any) -> Predicate:
    return lambda entity: getattr(entity, attr, None) == value


def any_of(*predicates: Predicate) -> Predicate:
    return lambda entity: any(p(entity) for p in predicates)


def next_id(records: List[Entity]) -> int:
    return max((r.id for r in records), default=0) + 1


def caller_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k not in STORE_MANAGED}


class RecordStore(ABC):
    """Durable CRUD over users, books and reviews."""

    backend = "abstract"

    def __init__(self) -> None:
        self._locks = {kind: threading.RLock() for kind in ENTITY_KINDS}
        # collection name -> last read failure; cleared by the next good read
        self.read_errors: Dict[str, str] = {}

    # -------------------------- locking --------------------------
    @contextmanager
    def locked(self, *kinds: type[Entity]) -> Iterator[None]:
        """Hold the locks of ``kinds``, always acquired in ENTITY_KINDS order."""
        with ExitStack() as stack:
            for kind in ENTITY_KINDS:
                if kind in kinds:
                    stack.enter_context(self._locks[kind])
            yield

    # -------------------------- read failure channel --------------------------
    def _note_read_error(self, kind: type[Entity], exc: Exception) -> None:
        self.read_errors[kind.collection] = str(exc)
        logger.warning("read of %s failed on %s backend, serving empty collection: %s", kind.collection, self.backend, exc)

    def _clear_read_error(self, kind: type[Entity]) -> None:
        self.read_errors.pop(kind.collection, None)

    def health(self) -> Dict[str, Any]:
        return {
            "status": "degraded" if self.read_errors else "ok",
            "backend": self.backend,
            "read_errors": dict(self.read_errors),
        }

    # -------------------------- contract --------------------------
    @abstractmethod
    def list(self, kind: type[E]) -> List[E]:
        """Whole collection in insertion order; empty when unreadable."""

    @abstractmethod
    def get(self, kind: type[E], entity_id: int) -> Optional[E]:
        """Exact id lookup; ``None`` when absent or unreadable."""

    def find_by(self, kind: type[E], predicate: Predicate) -> List[E]:
        """Linear scan preserving storage order."""
        return [entity for entity in self.list(kind) if predicate(entity)]

    @abstractmethod
    def insert(self, kind: type[E], fields: Mapping[str, Any]) -> E:
        """Assign ``max(id) + 1`` (and ``created_at``), persist, return the stored entity."""

    @abstractmethod
    def update(self, kind: type[E], entity_id: int, fields: Mapping[str, Any]) -> Optional[E]:
        """Shallow merge over the stored record; ``id``/``created_at`` never change."""

    @abstractmethod
    def delete(self, kind: type[Entity], entity_id: int) -> bool:
        """Hard delete; deleting a Book also deletes its Reviews."""


class WholeCollectionStore(RecordStore):
    """Read whole collection -> mutate in memory -> write whole collection."""

    @abstractmethod
    def _load(self, kind: type[E]) -> List[E]:
        """Full collection; raise CorruptCollectionError when it cannot be parsed."""

    @abstractmethod
    def _save(self, kind: type[E], records: List[E]) -> None:
        """Replace the full collection; raise PersistenceError on failure."""

    def _read(self, kind: type[E]) -> List[E]:
        try:
            records = self._load(kind)
        except PersistenceError as exc:
            self._note_read_error(kind, exc)
            return []
        self._clear_read_error(kind)
        return records

    def list(self, kind: type[E]) -> List[E]:
        return list(self._read(kind))

    def get(self, kind: type[E], entity_id: int) -> Optional[E]:
        return next((r for r in self._read(kind) if r.id == entity_id), None)

    def insert(self, kind: type[E], fields: Mapping[str, Any]) -> E:
        values = caller_fields(fields)
        with self.locked(kind):
            records = self._load(kind)
            if kind.timestamped:
                values["created_at"] = utcnow()
            entity = kind(id=next_id(records), **values)
            self._save(kind, records + [entity])
        return entity

    def update(self, kind: type[E], entity_id: int, fields: Mapping[str, Any]) -> Optional[E]:
        changes = caller_fields(fields)
        with self.locked(kind):
            records = self._load(kind)
            for index, current in enumerate(records):
                if current.id != entity_id:
                    continue
                merged = replace(current, **changes)
                records[index] = merged
                self._save(kind, records)
                return merged
        return None

    def delete(self, kind: type[Entity], entity_id: int) -> bool:
        if kind is Book:
            return self._delete_book(entity_id)
        with self.locked(kind):
            records = self._load(kind)
            kept = [r for r in records if r.id != entity_id]
            if len(kept) == len(records):
                return False
            self._save(kind, kept)
        return True

    def _delete_book(self, book_id: int) -> bool:
        with self.locked(Book, Review):
            books = self._load(Book)
            kept_books = [b for b in books if b.id != book_id]
            if len(kept_books) == len(books):
                return False
            reviews = self._load(Review)
            kept_reviews = [r for r in reviews if r.book_id != book_id]
            # Reviews first: a failed book write leaves the book in place and the delete retryable.
            if len(kept_reviews) != len(reviews):
                self._save(Review, kept_reviews)
            self._save(Book, kept_books)
        logger.info("deleted book %s with %s review(s)", book_id, len(reviews) - len(kept_reviews))
        return True
