"""Record store backed by SQLAlchemy tables (same contract as the JSON files)."""
from __future__ import annotations

from datetime import timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from bookreview.core.logging import get_logger
from bookreview.db.models import BookRow, ReviewRow, UserRow
from bookreview.db.session import Base, get_engine, get_session
from bookreview.domain.entities import Book, Entity, Review, User, utcnow

from .base import E, PersistenceError, RecordStore, caller_fields

logger = get_logger(__name__)

ROWS: Dict[type[Entity], Any] = {User: UserRow, Book: BookRow, Review: ReviewRow}

# Integer columns are signed 64-bit; larger ids can never be stored.
ID_MIN, ID_MAX = -(2**63), 2**63 - 1


def _storable_id(entity_id: int) -> bool:
    return ID_MIN <= entity_id <= ID_MAX


def _to_entity(kind: type[E], row: Any) -> E:
    values = {name: getattr(row, name) for name in kind.field_names()}
    created = values.get("created_at")
    if created is not None and created.tzinfo is None:
        # SQLite hands back naive datetimes; everything is stored as UTC
        values["created_at"] = created.replace(tzinfo=timezone.utc)
    return kind(**values)


class SQLRecordStore(RecordStore):
    """CRUD helpers wrapping the SQLAlchemy session."""

    backend = "sql"

    def __init__(self, *, create_schema: bool = True) -> None:
        super().__init__()
        if create_schema:
            Base.metadata.create_all(bind=get_engine())

    # -------------------------- reads --------------------------
    def list(self, kind: type[E]) -> List[E]:
        row_cls = ROWS[kind]
        try:
            with get_session() as session:
                rows = session.execute(select(row_cls).order_by(row_cls.id)).scalars().all()
                records = [_to_entity(kind, row) for row in rows]
        except SQLAlchemyError as exc:
            self._note_read_error(kind, exc)
            return []
        self._clear_read_error(kind)
        return records

    def get(self, kind: type[E], entity_id: int) -> Optional[E]:
        if not _storable_id(entity_id):
            return None
        try:
            with get_session() as session:
                row = session.get(ROWS[kind], entity_id)
                entity = _to_entity(kind, row) if row is not None else None
        except SQLAlchemyError as exc:
            self._note_read_error(kind, exc)
            return None
        self._clear_read_error(kind)
        return entity

    # -------------------------- writes --------------------------
    def insert(self, kind: type[E], fields: Mapping[str, Any]) -> E:
        row_cls = ROWS[kind]
        values = caller_fields(fields)
        with self.locked(kind):
            try:
                with get_session() as session:
                    current_max = session.execute(select(func.max(row_cls.id))).scalar()
                    if kind.timestamped:
                        values["created_at"] = utcnow()
                    entity = kind(id=(current_max or 0) + 1, **values)
                    session.add(row_cls(**{name: getattr(entity, name) for name in kind.field_names()}))
                    session.commit()
            except SQLAlchemyError as exc:
                logger.error("insert into %s failed: %s", kind.collection, exc)
                raise PersistenceError(f"could not insert into {kind.collection}: {exc}") from exc
        return entity

    def update(self, kind: type[E], entity_id: int, fields: Mapping[str, Any]) -> Optional[E]:
        changes = caller_fields(fields)
        unknown = set(changes) - set(kind.field_names())
        if unknown:
            raise TypeError(f"{kind.__name__} has no field(s) {', '.join(sorted(unknown))}")
        if not _storable_id(entity_id):
            return None
        with self.locked(kind):
            try:
                with get_session() as session:
                    row = session.get(ROWS[kind], entity_id)
                    if row is None:
                        return None
                    for name, value in changes.items():
                        setattr(row, name, value)
                    session.commit()
                    session.refresh(row)
                    return _to_entity(kind, row)
            except SQLAlchemyError as exc:
                logger.error("update of %s %s failed: %s", kind.collection, entity_id, exc)
                raise PersistenceError(f"could not update {kind.collection} {entity_id}: {exc}") from exc

    def delete(self, kind: type[Entity], entity_id: int) -> bool:
        if not _storable_id(entity_id):
            return False
        row_cls = ROWS[kind]
        kinds = (Book, Review) if kind is Book else (kind,)
        with self.locked(*kinds):
            try:
                with get_session() as session:
                    if session.get(row_cls, entity_id) is None:
                        return False
                    removed = 0
                    if kind is Book:
                        removed = session.execute(delete(ReviewRow).where(ReviewRow.book_id == entity_id)).rowcount
                    session.execute(delete(row_cls).where(row_cls.id == entity_id))
                    session.commit()
            except SQLAlchemyError as exc:
                logger.error("delete of %s %s failed: %s", kind.collection, entity_id, exc)
                raise PersistenceError(f"could not delete {kind.collection} {entity_id}: {exc}") from exc
        if kind is Book:
            logger.info("deleted book %s with %s review(s)", entity_id, removed)
        return True

    def import_entity(self, entity: Entity) -> None:
        """Copy an existing record verbatim (id and timestamp kept); used by migrations."""
        kind = type(entity)
        row_cls = ROWS[kind]
        with self.locked(kind):
            try:
                with get_session() as session:
                    session.merge(row_cls(**{name: getattr(entity, name) for name in kind.field_names()}))
                    session.commit()
            except SQLAlchemyError as exc:
                raise PersistenceError(f"could not import {kind.collection} {entity.id}: {exc}") from exc
