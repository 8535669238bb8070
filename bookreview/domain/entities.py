"""Entity types kept by the record store and their persisted layout.

Entities are frozen dataclasses with snake_case attributes. On disk every
collection is an array of objects with camelCase keys and ISO-8601
timestamps, the layout the previous Node backend wrote into ``data/``:

    {"id": 1, "bookId": 1, "userId": 0, "rating": 5, "title": "...",
     "content": "...", "createdAt": "2024-01-01T12:00:00.000Z"}
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, ClassVar, Mapping, Optional, TypeVar

E = TypeVar("E", bound="Entity")

# Attributes the store owns; callers can never set them through insert/update.
STORE_MANAGED = frozenset({"id", "created_at"})


def utcnow() -> datetime:
    """Current UTC time at the millisecond precision the JSON layout keeps."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime:
    """Accept ``...Z``, offset and naive ISO strings; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class Entity:
    """Shared persisted-layout helpers for the three entity kinds."""

    collection: ClassVar[str]
    timestamped: ClassVar[bool] = False
    # integer attributes; None is only accepted where the field is optional
    int_fields: ClassVar[tuple[str, ...]] = ("id",)

    id: int

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))  # type: ignore[arg-type]

    @classmethod
    def _optional(cls, name: str) -> bool:
        return any(f.name == name and f.default is None for f in fields(cls))  # type: ignore[arg-type]

    @classmethod
    def from_record(cls: type[E], record: Mapping[str, Any]) -> E:
        """Build an entity from one persisted object; unknown keys are ignored.

        Raises ValueError when the object is not a mapping, misses a required
        key (``createdAt`` included) or holds a non-integer id or reference,
        so the caller can treat the collection as corrupt.
        """
        if not isinstance(record, Mapping):
            raise ValueError(f"{cls.collection}: expected an object, got {type(record).__name__}")
        values: dict[str, Any] = {}
        for f in fields(cls):  # type: ignore[arg-type]
            key = _camel(f.name)
            if key in record:
                values[f.name] = record[key]
            elif f.name in record:
                values[f.name] = record[f.name]
        if cls.timestamped:
            if values.get("created_at") is None:
                raise ValueError(f"{cls.collection}: record without createdAt {dict(record)!r}")
            values["created_at"] = parse_timestamp(values["created_at"])
        for name in cls.int_fields:
            if name not in values:
                continue
            value = values[name]
            if value is None and cls._optional(name):
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{cls.collection}: {_camel(name)} must be an integer, got {value!r}")
        try:
            return cls(**values)
        except TypeError as exc:
            raise ValueError(f"{cls.collection}: malformed record {dict(record)!r}") from exc

    def to_record(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if isinstance(value, datetime):
                value = format_timestamp(value)
            out[_camel(f.name)] = value
        return out


@dataclass(frozen=True)
class User(Entity):
    collection: ClassVar[str] = "users"

    id: int
    username: str
    password: str
    full_name: Optional[str] = None
    email: Optional[str] = None

    def to_public(self) -> dict[str, Any]:
        """Persisted layout without the credential."""
        record = self.to_record()
        record.pop("password", None)
        return record


@dataclass(frozen=True)
class Book(Entity):
    collection: ClassVar[str] = "books"
    timestamped: ClassVar[bool] = True
    int_fields: ClassVar[tuple[str, ...]] = ("id", "publication_year", "added_by")

    id: int
    title: str
    author: str
    isbn: Optional[str] = None
    description: Optional[str] = None
    publication_year: Optional[int] = None
    added_by: Optional[int] = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class Review(Entity):
    collection: ClassVar[str] = "reviews"
    timestamped: ClassVar[bool] = True
    int_fields: ClassVar[tuple[str, ...]] = ("id", "book_id", "user_id", "rating")

    id: int
    book_id: int
    user_id: int
    rating: int
    content: str
    title: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)


# Fixed order used for lock acquisition and health reports.
ENTITY_KINDS: tuple[type[Entity], ...] = (User, Book, Review)
