"""Domain types: persisted entities and validated request payloads."""

from .entities import ENTITY_KINDS, Book, Entity, Review, User

__all__ = ["ENTITY_KINDS", "Book", "Entity", "Review", "User"]
