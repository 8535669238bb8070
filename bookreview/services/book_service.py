"""Catalogue use cases: browse, search and the owner-only book mutations."""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple

from bookreview.domain.entities import Book
from bookreview.repositories.base import RecordStore, any_of, contains_ci, equals


class BookError(Exception):
    """Base exception for catalogue workflow."""


class BookNotFoundError(BookError):
    """Raised when the book id does not exist."""


class BookPermissionError(BookError):
    """Raised when a user touches a book someone else added."""


def paginate(items: List[Any], page: int, page_size: int) -> Tuple[List[Any], int, int, int]:
    """Slice ``items``; returns (page_items, clamped_page, total, total_pages)."""
    page_size = max(1, page_size)
    total = len(items)
    total_pages = max(1, (total + page_size - 1) // page_size)
    page = min(max(1, page), total_pages)
    start = (page - 1) * page_size
    return items[start : start + page_size], page, total, total_pages


class BookService:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    # -------------------------- reads --------------------------
    def list_books(self) -> List[Book]:
        return self.store.list(Book)

    def get_book(self, book_id: int) -> Book:
        book = self.store.get(Book, book_id)
        if book is None:
            raise BookNotFoundError(f"Book {book_id} not found")
        return book

    def search(self, query: str) -> List[Book]:
        """Substring match over title, author and description."""
        return self.store.find_by(
            Book,
            any_of(contains_ci("title", query), contains_ci("author", query), contains_ci("description", query)),
        )

    def by_title(self, title: str) -> List[Book]:
        return self.store.find_by(Book, contains_ci("title", title))

    def by_author(self, author: str) -> List[Book]:
        return self.store.find_by(Book, contains_ci("author", author))

    def by_isbn(self, isbn: str) -> Optional[Book]:
        matches = self.store.find_by(Book, equals("isbn", (isbn or "").strip()))
        return matches[0] if matches else None

    # -------------------------- writes --------------------------
    def create_book(self, fields: Mapping[str, Any], requester_id: int) -> Book:
        return self.store.insert(Book, {**fields, "added_by": requester_id})

    def _owned(self, book_id: int, requester_id: int) -> Book:
        book = self.get_book(book_id)
        # books without a recorded creator (sample data) are editable by anyone signed in
        if book.added_by is not None and book.added_by != requester_id:
            raise BookPermissionError("Not authorized to modify this book")
        return book

    def update_book(self, book_id: int, fields: Mapping[str, Any], requester_id: int) -> Book:
        self._owned(book_id, requester_id)
        changes = {k: v for k, v in fields.items() if k != "added_by"}
        updated = self.store.update(Book, book_id, changes)
        if updated is None:
            raise BookNotFoundError(f"Book {book_id} not found")
        return updated

    def delete_book(self, book_id: int, requester_id: int) -> None:
        self._owned(book_id, requester_id)
        if not self.store.delete(Book, book_id):
            raise BookNotFoundError(f"Book {book_id} not found")
