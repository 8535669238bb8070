"""Review use cases. Only the author of a review may change or remove it."""

from __future__ import annotations

from typing import Any, List, Mapping

from bookreview.domain.entities import Book, Review
from bookreview.repositories.base import RecordStore, equals
from bookreview.services.book_service import BookNotFoundError


class ReviewError(Exception):
    """Base exception for review workflow."""


class ReviewNotFoundError(ReviewError):
    """Raised when the review id does not exist."""


class ReviewPermissionError(ReviewError):
    """Raised when the requester is not the review author."""


class ReviewService:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def for_book(self, book_id: int) -> List[Review]:
        return self.store.find_by(Review, equals("book_id", book_id))

    def for_user(self, user_id: int) -> List[Review]:
        return self.store.find_by(Review, equals("user_id", user_id))

    def get_review(self, review_id: int) -> Review:
        review = self.store.get(Review, review_id)
        if review is None:
            raise ReviewNotFoundError(f"Review {review_id} not found")
        return review

    def create_review(self, book_id: int, fields: Mapping[str, Any], requester_id: int) -> Review:
        # a concurrent cascade delete must not slip in between check and insert
        with self.store.locked(Book, Review):
            if self.store.get(Book, book_id) is None:
                raise BookNotFoundError(f"Book {book_id} not found")
            return self.store.insert(Review, {**fields, "book_id": book_id, "user_id": requester_id})

    def _authored(self, review_id: int, requester_id: int) -> Review:
        review = self.get_review(review_id)
        if review.user_id != requester_id:
            raise ReviewPermissionError("Not authorized to modify this review")
        return review

    def update_review(self, review_id: int, fields: Mapping[str, Any], requester_id: int) -> Review:
        self._authored(review_id, requester_id)
        # a review never moves to another book or author
        changes = {k: v for k, v in fields.items() if k not in ("book_id", "user_id")}
        updated = self.store.update(Review, review_id, changes)
        if updated is None:
            raise ReviewNotFoundError(f"Review {review_id} not found")
        return updated

    def delete_review(self, review_id: int, requester_id: int) -> None:
        self._authored(review_id, requester_id)
        if not self.store.delete(Review, review_id):
            raise ReviewNotFoundError(f"Review {review_id} not found")
