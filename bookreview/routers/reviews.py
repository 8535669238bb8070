from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from bookreview.domain.entities import User
from bookreview.domain.schemas import ReviewPayload
from bookreview.routers.deps import get_review_service, require_user
from bookreview.services.book_service import BookNotFoundError
from bookreview.services.review_service import ReviewNotFoundError, ReviewPermissionError

router = APIRouter(prefix="/api", tags=["reviews"])


@router.get("/books/{book_id}/reviews")
def book_reviews(book_id: int, request: Request):
    return [r.to_record() for r in get_review_service(request).for_book(book_id)]


@router.post("/books/{book_id}/reviews", status_code=201)
def create_review(book_id: int, payload: ReviewPayload, request: Request, user: User = Depends(require_user)):
    try:
        return get_review_service(request).create_review(book_id, payload.changes(), user.id).to_record()
    except BookNotFoundError:
        raise HTTPException(404, "Book not found")


@router.get("/reviews/{review_id}")
def get_review(review_id: int, request: Request):
    try:
        return get_review_service(request).get_review(review_id).to_record()
    except ReviewNotFoundError:
        raise HTTPException(404, "Review not found")


@router.put("/reviews/{review_id}")
def update_review(review_id: int, payload: ReviewPayload, request: Request, user: User = Depends(require_user)):
    try:
        return get_review_service(request).update_review(review_id, payload.changes(), user.id).to_record()
    except ReviewNotFoundError:
        raise HTTPException(404, "Review not found")
    except ReviewPermissionError:
        raise HTTPException(403, "Not authorized to update this review")


@router.delete("/reviews/{review_id}", status_code=204)
def delete_review(review_id: int, request: Request, user: User = Depends(require_user)):
    try:
        get_review_service(request).delete_review(review_id, user.id)
    except ReviewNotFoundError:
        raise HTTPException(404, "Review not found")
    except ReviewPermissionError:
        raise HTTPException(403, "Not authorized to delete this review")
    return Response(status_code=204)


@router.get("/users/{user_id}/reviews")
def user_reviews(user_id: int, request: Request):
    return [r.to_record() for r in get_review_service(request).for_user(user_id)]
