"""
Catalogue endpoints under /api/books.

Static paths (search, page, isbn/author/title lookups) are declared before
``/{book_id}`` so they are never read as an id.
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from bookreview.domain.entities import Book, User
from bookreview.domain.schemas import BookPage, BookPayload
from bookreview.routers.deps import get_book_service, require_user
from bookreview.services.book_service import BookNotFoundError, BookPermissionError, paginate

router = APIRouter(prefix="/api/books", tags=["books"])


def _out(books: List[Book]) -> List[dict]:
    return [b.to_record() for b in books]


@router.get("")
def list_books(request: Request):
    return _out(get_book_service(request).list_books())


@router.get("/page")
def list_books_page(
    request: Request,
    q: Optional[str] = Query(default=None, description="Text search (title/author/description)"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=12, ge=1, le=200, alias="pageSize"),
):
    svc = get_book_service(request)
    books = svc.search(q) if (q or "").strip() else svc.list_books()
    items, page, total, total_pages = paginate(books, page, page_size)
    return BookPage(page=page, page_size=page_size, total=total, total_pages=total_pages, items=_out(items)).model_dump(
        by_alias=True
    )


@router.get("/search")
def search_books(request: Request, q: str = ""):
    if not q.strip():
        raise HTTPException(400, "Query parameter is required")
    return _out(get_book_service(request).search(q))


@router.get("/search/isbn")
def search_isbn(request: Request, q: str = ""):
    book = get_book_service(request).by_isbn(q)
    if book is None:
        raise HTTPException(404, "Book not found")
    return book.to_record()


@router.get("/search/author")
def search_author(request: Request, q: str = ""):
    return _out(get_book_service(request).by_author(q))


@router.get("/search/title")
def search_title(request: Request, q: str = ""):
    return _out(get_book_service(request).by_title(q))


@router.get("/isbn/{isbn}")
def book_by_isbn(isbn: str, request: Request):
    return search_isbn(request, isbn)


@router.get("/author/{author}")
def books_by_author(author: str, request: Request):
    return _out(get_book_service(request).by_author(author))


@router.get("/title/{title}")
def books_by_title(title: str, request: Request):
    return _out(get_book_service(request).by_title(title))


@router.post("", status_code=201)
def create_book(payload: BookPayload, request: Request, user: User = Depends(require_user)):
    return get_book_service(request).create_book(payload.changes(), user.id).to_record()


@router.get("/{book_id}")
def get_book(book_id: int, request: Request):
    try:
        return get_book_service(request).get_book(book_id).to_record()
    except BookNotFoundError:
        raise HTTPException(404, "Book not found")


@router.put("/{book_id}")
def update_book(book_id: int, payload: BookPayload, request: Request, user: User = Depends(require_user)):
    try:
        return get_book_service(request).update_book(book_id, payload.changes(), user.id).to_record()
    except BookNotFoundError:
        raise HTTPException(404, "Book not found")
    except BookPermissionError:
        raise HTTPException(403, "Not authorized to update this book")


@router.delete("/{book_id}", status_code=204)
def delete_book(book_id: int, request: Request, user: User = Depends(require_user)):
    try:
        get_book_service(request).delete_book(book_id, user.id)
    except BookNotFoundError:
        raise HTTPException(404, "Book not found")
    except BookPermissionError:
        raise HTTPException(403, "Not authorized to delete this book")
    return Response(status_code=204)
