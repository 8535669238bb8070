"""Request-scoped lookups shared by the routers (services live on ``app.state``)."""
from __future__ import annotations

from fastapi import HTTPException, Request

from bookreview.domain.entities import User
from bookreview.services.auth_service import AuthService
from bookreview.services.book_service import BookService
from bookreview.services.review_service import ReviewService
from bookreview.services.session_service import SessionService


def _state_attr(request: Request, name: str):
    svc = getattr(getattr(request.app, "state", None), name, None)
    if svc is None:
        raise RuntimeError(f"{name} not configured")
    return svc


def get_auth_service(request: Request) -> AuthService:
    return _state_attr(request, "auth_service")


def get_book_service(request: Request) -> BookService:
    return _state_attr(request, "book_service")


def get_review_service(request: Request) -> ReviewService:
    return _state_attr(request, "review_service")


def current_user(request: Request) -> User | None:
    return get_auth_service(request).current_user(SessionService.token_from(request))


def require_user(request: Request) -> User:
    user = current_user(request)
    if user is None:
        raise HTTPException(401, "Authentication required")
    return user
