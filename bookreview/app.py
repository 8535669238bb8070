"""
Application factory for the book review API.

Run with ``uvicorn --factory bookreview.app:create_app`` or the
``bookreview-server`` console script.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bookreview.core.config import Settings, get_settings
from bookreview.core.logging import ROOT_LOGGER, get_logger
from bookreview.repositories import PersistenceError, RecordStore, create_store
from bookreview.repositories.seed import seed_sample_data
from bookreview.routers import auth as auth_router
from bookreview.routers import books as books_router
from bookreview.routers import reviews as reviews_router
from bookreview.services.auth_service import AuthService
from bookreview.services.book_service import BookService
from bookreview.services.review_service import ReviewService
from bookreview.services.session_service import SessionService

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None) -> FastAPI:
    """Build the app around one record store, created here unless injected."""
    settings = settings or get_settings()
    logging.getLogger(ROOT_LOGGER).setLevel(getattr(logging, settings.log_level, logging.INFO))
    store = store if store is not None else create_store(settings)

    app = FastAPI(title="Book Review API")
    app.state.settings = settings
    app.state.store = store
    app.state.session_service = SessionService(settings)
    app.state.auth_service = AuthService(store=store, sessions=app.state.session_service)
    app.state.book_service = BookService(store)
    app.state.review_service = ReviewService(store)

    if settings.seed_sample_data:
        try:
            seed_sample_data(store)
        except PersistenceError as exc:
            logger.error("sample data not seeded: %s", exc)

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'] if part != 'body')}: {err['msg']}" for err in exc.errors()
        )
        return JSONResponse(
            {"detail": f"Validation error: {problems}", "errors": jsonable_encoder(exc.errors())},
            status_code=400,
        )

    @app.exception_handler(PersistenceError)
    async def _persistence_failure(request: Request, exc: PersistenceError):
        logger.error("storage failure on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse({"detail": "Storage failure"}, status_code=500)

    @app.get("/api/health")
    def health():
        report = store.health()
        return {"status": report["status"], "backend": report["backend"], "readErrors": report["read_errors"]}

    app.include_router(auth_router.router)
    app.include_router(books_router.router)
    app.include_router(reviews_router.router)
    logger.info("app ready (env=%s, backend=%s)", settings.app_env, store.backend)
    return app


def main() -> None:
    import uvicorn

    uvicorn.run(
        "bookreview.app:create_app",
        factory=True,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    main()
