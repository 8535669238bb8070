"""
FastAPI routers grouped by domain (auth, books, reviews).

Each module exposes an APIRouter included by ``bookreview.app.create_app``.
Routers translate service exceptions into HTTP status codes and never touch
the record store directly.
"""
