"""Book review service: a file-backed record store behind a FastAPI JSON API."""

__version__ = "1.0.0"
