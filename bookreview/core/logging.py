"""Application logging helpers.

All modules log through children of the ``bookreview`` logger; the parent
gets a single stream handler and the level configured by ``LOG_LEVEL``.
"""
from __future__ import annotations

import logging
import os
import threading

ROOT_LOGGER = "bookreview"

_LOCK = threading.Lock()
_configured = False


def _configure_root() -> None:
    global _configured
    with _LOCK:
        if _configured:
            return
        root = logging.getLogger(ROOT_LOGGER)
        level = getattr(logging, (os.getenv("LOG_LEVEL") or "INFO").strip().upper(), logging.INFO)
        root.setLevel(level)
        if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("[bookreview] %(asctime)s %(levelname)s %(name)s %(message)s"))
            root.addHandler(handler)
        _configured = True


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Return ``name`` as a logger below ``bookreview`` (``__name__`` works as-is)."""
    _configure_root()
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


__all__ = ["get_logger", "ROOT_LOGGER"]
