"""Session helpers (issue tokens, cookies, validation)."""
from __future__ import annotations

import secrets
import threading
import time
from typing import Dict, Optional, Tuple

from fastapi import Request, Response

from bookreview.core.config import Settings, get_settings

SESSION_COOKIE_NAME = "session"


class SessionService:
    """Process-local session tokens mapped to user ids, with a TTL."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self._sessions: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def _now(self) -> float:
        return time.time()

    def issue(self, user_id: int) -> str:
        token = secrets.token_urlsafe(32)
        expires_at = self._now() + self.settings.session_ttl_seconds
        with self._lock:
            self._prune()
            self._sessions[token] = (user_id, expires_at)
        return token

    def user_id_for(self, token: Optional[str]) -> Optional[int]:
        if not token:
            return None
        with self._lock:
            entry = self._sessions.get(token)
            if not entry:
                return None
            user_id, expires_at = entry
            if expires_at < self._now():
                del self._sessions[token]
                return None
            return user_id

    def revoke(self, token: Optional[str]) -> None:
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def _prune(self) -> None:
        now = self._now()
        expired = [token for token, (_, expires_at) in self._sessions.items() if expires_at < now]
        for token in expired:
            del self._sessions[token]

    # -------------------------- cookies --------------------------
    def set_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            SESSION_COOKIE_NAME,
            token,
            httponly=True,
            secure=self.settings.app_env == "prod",
            samesite="strict",
            max_age=self.settings.session_ttl_seconds,
            path="/",
        )

    @staticmethod
    def clear_cookie(response: Response) -> None:
        response.delete_cookie(SESSION_COOKIE_NAME, path="/")

    @staticmethod
    def token_from(request: Request) -> Optional[str]:
        return request.cookies.get(SESSION_COOKIE_NAME)
