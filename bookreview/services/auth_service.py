"""
Authentication and identity related use cases.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bookreview.core.logging import get_logger
from bookreview.core.security import hash_password, is_legacy_hash, verify_password
from bookreview.domain.entities import User
from bookreview.repositories.base import RecordStore, equals
from bookreview.services.session_service import SessionService

logger = get_logger(__name__)


class AuthError(Exception):
    """Base class for authentication-related exceptions."""


class RegistrationError(AuthError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccountExistsError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


@dataclass
class LoginSuccess:
    user: User
    session_token: str


@dataclass
class AuthService:
    """Handles registration, login, logout and session-to-user resolution."""

    store: RecordStore
    sessions: SessionService

    # -------------------------------------- helpers --------------------------------------
    def find_by_username(self, username: str) -> Optional[User]:
        matches = self.store.find_by(User, equals("username", username))
        return matches[0] if matches else None

    def current_user(self, session_token: Optional[str]) -> Optional[User]:
        """Resolve a session token; a session whose user is gone counts as anonymous."""
        user_id = self.sessions.user_id_for(session_token)
        if user_id is None:
            return None
        return self.store.get(User, user_id)

    # -------------------------------------- registration --------------------------------------
    def register(self, username: str, password: str, email: str, full_name: Optional[str] = None) -> LoginSuccess:
        raw_username = (username or "").strip()
        if not raw_username:
            raise RegistrationError("Username is required")
        if not password:
            raise RegistrationError("Password is required")
        with self.store.locked(User):
            # held across check + insert so two sign-ups cannot claim the same name
            if self.find_by_username(raw_username):
                raise AccountExistsError("Username already exists")
            user = self.store.insert(
                User,
                {
                    "username": raw_username,
                    "password": hash_password(password),
                    "full_name": full_name,
                    "email": (email or "").strip() or None,
                },
            )
        logger.info("registered user %s (%s)", user.id, user.username)
        return LoginSuccess(user=user, session_token=self.sessions.issue(user.id))

    # -------------------------------------- login --------------------------------------
    def login(self, username: str, password: str) -> LoginSuccess:
        raw_username = (username or "").strip()
        if not raw_username:
            raise InvalidCredentialsError("Invalid username or password")
        user = self.find_by_username(raw_username)
        if not user or not verify_password(password, user.password):
            raise InvalidCredentialsError("Invalid username or password")
        if is_legacy_hash(user.password):
            user = self.store.update(User, user.id, {"password": hash_password(password)}) or user
        return LoginSuccess(user=user, session_token=self.sessions.issue(user.id))

    def logout(self, session_token: Optional[str]) -> None:
        self.sessions.revoke(session_token)
