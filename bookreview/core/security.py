"""Password hashing and verification."""

from __future__ import annotations

import hashlib
import secrets

from argon2 import PasswordHasher, exceptions as argon_exc

_ph = PasswordHasher()
_PREFIX = "argon2$"


def hash_password(password: str) -> str:
    """Create an Argon2 hash with a prefix for detection."""
    hashed = _ph.hash(password)
    return f"{_PREFIX}{hashed}"


def _legacy_scrypt(password: str, salt: str) -> str:
    # Format written by the previous Node backend: "<hex digest>.<salt>", 64-byte key.
    return hashlib.scrypt(password.encode(), salt=salt.encode(), n=2**14, r=8, p=1, dklen=64).hex()


def is_legacy_hash(stored_hash: str | None) -> bool:
    return not (stored_hash or "").startswith(_PREFIX)


def verify_password(password: str, stored_hash: str | None) -> bool:
    stored = stored_hash or ""
    if not stored:
        return False
    if stored.startswith(_PREFIX):
        hashed = stored[len(_PREFIX) :]
        try:
            return _ph.verify(hashed, password)
        except (argon_exc.VerifyMismatchError, argon_exc.VerificationError, argon_exc.InvalidHashError):
            return False
    digest, sep, salt = stored.partition(".")
    if not sep or not salt:
        return False
    return secrets.compare_digest(_legacy_scrypt(password, salt), digest)
