"""
Security primitives: password hashing, session tokens, provider-key encryption.

- Passwords are hashed with argon2id (``argon2-cffi``).
- Session cookies carry an opaque random token; only its SHA-256 digest
  is stored, so a leaked ``user_sessions`` table cannot be replayed.
- Provider API keys are encrypted at rest with Fernet using
  ``settings.ENCRYPTION_KEY``.
"""

from __future__ import annotations

import hashlib
import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from cryptography.fernet import Fernet, InvalidToken

from valet.core.config import settings

_password_hasher = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
)


class EncryptionKeyError(RuntimeError):
    """ENCRYPTION_KEY is missing or not a valid Fernet key."""


class DecryptionError(ValueError):
    """Stored ciphertext could not be decrypted with the configured key."""


# ─── Passwords ─────────────────────────────────────────
def hash_password(password: str) -> str:
    """Hash a plaintext password with argon2id."""
    return _password_hasher.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Check *password* against a stored argon2 hash."""
    try:
        return _password_hasher.verify(hashed_password, password)
    except (VerificationError, InvalidHashError):
        return False


# ─── Session tokens ────────────────────────────────────
def generate_session_token() -> str:
    """Return a new opaque, URL-safe session token."""
    return secrets.token_urlsafe(32)


def hash_session_token(token: str) -> str:
    """Digest stored in the database for a session token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


# ─── Provider key encryption ───────────────────────────
def _cipher() -> Fernet:
    if not settings.ENCRYPTION_KEY:
        raise EncryptionKeyError("ENCRYPTION_KEY environment variable is required")
    try:
        return Fernet(settings.ENCRYPTION_KEY.encode("utf-8"))
    except ValueError as exc:
        raise EncryptionKeyError("ENCRYPTION_KEY is not a valid Fernet key") from exc


def encrypt(plaintext: str) -> str:
    """Encrypt a secret for storage."""
    return _cipher().encrypt(plaintext.encode("utf-8")).decode("utf-8")


def decrypt(ciphertext: str) -> str:
    """Decrypt a secret previously produced by :func:`encrypt`."""
    try:
        return _cipher().decrypt(ciphertext.encode("utf-8")).decode("utf-8")
    except InvalidToken as exc:
        raise DecryptionError("Stored credential could not be decrypted") from exc
