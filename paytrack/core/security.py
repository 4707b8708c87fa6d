"""Password hashing and session token helpers."""

import base64
import hashlib
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from paytrack.core.config import settings

PBKDF2_ITERATIONS = 100_000
SALT_LENGTH = 32


def hash_password(password: str) -> str:
    """PBKDF2-SHA256 hash with a random per-password salt, base64(salt + hash)."""
    salt = secrets.token_bytes(SALT_LENGTH)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return base64.b64encode(salt + digest).decode("utf-8")


def verify_password(password: str, stored_hash: str) -> bool:
    """Check a password against a value produced by ``hash_password``."""
    try:
        combined = base64.b64decode(stored_hash.encode("utf-8"), validate=True)
    except ValueError:
        return False
    salt, expected = combined[:SALT_LENGTH], combined[SALT_LENGTH:]
    if len(salt) != SALT_LENGTH or not expected:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return secrets.compare_digest(digest, expected)


def create_access_token(
    subject: str,
    email: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a token carrying the caller identity; expires after JWT_EXPIRE_HOURS."""
    now = datetime.now(UTC)
    payload = {
        "sub": subject,
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + (expires_delta or timedelta(hours=settings.JWT_EXPIRE_HOURS)),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate a session token.

    Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError on failure.
    """
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    for claim in ("sub", "email", "role"):
        if claim not in payload:
            raise jwt.InvalidTokenError(f"Missing claim: {claim}")
    return payload
