from dataclasses import dataclass
from uuid import UUID

import jwt
from fastapi import Request

from paytrack.core.errors import AuthenticationError
from paytrack.core.security import decode_access_token


@dataclass(frozen=True)
class CurrentUser:
    """Caller identity resolved from the bearer token."""

    id: UUID
    email: str
    role: str


def get_current_user(request: Request) -> CurrentUser:
    """Resolve the ``Authorization: Bearer <token>`` header into a CurrentUser.

    Verification is stateless: the user record is not re-read.
    """
    auth_header = request.headers.get("Authorization", "")
    token = auth_header[7:].strip() if auth_header.startswith("Bearer ") else ""
    if not token:
        raise AuthenticationError("No token provided")

    try:
        payload = decode_access_token(token)
        return CurrentUser(
            id=UUID(str(payload["sub"])),
            email=str(payload["email"]),
            role=str(payload["role"]),
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired") from None
    except (jwt.InvalidTokenError, ValueError):
        raise AuthenticationError("Invalid token") from None
