from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from paytrack.models.user import UserRole
from paytrack.schemas.common import CamelModel, UtcDatetime


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.strip().lower()


class UserResponse(CamelModel):
    id: UUID
    name: str
    email: str
    role: UserRole
    created_at: UtcDatetime


class AuthResponse(CamelModel):
    token: str
    user: UserResponse
