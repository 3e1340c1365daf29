"""
NoteStash Backend: User Schemas
================================

What:  Request bodies for registration, login and password change; the
       public user shape; and the internal user record (with hash) that
       services pass around.

Validation rules enforced here (before anything reaches the store):
    - email: surrounding whitespace stripped on every request body; on
      registration it must also be a syntactically valid address
      (email-validator, no DNS lookups). The address is stored as typed, so
      matching stays case-sensitive.
    - password / new password: at least 6 characters
"""

from datetime import datetime
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, field_validator

from notestash.schemas.common import CamelModel

MIN_PASSWORD_LENGTH = 6


def _normalize_email(value: str) -> str:
    return value.strip()


def _check_email(value: str) -> str:
    value = _normalize_email(value)
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"Enter a valid email address: {e}") from e
    # Keep the caller's spelling: the stored address is the lookup key
    return value


class UserCreate(CamelModel):
    """Body of POST /api/auth/register."""
    email: str = Field(min_length=3, max_length=320, description="Account email (case-sensitive)")
    password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=128)

    @field_validator("email")
    @classmethod
    def check_email_syntax(cls, v: str) -> str:
        return _check_email(v)


class LoginRequest(CamelModel):
    """Body of POST /api/auth/login."""
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = _normalize_email(v)
        if not v:
            raise ValueError("Email is required")
        return v


class PasswordUpdate(CamelModel):
    """Body of PUT /api/auth/password. The account comes from the caller identity."""
    new_password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=128)


class UserResponse(CamelModel):
    """Public user shape: never includes the password hash."""
    id: str = Field(description="User identifier (UUID hex)")
    email: str
    created_at: datetime


class LoginResponse(CamelModel):
    message: str = "Login successful"
    user: UserResponse


class RegisterResponse(CamelModel):
    message: str = "User registered successfully"
    user: UserResponse


class UserRecord(BaseModel):
    """Internal user record as stored at (USER#<id>, PROFILE)."""
    id: str
    email: str
    password_hash: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    def to_response(self) -> UserResponse:
        return UserResponse(id=self.id, email=self.email, created_at=self.created_at)
