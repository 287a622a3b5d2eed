"""Pydantic schemas for the local session."""

from datetime import datetime

from pydantic import EmailStr, Field

from promotor.shared.schemas import BaseSchema


class LoginRequest(BaseSchema):
    """Login form.

    The password is checked for length only and never stored.
    """

    email: EmailStr = Field(
        ...,
        description="Login e-mail",
        examples=["admin@promotora.es"],
    )
    password: str = Field(
        ...,
        max_length=128,
        description="Password (at least 4 characters)",
    )
    name: str | None = Field(
        default=None,
        max_length=100,
        description="Company or user name (``Admin`` when omitted)",
    )


class UserProfileResponse(BaseSchema):
    """Current session profile."""

    email: str
    name: str
    role: str
    last_login: datetime
