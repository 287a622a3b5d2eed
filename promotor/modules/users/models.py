"""SQLAlchemy model for the local session profile."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from promotor.core.database import Base
from promotor.shared.mixins import TimestampMixin, UUIDMixin


class UserProfile(UUIDMixin, TimestampMixin, Base):
    """
    Profile of whoever is using the local install.

    At most one row exists; logging in replaces it. No password is kept.

    Attributes:
        email: Login e-mail
        name: Display name
        role: Always ``admin``
        last_login: Time of the last login
    """

    __tablename__ = "user_profiles"

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="Admin")
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="admin")
    last_login: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
