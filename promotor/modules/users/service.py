"""
Local session service.

Keeps a single profile for whoever uses this install. This is a
convenience login, not authentication: nothing is protected by it.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from promotor.core.exceptions import InvalidInputError, SessionNotFoundError
from promotor.shared.mixins import utcnow

from .models import UserProfile
from .schemas import LoginRequest

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 4
DEFAULT_NAME = "Admin"
DEFAULT_ROLE = "admin"


class UserService:
    """
    Session profile service.

    Example:
        service = UserService(session)
        profile = await service.login(LoginRequest(email="a@b.es", password="1234"))
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize the service.

        Args:
            session: Async SQLAlchemy session
        """
        self._session = session

    async def login(self, data: LoginRequest) -> UserProfile:
        """
        Start a session, replacing any previous profile.

        Raises:
            InvalidInputError: Password shorter than four characters
        """
        if len(data.password) < MIN_PASSWORD_LENGTH:
            raise InvalidInputError(
                "Por favor, introduce un correo válido y una contraseña de al menos 4 caracteres.",
                field="password",
            )

        await self._session.execute(delete(UserProfile))

        profile = UserProfile(
            email=str(data.email),
            name=(data.name or "").strip() or DEFAULT_NAME,
            role=DEFAULT_ROLE,
            last_login=utcnow(),
        )
        self._session.add(profile)
        await self._session.flush()

        logger.info("Session started for %s", profile.email)
        return profile

    async def current(self) -> UserProfile:
        """
        Get the active profile.

        Raises:
            SessionNotFoundError: Nobody is logged in
        """
        result = await self._session.execute(select(UserProfile).limit(1))
        profile = result.scalar_one_or_none()
        if profile is None:
            raise SessionNotFoundError()
        return profile

    async def logout(self) -> None:
        """End the session. Logging out twice is harmless."""
        await self._session.execute(delete(UserProfile))
        await self._session.flush()
        logger.info("Session closed")
