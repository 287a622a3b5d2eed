"""Users module: local session profile."""

from .models import UserProfile
from .schemas import LoginRequest, UserProfileResponse
from .service import UserService

__all__ = [
    "LoginRequest",
    "UserProfile",
    "UserProfileResponse",
    "UserService",
]
