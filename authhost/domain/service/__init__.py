"""Domain services."""

from .auth_service import AuthService, OAuthClient
from .base import Service
from .credential_service import CredentialService
from .session_service import SessionService
from .user_service import UserService

__all__ = [
    "AuthService",
    "CredentialService",
    "OAuthClient",
    "Service",
    "SessionService",
    "UserService",
]
