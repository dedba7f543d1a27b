"""Authentication use cases."""

from .authenticate import AuthenticateUseCase
from .digest_challenge import DigestChallengeUseCase
from .get_current_user import GetCurrentUserUseCase
from .logout import LogoutUseCase, RefreshSessionUseCase
from .start_login import StartLoginUseCase

__all__ = [
    "AuthenticateUseCase",
    "DigestChallengeUseCase",
    "GetCurrentUserUseCase",
    "LogoutUseCase",
    "RefreshSessionUseCase",
    "StartLoginUseCase",
]
