"""Repository interfaces for the authhost domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from authhost.domain.repository.login_attempt import LoginAttemptRepository
from authhost.domain.repository.session import SessionRepository
from authhost.domain.repository.user import UserRepository

__all__ = [
    "UserRepository",
    "SessionRepository",
    "LoginAttemptRepository",
]
