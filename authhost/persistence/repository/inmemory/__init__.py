"""In-memory repository implementations for testing."""

from .login_attempt import InMemoryLoginAttemptRepository
from .session import InMemorySessionRepository
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryLoginAttemptRepository",
    "InMemorySessionRepository",
    "InMemoryUserRepository",
]
