"""PostgreSQL repository implementations."""

from authhost.persistence.repository.login_attempt import PostgresLoginAttemptRepository
from authhost.persistence.repository.session import PostgresSessionRepository
from authhost.persistence.repository.user import PostgresUserRepository

__all__ = [
    "PostgresLoginAttemptRepository",
    "PostgresSessionRepository",
    "PostgresUserRepository",
]
