"""Translation of SQLAlchemy errors into domain errors."""

from contextlib import contextmanager
from typing import Iterator

import logfire
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from authhost.domain.error import (
    DuplicateUsernameError,
    IdentityAlreadyLinkedError,
    RepositoryError,
)
from authhost.persistence.tables import UQ_EXTERNAL_IDENTITY, UQ_USERS_USERNAME


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Map unique violations by constraint name, everything else to RepositoryError."""
    try:
        yield
    except IntegrityError as e:
        detail = str(e.orig)
        if UQ_USERS_USERNAME in detail:
            raise DuplicateUsernameError() from e
        if UQ_EXTERNAL_IDENTITY in detail:
            raise IdentityAlreadyLinkedError() from e
        logfire.error("Integrity error", operation=operation, error=detail)
        raise RepositoryError(operation) from e
    except SQLAlchemyError as e:
        logfire.error("Storage error", operation=operation, error=str(e))
        raise RepositoryError(operation) from e
