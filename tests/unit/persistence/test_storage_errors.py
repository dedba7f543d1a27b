"""Unit tests for storage error translation and row mappers."""

from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from authhost.domain.error import (
    DuplicateUsernameError,
    IdentityAlreadyLinkedError,
    RepositoryError,
)
from authhost.domain.model import Session, User
from authhost.domain.value import ADMIN_ROLE, AuthProvider, SessionId, UserId, Username
from authhost.persistence.mappers import (
    row_to_session,
    row_to_user,
    session_to_dict,
    user_to_dict,
)
from authhost.persistence.repository.errors import storage_errors
from authhost.persistence.tables import UQ_EXTERNAL_IDENTITY, UQ_USERS_USERNAME
from tests.conftest import T0


def _integrity_error(constraint: str) -> IntegrityError:
    return IntegrityError(
        "INSERT ...",
        {},
        Exception(f'duplicate key value violates unique constraint "{constraint}"'),
    )


class TestStorageErrors:
    """Tests for storage_errors()."""

    @pytest.mark.parametrize(
        "constraint, expected",
        [
            (UQ_USERS_USERNAME, DuplicateUsernameError),
            (UQ_EXTERNAL_IDENTITY, IdentityAlreadyLinkedError),
            ("some_other_constraint", RepositoryError),
        ],
    )
    def test_integrity_errors_by_constraint(self, constraint, expected):
        with pytest.raises(expected):
            with storage_errors("create_user"):
                raise _integrity_error(constraint)

    def test_other_errors_hide_engine_detail(self):
        """Should raise RepositoryError without the driver message."""
        with pytest.raises(RepositoryError) as exc_info:
            with storage_errors("find_by_id"):
                raise OperationalError("SELECT 1", {}, Exception("password=hunter2"))

        assert "hunter2" not in str(exc_info.value)
        assert exc_info.value.operation == "find_by_id"
        assert isinstance(exc_info.value.__cause__, OperationalError)


class TestMappers:
    """Tests for row mappers."""

    def test_user_row_roundtrip_keeps_roles_out_of_the_row(self):
        user = User(
            id=UserId(uuid4()),
            username=Username("alice"),
            password_hash="hash",
            roles=frozenset({ADMIN_ROLE}),
            created_at=T0,
            updated_at=T0,
        )

        row = user_to_dict(user)

        assert "roles" not in row
        assert row["username"] == "alice"
        assert row_to_user({**row, "id": str(user.id)}, roles=["Admin"]) == user

    def test_external_user_row_has_null_username(self):
        row = user_to_dict(User(id=UserId(uuid4()), created_at=T0, updated_at=T0))

        assert row["username"] is None
        assert row_to_user(row).username is None

    def test_session_row(self):
        session = Session(
            id=SessionId("token"),
            user_id=UserId(uuid4()),
            provider=AuthProvider.DIGEST,
            created_at=T0,
            expires_at=T0 + timedelta(hours=1),
            last_seen_at=T0,
            ttl_seconds=3600,
            rolling=True,
        )

        row = session_to_dict(session)

        assert row["provider"] == "digest"
        assert row_to_session(row) == session
