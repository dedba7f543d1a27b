"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict, Iterable
from uuid import UUID

from authhost.domain.model import ExternalIdentity, LoginAttemptWindow, Session, User
from authhost.domain.value import (
    AuthProvider,
    ExternalIdentityId,
    RoleName,
    SessionId,
    UserId,
    Username,
)


def _uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def row_to_user(row: Dict[str, Any], roles: Iterable[str] = ()) -> User:
    """Convert database row to User domain model.

    Args:
        row: Database row as dict
        roles: Role names from ``user_roles``

    Returns:
        User domain model
    """
    return User(
        id=UserId(_uuid(row["id"])),
        username=Username(row["username"]) if row.get("username") else None,
        email=row.get("email"),
        display_name=row.get("display_name"),
        password_hash=row.get("password_hash"),
        digest_ha1_hash=row.get("digest_ha1_hash"),
        profile=row.get("profile") or {},
        roles=frozenset(RoleName(role) for role in roles),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert User domain model to database dict.

    Roles live in their own table and are not part of the row.
    """
    data = user.model_dump(exclude={"roles"})
    data["username"] = user.username.root if user.username else None
    return data


def row_to_external_identity(row: Dict[str, Any]) -> ExternalIdentity:
    """Convert database row to ExternalIdentity domain model."""
    return ExternalIdentity(
        id=ExternalIdentityId(_uuid(row["id"])),
        user_id=UserId(_uuid(row["user_id"])),
        provider=AuthProvider(row["provider"]),
        external_id=row["external_id"],
        access_token=row.get("access_token"),
        refresh_token=row.get("refresh_token"),
        token_expires_at=row.get("token_expires_at"),
        claims=row.get("claims") or {},
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        last_login_at=row.get("last_login_at"),
    )


def external_identity_to_dict(identity: ExternalIdentity) -> Dict[str, Any]:
    """Convert ExternalIdentity domain model to database dict."""
    data = identity.model_dump()
    data["provider"] = identity.provider.value
    return data


def row_to_session(row: Dict[str, Any]) -> Session:
    """Convert database row to Session domain model."""
    return Session(
        id=SessionId(row["id"]),
        user_id=UserId(_uuid(row["user_id"])),
        provider=AuthProvider(row["provider"]),
        created_at=row["created_at"],
        expires_at=row["expires_at"],
        last_seen_at=row["last_seen_at"],
        ttl_seconds=row["ttl_seconds"],
        rolling=row["rolling"],
        revoked_at=row.get("revoked_at"),
    )


def session_to_dict(session: Session) -> Dict[str, Any]:
    """Convert Session domain model to database dict."""
    data = session.model_dump()
    data["provider"] = session.provider.value
    return data


def row_to_login_attempt(row: Dict[str, Any]) -> LoginAttemptWindow:
    """Convert database row to LoginAttemptWindow domain model."""
    return LoginAttemptWindow(
        username=Username(row["username"]),
        attempts=row["attempts"],
        window_started_at=row["window_started_at"],
    )
