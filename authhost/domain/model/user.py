"""User aggregate root.

Users sign in with a username/password (form, HTTP Basic, HTTP Digest) or
through any number of linked external identity providers.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import Field

from authhost.domain.model.common import DomainModel
from authhost.domain.value import RoleName, UserId, Username


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(DomainModel):
    """User aggregate root.

    ``username`` is only set for credential users and is unique among them.
    ``password_hash`` holds a PBKDF2 hash and ``digest_ha1_hash`` the HTTP
    Digest HA1 (MD5 of ``username:realm:password``).
    """

    id: UserId
    username: Optional[Username] = None
    email: Optional[str] = None
    display_name: Optional[str] = None
    password_hash: Optional[str] = None
    digest_ha1_hash: Optional[str] = None
    profile: dict[str, Any] = Field(default_factory=dict)
    roles: frozenset[RoleName] = frozenset()
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def has_credentials(self) -> bool:
        """True if the user can sign in with a password."""
        return self.username is not None and self.password_hash is not None

    def has_role(self, role: RoleName) -> bool:
        return role in self.roles
