"""External identity entity.

Links an external identity provider account to a user.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import Field

from authhost.domain.model.common import DomainModel
from authhost.domain.value import AuthProvider, ExternalIdentityId, UserId


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExternalIdentity(DomainModel):
    """Provider account linked to a user.

    A user may link several providers, but a ``(provider, external_id)``
    pair belongs to at most one user.
    """

    id: ExternalIdentityId
    user_id: UserId
    provider: AuthProvider
    external_id: str  # Permanent ID on the provider
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_expires_at: Optional[datetime] = None
    claims: dict[str, Any] = Field(default_factory=dict)  # Last seen profile claims
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    last_login_at: Optional[datetime] = None
