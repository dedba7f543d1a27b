"""Domain value objects for authhost.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules.
"""

import re
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import Field, field_validator

from authhost.domain.value.common import RootValueObject, ValueObject


class AuthProvider(str, Enum):
    """Authentication providers.

    The first three are credential schemes verified locally, the rest are
    external identity providers reached over OAuth.
    """

    CREDENTIALS = "credentials"
    BASIC = "basic"
    DIGEST = "digest"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    GITHUB = "github"
    GOOGLE = "google"
    YANDEX = "yandex"
    VK = "vk"

    @property
    def is_credential_scheme(self) -> bool:
        """True for providers verified against a stored credential."""
        return self in CREDENTIAL_SCHEMES


CREDENTIAL_SCHEMES = frozenset(
    {AuthProvider.CREDENTIALS, AuthProvider.BASIC, AuthProvider.DIGEST}
)


class SessionStatus(str, Enum):
    """Lifecycle state of a session. EXPIRED and REVOKED are terminal."""

    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


class Username(RootValueObject[str]):
    """Username of a credential-based user.

    Stored lowercase so lookups and the uniqueness constraint are
    case-insensitive.
    """

    @field_validator("root")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Normalize and validate username format."""
        v = v.strip().lower()
        if not re.match(r"^[a-z0-9][a-z0-9._@+-]{0,254}$", v):
            raise ValueError(
                "Username must be 1-255 characters of letters, digits or ._@+-"
            )
        return v


class RoleName(RootValueObject[str]):
    """Name of a role granting permissions."""

    @field_validator("root")
    @classmethod
    def validate_role_name(cls, v: str) -> str:
        """Validate role name is not empty and within length limits."""
        if len(v) < 1 or len(v) > 100:
            raise ValueError("Role name must be 1-100 characters")
        return v


ADMIN_ROLE = RoleName("Admin")


class ProfileClaims(ValueObject):
    """Attributes asserted about a user by an identity provider.

    Every field is optional: providers return what they have and claim
    validation happens in the orchestrator.
    """

    username: str | None = None
    email: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    def get(self, name: str) -> Any:
        """Look up a claim by name, falling back to ``extra``."""
        if name in ("username", "email", "display_name", "avatar_url"):
            return getattr(self, name)
        return self.extra.get(name)


class ProviderTokens(ValueObject):
    """Access token metadata returned by a provider token exchange."""

    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None


class ExternalIdentityClaim(ValueObject):
    """Normalized result of an external provider exchange."""

    provider: AuthProvider
    external_id: str
    claims: ProfileClaims = ProfileClaims()
    tokens: ProviderTokens | None = None


class SessionOptions(ValueObject):
    """Options for issuing a session."""

    ttl: timedelta
    rolling: bool = False

    @field_validator("ttl")
    @classmethod
    def validate_ttl(cls, v: timedelta) -> timedelta:
        """TTL must be positive."""
        if v <= timedelta(0):
            raise ValueError("Session ttl must be positive")
        return v


class DigestCredential(ValueObject):
    """Fields of an HTTP Digest ``Authorization`` header plus request method."""

    username: str
    realm: str
    nonce: str
    uri: str
    response: str
    method: str = "POST"
    qop: str | None = None
    nc: str | None = None
    cnonce: str | None = None
    opaque: str | None = None
    algorithm: str | None = None
