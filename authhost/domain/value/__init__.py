"""Domain value objects for authhost."""

from authhost.domain.value.identifiers import ExternalIdentityId, SessionId, UserId
from authhost.domain.value.types import (
    ADMIN_ROLE,
    CREDENTIAL_SCHEMES,
    AuthProvider,
    DigestCredential,
    ExternalIdentityClaim,
    ProfileClaims,
    ProviderTokens,
    RoleName,
    SessionOptions,
    SessionStatus,
    Username,
)

__all__ = [
    # Identifiers
    "UserId",
    "ExternalIdentityId",
    "SessionId",
    # Types
    "ADMIN_ROLE",
    "AuthProvider",
    "DigestCredential",
    "CREDENTIAL_SCHEMES",
    "ExternalIdentityClaim",
    "ProfileClaims",
    "ProviderTokens",
    "RoleName",
    "SessionOptions",
    "SessionStatus",
    "Username",
]
