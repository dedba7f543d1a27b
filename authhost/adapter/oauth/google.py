"""Google OAuth 2.0 / OpenID Connect client."""

from typing import Any

from authhost.domain.value.types import AuthProvider, ProfileClaims

from .base import OAuth2Client, text_or_none


class GoogleOAuthClient(OAuth2Client):
    """Google sign-in using the OpenID Connect userinfo endpoint."""

    provider = AuthProvider.GOOGLE
    authorize_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    user_info_url = "https://openidconnect.googleapis.com/v1/userinfo"
    default_scope = "openid email profile"

    def _external_id(
        self, profile: dict[str, Any], token_payload: dict[str, Any]
    ) -> str | None:
        return text_or_none(profile.get("sub"))

    def _parse_claims(
        self, profile: dict[str, Any], token_payload: dict[str, Any]
    ) -> ProfileClaims:
        extra = {}
        if "email_verified" in profile:
            extra["email_verified"] = bool(profile["email_verified"])
        return ProfileClaims(
            email=text_or_none(profile.get("email")),
            display_name=text_or_none(profile.get("name")),
            avatar_url=text_or_none(profile.get("picture")),
            extra=extra,
        )
