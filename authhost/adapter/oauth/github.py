"""GitHub OAuth client."""

from typing import Any

from authhost.domain.value.types import AuthProvider, ProfileClaims

from .base import OAuth2Client, text_or_none


class GitHubOAuthClient(OAuth2Client):
    """GitHub OAuth app login.

    GitHub reports a bad or expired code with a 200 response carrying an
    ``error`` field, which the base client treats as a refusal.
    """

    provider = AuthProvider.GITHUB
    authorize_url = "https://github.com/login/oauth/authorize"
    token_url = "https://github.com/login/oauth/access_token"
    user_info_url = "https://api.github.com/user"
    default_scope = "read:user user:email"

    def _profile_request(self, token_payload: dict[str, Any]) -> dict[str, Any]:
        request = super()._profile_request(token_payload)
        request["headers"]["Accept"] = "application/vnd.github+json"
        return request

    def _parse_claims(
        self, profile: dict[str, Any], token_payload: dict[str, Any]
    ) -> ProfileClaims:
        return ProfileClaims(
            username=text_or_none(profile.get("login")),
            email=text_or_none(profile.get("email")),
            display_name=text_or_none(profile.get("name")),
            avatar_url=text_or_none(profile.get("avatar_url")),
            extra={
                key: profile[key]
                for key in ("html_url", "company", "location")
                if profile.get(key)
            },
        )
