"""Facebook OAuth 2.0 client (Graph API)."""

from typing import Any

from authhost.domain.value.types import AuthProvider, ProfileClaims

from .base import OAuth2Client, text_or_none

GRAPH_API_VERSION = "v19.0"


class FacebookOAuthClient(OAuth2Client):
    """Facebook login via the Graph API."""

    provider = AuthProvider.FACEBOOK
    authorize_url = f"https://www.facebook.com/{GRAPH_API_VERSION}/dialog/oauth"
    token_url = f"https://graph.facebook.com/{GRAPH_API_VERSION}/oauth/access_token"
    user_info_url = f"https://graph.facebook.com/{GRAPH_API_VERSION}/me"
    default_scope = "email public_profile"
    token_method = "GET"

    def _profile_request(self, token_payload: dict[str, Any]) -> dict[str, Any]:
        request = super()._profile_request(token_payload)
        request["params"] = {"fields": "id,name,email,picture.type(large)"}
        return request

    def _parse_claims(
        self, profile: dict[str, Any], token_payload: dict[str, Any]
    ) -> ProfileClaims:
        picture = ((profile.get("picture") or {}).get("data") or {}).get("url")
        return ProfileClaims(
            email=text_or_none(profile.get("email")),
            display_name=text_or_none(profile.get("name")),
            avatar_url=text_or_none(picture),
        )
