"""Twitter OAuth 2.0 client.

Implements OAuth 2.0 with PKCE for Twitter authentication.
"""

import hashlib
import secrets
from base64 import urlsafe_b64encode
from typing import Any

from authhost.domain.value.types import AuthProvider, ProfileClaims

from .base import OAuth2Client, text_or_none


class TwitterOAuthClient(OAuth2Client):
    """Twitter OAuth 2.0 client with PKCE support.

    Twitter requires PKCE and client credentials sent with Basic auth.
    """

    provider = AuthProvider.TWITTER
    authorize_url = "https://twitter.com/i/oauth2/authorize"
    token_url = "https://api.twitter.com/2/oauth2/token"
    user_info_url = "https://api.twitter.com/2/users/me"
    default_scope = "tweet.read users.read offline.access"

    def _generate_pkce_pair(self) -> tuple[str, str]:
        """Generate PKCE code verifier and challenge.

        Returns:
            Tuple of (verifier, challenge)
        """
        code_verifier = urlsafe_b64encode(secrets.token_bytes(32)).decode("utf-8")
        code_verifier = code_verifier.rstrip("=")

        challenge_bytes = hashlib.sha256(code_verifier.encode("utf-8")).digest()
        code_challenge = urlsafe_b64encode(challenge_bytes).decode("utf-8")
        code_challenge = code_challenge.rstrip("=")

        return code_verifier, code_challenge

    def _begin(self, state: str) -> dict[str, str]:
        code_verifier, code_challenge = self._generate_pkce_pair()
        # Verifier is needed again for the token exchange
        self._remember(state, code_verifier)
        return {"code_challenge": code_challenge, "code_challenge_method": "S256"}

    def _token_request(self, code: str, flow_data: str) -> dict[str, Any]:
        return {
            "data": {
                "code": code,
                "grant_type": "authorization_code",
                "client_id": self.client_id,
                "redirect_uri": self.redirect_uri,
                "code_verifier": flow_data,
            },
            "auth": (self.client_id, self.client_secret),
        }

    def _profile_request(self, token_payload: dict[str, Any]) -> dict[str, Any]:
        request = super()._profile_request(token_payload)
        request["params"] = {"user.fields": "id,name,username,profile_image_url"}
        return request

    def _external_id(
        self, profile: dict[str, Any], token_payload: dict[str, Any]
    ) -> str | None:
        return text_or_none((profile.get("data") or {}).get("id"))

    def _parse_claims(
        self, profile: dict[str, Any], token_payload: dict[str, Any]
    ) -> ProfileClaims:
        data = profile.get("data") or {}
        return ProfileClaims(
            username=text_or_none(data.get("username")),
            display_name=text_or_none(data.get("name")),
            avatar_url=text_or_none(data.get("profile_image_url")),
        )
