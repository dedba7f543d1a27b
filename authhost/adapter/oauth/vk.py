"""VK (VKontakte) OAuth client."""

from typing import Any

import httpx

from authhost.adapter.error import ProviderError
from authhost.domain.value.types import AuthProvider, ProfileClaims

from .base import OAuth2Client, text_or_none

VK_API_VERSION = "5.131"


class VKOAuthClient(OAuth2Client):
    """VK login.

    The token response already carries ``user_id`` (and ``email`` when
    granted). VK API errors come back as 200 responses with an ``error``
    object.
    """

    provider = AuthProvider.VK
    authorize_url = "https://oauth.vk.com/authorize"
    token_url = "https://oauth.vk.com/access_token"
    user_info_url = "https://api.vk.com/method/users.get"
    default_scope = "email"
    token_method = "GET"

    def _profile_request(self, token_payload: dict[str, Any]) -> dict[str, Any]:
        return {
            "params": {
                "user_ids": str(token_payload.get("user_id", "")),
                "fields": "screen_name,photo_200",
                "access_token": token_payload["access_token"],
                "v": VK_API_VERSION,
            }
        }

    async def _fetch_profile(
        self, client: httpx.AsyncClient, token_payload: dict[str, Any]
    ) -> dict[str, Any]:
        payload = await super()._fetch_profile(client, token_payload)
        if "error" in payload:
            error = payload["error"] or {}
            raise ProviderError(f"VK API error: {error.get('error_msg', 'unknown')}")
        users = payload.get("response") or []
        return users[0] if users and isinstance(users[0], dict) else {}

    def _external_id(
        self, profile: dict[str, Any], token_payload: dict[str, Any]
    ) -> str | None:
        return text_or_none(token_payload.get("user_id") or profile.get("id"))

    def _parse_claims(
        self, profile: dict[str, Any], token_payload: dict[str, Any]
    ) -> ProfileClaims:
        name = " ".join(
            part
            for part in (profile.get("first_name"), profile.get("last_name"))
            if part
        )
        return ProfileClaims(
            username=text_or_none(profile.get("screen_name")),
            email=text_or_none(token_payload.get("email")),
            display_name=text_or_none(name),
            avatar_url=text_or_none(profile.get("photo_200")),
        )
