"""Yandex ID OAuth client."""

from typing import Any

from authhost.domain.value.types import AuthProvider, ProfileClaims

from .base import OAuth2Client, text_or_none

AVATAR_URL = "https://avatars.yandex.net/get-yapic/{avatar_id}/islands-200"


class YandexOAuthClient(OAuth2Client):
    """Yandex ID login. The user info API wants an ``OAuth`` auth scheme."""

    provider = AuthProvider.YANDEX
    authorize_url = "https://oauth.yandex.ru/authorize"
    token_url = "https://oauth.yandex.ru/token"
    user_info_url = "https://login.yandex.ru/info"

    def _profile_request(self, token_payload: dict[str, Any]) -> dict[str, Any]:
        return {
            "headers": {"Authorization": f"OAuth {token_payload['access_token']}"},
            "params": {"format": "json"},
        }

    def _parse_claims(
        self, profile: dict[str, Any], token_payload: dict[str, Any]
    ) -> ProfileClaims:
        avatar_id = profile.get("default_avatar_id")
        is_empty = profile.get("is_avatar_empty", False)
        return ProfileClaims(
            username=text_or_none(profile.get("login")),
            email=text_or_none(profile.get("default_email")),
            display_name=text_or_none(
                profile.get("display_name") or profile.get("real_name")
            ),
            avatar_url=(
                AVATAR_URL.format(avatar_id=avatar_id)
                if avatar_id and not is_empty
                else None
            ),
        )
