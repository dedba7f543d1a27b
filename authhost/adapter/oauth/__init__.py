"""OAuth 2.0 clients for external identity providers."""

from authhost.domain.value.types import AuthProvider

from .base import OAuth2Client
from .facebook import FacebookOAuthClient
from .github import GitHubOAuthClient
from .google import GoogleOAuthClient
from .mock import MockOAuthClient
from .twitter import TwitterOAuthClient
from .vk import VKOAuthClient
from .yandex import YandexOAuthClient

OAUTH_CLIENT_CLASSES: dict[AuthProvider, type[OAuth2Client]] = {
    AuthProvider.TWITTER: TwitterOAuthClient,
    AuthProvider.FACEBOOK: FacebookOAuthClient,
    AuthProvider.GITHUB: GitHubOAuthClient,
    AuthProvider.GOOGLE: GoogleOAuthClient,
    AuthProvider.YANDEX: YandexOAuthClient,
    AuthProvider.VK: VKOAuthClient,
}

__all__ = [
    "OAUTH_CLIENT_CLASSES",
    "FacebookOAuthClient",
    "GitHubOAuthClient",
    "GoogleOAuthClient",
    "MockOAuthClient",
    "OAuth2Client",
    "TwitterOAuthClient",
    "VKOAuthClient",
    "YandexOAuthClient",
]
