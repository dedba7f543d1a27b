"""Test configuration and fixtures."""

import os

# Must be set before any Settings() is built
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("AUTH__PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("AUTH__SESSION_STORE", "memory")
os.environ.setdefault("AUTH__SESSION_RECLAIM_INTERVAL_SECONDS", "0")
os.environ.setdefault("AUTH__DIGEST_NONCE_SECRET", "test-nonce-secret")

from datetime import datetime, timezone  # noqa: E402

import logfire  # noqa: E402

from authhost.config import AuthSettings  # noqa: E402
from authhost.domain.value import DigestCredential  # noqa: E402
from authhost.util.digest import digest_response  # noqa: E402
from authhost.util.password import digest_ha1  # noqa: E402

logfire.configure(send_to_logfire=False, console=False)

T0 = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_auth_settings(**overrides) -> AuthSettings:
    """AuthSettings with cheap hashing for tests.

    Args:
        **overrides: Any AuthSettings field

    Returns:
        AuthSettings instance
    """
    values = {
        "password_hash_iterations": 1000,
        "digest_nonce_secret": "test-nonce-secret",
        "digest_realm": "authhost",
    }
    values.update(overrides)
    return AuthSettings(**values)


def digest_authorization(
    username: str,
    password: str,
    nonce: str,
    realm: str = "authhost",
    uri: str = "/auth/digest",
    method: str = "POST",
) -> str:
    """Authorization header a Digest client would send for a challenge."""
    fields = {
        "username": username,
        "realm": realm,
        "nonce": nonce,
        "uri": uri,
        "qop": "auth",
        "nc": "00000001",
        "cnonce": "0a4f113b",
    }
    response = digest_response(
        digest_ha1(username, realm, password),
        DigestCredential(response="", method=method, **fields),
    )
    quoted = ", ".join(
        f"{key}={value}" if key in ("qop", "nc") else f'{key}="{value}"'
        for key, value in fields.items()
    )
    return f'Digest {quoted}, response="{response}"'
