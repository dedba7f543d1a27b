"""Password and HTTP Digest hashing utilities."""

import base64
import binascii
import hashlib
import hmac
import secrets

from authhost.util.error import PasswordHashError

ALGORITHM = "pbkdf2_sha256"


def hash_password(password: str, iterations: int) -> str:
    """Hash a password with PBKDF2-SHA256 and a random salt.

    Returns:
        ``pbkdf2_sha256$<iterations>$<salt_b64>$<digest_b64>``
    """
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    salt_b64 = base64.b64encode(salt).decode("ascii")
    digest_b64 = base64.b64encode(digest).decode("ascii")
    return f"{ALGORITHM}${iterations}${salt_b64}${digest_b64}"


def verify_password(password: str, password_hash: str) -> bool:
    """Recompute the hash with the stored salt and compare in constant time.

    Raises:
        PasswordHashError: If the stored hash is malformed
    """
    try:
        algorithm, iterations_text, salt_b64, expected_b64 = password_hash.split("$", 3)
        if algorithm != ALGORITHM:
            raise PasswordHashError(f"Unsupported algorithm: {algorithm}")
        iterations = int(iterations_text)
        salt = base64.b64decode(salt_b64.encode("ascii"))
        expected = base64.b64decode(expected_b64.encode("ascii"))
    except (ValueError, TypeError, binascii.Error) as e:
        raise PasswordHashError("Malformed password hash") from e

    actual = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(actual, expected)


def md5_hex(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def digest_ha1(username: str, realm: str, password: str) -> str:
    """HTTP Digest HA1 stored in place of the password for Digest auth."""
    return md5_hex(f"{username}:{realm}:{password}")


# Verified against when the username is unknown so that both failure paths
# cost one PBKDF2 computation.
_DUMMY_ITERATIONS = 210_000
_dummy_hash_cache: dict[int, str] = {}


def dummy_password_hash(iterations: int = _DUMMY_ITERATIONS) -> str:
    """Hash of a random secret with the given work factor."""
    if iterations not in _dummy_hash_cache:
        _dummy_hash_cache[iterations] = hash_password(
            secrets.token_urlsafe(16), iterations
        )
    return _dummy_hash_cache[iterations]
