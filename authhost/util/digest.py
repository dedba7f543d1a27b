"""HTTP Digest nonce issuing and response computation (RFC 2617 / RFC 7616, MD5)."""

import base64
import binascii
import hashlib
import hmac
from datetime import datetime, timedelta

from authhost.domain.value import DigestCredential
from authhost.util.password import md5_hex


class DigestNonceIssuer:
    """Signed nonces: ``base64(<unix timestamp>:<hmac>)``.

    A nonce is valid if the HMAC matches and it is younger than ``ttl``, so
    issuing needs no storage. Replays are refused by remembering the highest
    nonce count (``nc``) accepted for each nonce until the nonce expires.
    That record lives in this process only.
    """

    def __init__(self, secret: str, ttl: timedelta) -> None:
        self._secret = secret.encode("utf-8")
        self._ttl = ttl
        # nonce -> (issue timestamp, highest accepted nonce count)
        self._accepted: dict[str, tuple[int, int]] = {}

    def _sign(self, timestamp: str) -> str:
        return hmac.new(self._secret, timestamp.encode("ascii"), hashlib.sha256).hexdigest()

    def issue(self, now: datetime) -> str:
        timestamp = str(int(now.timestamp()))
        raw = f"{timestamp}:{self._sign(timestamp)}"
        return base64.b64encode(raw.encode("ascii")).decode("ascii")

    def _issued_at(self, nonce: str) -> int | None:
        """Issue timestamp of a nonce we signed, None for anything else."""
        try:
            raw = base64.b64decode(nonce.encode("ascii"), validate=True).decode("ascii")
            timestamp, signature = raw.split(":", 1)
            issued = int(timestamp)
        except (ValueError, UnicodeError, binascii.Error):
            return None

        if not hmac.compare_digest(signature, self._sign(timestamp)):
            return None
        return issued

    def _expired(self, issued: int, now: datetime) -> bool:
        return now.timestamp() - issued >= self._ttl.total_seconds()

    def is_valid(self, nonce: str, now: datetime) -> bool:
        """Check signature and age of a nonce."""
        issued = self._issued_at(nonce)
        if issued is None:
            return False
        return now.timestamp() >= issued and not self._expired(issued, now)

    def is_replay(self, nonce: str, nc: str | None) -> bool:
        """True if ``nc`` does not exceed the count last accepted for ``nonce``."""
        count = _nonce_count(nc)
        if count is None:
            return True
        accepted = self._accepted.get(nonce)
        return accepted is not None and count <= accepted[1]

    def accept(self, nonce: str, nc: str | None, now: datetime) -> bool:
        """Record a verified use of a nonce.

        Check and record happen without yielding, so of two concurrent uses
        with the same count only one is accepted.

        Returns:
            False if the use is a replay
        """
        count = _nonce_count(nc)
        issued = self._issued_at(nonce)
        if count is None or issued is None or self.is_replay(nonce, nc):
            return False

        self._accepted = {
            key: value
            for key, value in self._accepted.items()
            if not self._expired(value[0], now)
        }
        self._accepted[nonce] = (issued, count)
        return True


def _nonce_count(nc: str | None) -> int | None:
    """Hex ``nc`` as an int. Without qop there is no count and a nonce is single use."""
    if nc is None:
        return 0
    try:
        return int(nc, 16)
    except ValueError:
        return None


def digest_response(ha1: str, credential: DigestCredential) -> str:
    """Expected ``response`` value for a Digest credential.

    Args:
        ha1: Stored ``MD5(username:realm:password)``
        credential: Parsed Authorization header fields

    Returns:
        Lowercase hex MD5 response
    """
    ha2 = md5_hex(f"{credential.method}:{credential.uri}")
    if credential.qop == "auth":
        return md5_hex(
            f"{ha1}:{credential.nonce}:{credential.nc}:{credential.cnonce}:{credential.qop}:{ha2}"
        )
    return md5_hex(f"{ha1}:{credential.nonce}:{ha2}")


def challenge_header(realm: str, nonce: str, stale: bool = False) -> str:
    """``WWW-Authenticate`` value asking the client for Digest credentials."""
    header = f'Digest realm="{realm}", nonce="{nonce}", qop="auth", algorithm=MD5'
    if stale:
        header += ", stale=true"
    return header
