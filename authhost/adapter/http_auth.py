"""Parsers for HTTP ``Authorization`` headers (Basic and Digest)."""

import base64
import binascii
import re

from pydantic import ValidationError as PydanticValidationError

from authhost.domain.error import InvalidCredentialError
from authhost.domain.value import DigestCredential

# key=value or key="quoted, value" pairs of a Digest header
_DIGEST_PARAM = re.compile(r'(\w+)\s*=\s*(?:"((?:[^"\\]|\\.)*)"|([^\s,"]+))')

_DIGEST_REQUIRED = ("username", "realm", "nonce", "uri", "response")


def _split_scheme(header: str, expected: str) -> str:
    scheme, _, params = header.strip().partition(" ")
    if scheme.lower() != expected.lower() or not params.strip():
        raise InvalidCredentialError(f"Expected {expected} authorization")
    return params.strip()


def parse_basic_authorization(header: str) -> tuple[str, str]:
    """Decode ``Basic base64(username:password)``.

    Raises:
        InvalidCredentialError: If the header is not well-formed Basic auth
    """
    token = _split_scheme(header, "Basic")
    try:
        decoded = base64.b64decode(token.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        raise InvalidCredentialError("Malformed Basic authorization header")

    username, sep, password = decoded.partition(":")
    if not sep or not username:
        raise InvalidCredentialError("Malformed Basic authorization header")
    return username, password


def parse_digest_authorization(header: str, method: str) -> DigestCredential:
    """Parse a ``Digest ...`` header into its fields.

    Args:
        header: Raw ``Authorization`` header value
        method: HTTP method of the request, part of the response hash

    Raises:
        InvalidCredentialError: If required fields are missing or the qop
            is not supported
    """
    params = _split_scheme(header, "Digest")
    fields: dict[str, str] = {}
    for match in _DIGEST_PARAM.finditer(params):
        key, quoted, token = match.groups()
        value = quoted if quoted is not None else token
        fields[key.lower()] = re.sub(r"\\(.)", r"\1", value)

    missing = [name for name in _DIGEST_REQUIRED if not fields.get(name)]
    if missing:
        raise InvalidCredentialError("Malformed Digest authorization header")

    qop = fields.get("qop")
    if qop is not None and qop != "auth":
        raise InvalidCredentialError(f"Unsupported Digest qop: {qop}")
    if qop == "auth" and not (fields.get("nc") and fields.get("cnonce")):
        raise InvalidCredentialError("Malformed Digest authorization header")

    algorithm = fields.get("algorithm")
    if algorithm is not None and algorithm.upper() != "MD5":
        raise InvalidCredentialError(f"Unsupported Digest algorithm: {algorithm}")

    try:
        return DigestCredential(
            username=fields["username"],
            realm=fields["realm"],
            nonce=fields["nonce"],
            uri=fields["uri"],
            response=fields["response"],
            method=method.upper(),
            qop=qop,
            nc=fields.get("nc"),
            cnonce=fields.get("cnonce"),
            opaque=fields.get("opaque"),
            algorithm=algorithm,
        )
    except PydanticValidationError:
        raise InvalidCredentialError("Malformed Digest authorization header")
