"""Unit tests for Authorization header parsing."""

import base64

import pytest

from authhost.adapter.http_auth import (
    parse_basic_authorization,
    parse_digest_authorization,
)
from authhost.domain.error import InvalidCredentialError


def _basic(raw: str) -> str:
    return "Basic " + base64.b64encode(raw.encode("utf-8")).decode("ascii")


RFC_DIGEST_HEADER = (
    'Digest username="Mufasa", realm="testrealm@host.com", '
    'nonce="dcd98b7102dd2f0e8b11d0f600bfb0c093", uri="/dir/index.html", '
    'qop=auth, nc=00000001, cnonce="0a4f113b", '
    'response="6629fae49393a05397450978507c4ef1", '
    'opaque="5ccc069c403ebaf9f0171e9517f40e41"'
)


class TestParseBasicAuthorization:
    """Tests for parse_basic_authorization()."""

    def test_decodes_username_and_password(self):
        assert parse_basic_authorization(_basic("alice:s3cret")) == ("alice", "s3cret")

    def test_password_may_contain_colons(self):
        assert parse_basic_authorization(_basic("alice:a:b:c")) == ("alice", "a:b:c")

    def test_scheme_is_case_insensitive(self):
        header = _basic("alice:pw").replace("Basic", "basic")

        assert parse_basic_authorization(header) == ("alice", "pw")

    @pytest.mark.parametrize(
        "header",
        [
            "Bearer abc",
            "Basic",
            "Basic !!!not-base64!!!",
            _basic("no-colon-here"),
            _basic(":password-without-user"),
        ],
    )
    def test_malformed_header_raises(self, header):
        with pytest.raises(InvalidCredentialError):
            parse_basic_authorization(header)


class TestParseDigestAuthorization:
    """Tests for parse_digest_authorization()."""

    def test_parses_rfc2617_example(self):
        credential = parse_digest_authorization(RFC_DIGEST_HEADER, "get")

        assert credential.username == "Mufasa"
        assert credential.realm == "testrealm@host.com"
        assert credential.nonce == "dcd98b7102dd2f0e8b11d0f600bfb0c093"
        assert credential.uri == "/dir/index.html"
        assert credential.qop == "auth"
        assert credential.nc == "00000001"
        assert credential.cnonce == "0a4f113b"
        assert credential.opaque == "5ccc069c403ebaf9f0171e9517f40e41"
        assert credential.method == "GET"

    def test_quoted_values_may_contain_commas_and_escapes(self):
        header = (
            'Digest username="a\\"b", realm="x, y", nonce="n", uri="/p?a=1,2", '
            'response="r"'
        )

        credential = parse_digest_authorization(header, "POST")

        assert credential.username == 'a"b'
        assert credential.realm == "x, y"
        assert credential.uri == "/p?a=1,2"
        assert credential.qop is None

    def test_missing_required_field_raises(self):
        header = 'Digest username="Mufasa", realm="r", nonce="n", uri="/"'

        with pytest.raises(InvalidCredentialError):
            parse_digest_authorization(header, "POST")

    def test_qop_auth_requires_nc_and_cnonce(self):
        header = (
            'Digest username="u", realm="r", nonce="n", uri="/", response="x", qop=auth'
        )

        with pytest.raises(InvalidCredentialError):
            parse_digest_authorization(header, "POST")

    def test_auth_int_is_not_supported(self):
        header = RFC_DIGEST_HEADER.replace("qop=auth", "qop=auth-int")

        with pytest.raises(InvalidCredentialError):
            parse_digest_authorization(header, "POST")

    def test_only_md5_is_supported(self):
        header = RFC_DIGEST_HEADER + ", algorithm=SHA-256"

        with pytest.raises(InvalidCredentialError):
            parse_digest_authorization(header, "POST")

    def test_wrong_scheme_raises(self):
        with pytest.raises(InvalidCredentialError):
            parse_digest_authorization("Basic abc", "POST")
