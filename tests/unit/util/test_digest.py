"""Unit tests for HTTP Digest nonces and response computation."""

from datetime import timedelta

from authhost.domain.value import DigestCredential
from authhost.util.digest import DigestNonceIssuer, challenge_header, digest_response
from tests.conftest import T0


def _issuer(secret: str = "secret") -> DigestNonceIssuer:
    return DigestNonceIssuer(secret=secret, ttl=timedelta(minutes=5))


class TestDigestNonceIssuer:
    """Tests for DigestNonceIssuer."""

    def test_fresh_nonce_is_valid(self):
        issuer = _issuer()
        nonce = issuer.issue(T0)

        assert issuer.is_valid(nonce, T0 + timedelta(minutes=4))

    def test_nonce_expires_after_ttl(self):
        issuer = _issuer()
        nonce = issuer.issue(T0)

        assert not issuer.is_valid(nonce, T0 + timedelta(minutes=5))

    def test_nonce_from_other_secret_is_rejected(self):
        nonce = _issuer("other").issue(T0)

        assert not _issuer().is_valid(nonce, T0)

    def test_garbage_is_rejected(self):
        issuer = _issuer()

        assert not issuer.is_valid("not base64 at all", T0)
        assert not issuer.is_valid("", T0)

    def test_nonce_from_the_future_is_rejected(self):
        issuer = _issuer()
        nonce = issuer.issue(T0 + timedelta(hours=1))

        assert not issuer.is_valid(nonce, T0)

    def test_each_nonce_count_is_accepted_once(self):
        issuer = _issuer()
        nonce = issuer.issue(T0)

        assert issuer.accept(nonce, "00000001", T0)
        assert not issuer.accept(nonce, "00000001", T0)
        assert issuer.is_replay(nonce, "00000001")
        assert issuer.accept(nonce, "00000003", T0)
        assert not issuer.accept(nonce, "00000002", T0)

    def test_nonce_without_count_is_single_use(self):
        issuer = _issuer()
        nonce = issuer.issue(T0)

        assert issuer.accept(nonce, None, T0)
        assert not issuer.accept(nonce, None, T0)

    def test_malformed_count_or_nonce_is_refused(self):
        issuer = _issuer()

        assert not issuer.accept(issuer.issue(T0), "zz", T0)
        assert not issuer.accept("Zm9yZ2Vk", "00000001", T0)

    def test_expired_nonces_are_forgotten(self):
        issuer = _issuer()
        old = issuer.issue(T0)
        issuer.accept(old, "00000001", T0)

        later = T0 + timedelta(minutes=5)
        fresh = issuer.issue(later)

        issuer.accept(fresh, "00000001", later)

        assert list(issuer._accepted) == [fresh]


class TestDigestResponse:
    """Tests for digest_response()."""

    def test_matches_rfc2617_example(self):
        # RFC 2617 section 3.5
        credential = DigestCredential(
            username="Mufasa",
            realm="testrealm@host.com",
            nonce="dcd98b7102dd2f0e8b11d0f600bfb0c093",
            uri="/dir/index.html",
            response="",
            method="GET",
            qop="auth",
            nc="00000001",
            cnonce="0a4f113b",
        )

        assert (
            digest_response("939e7578ed9e3c518a452acee763bce9", credential)
            == "6629fae49393a05397450978507c4ef1"
        )


class TestChallengeHeader:
    """Tests for challenge_header()."""

    def test_contains_realm_nonce_and_qop(self):
        header = challenge_header("authhost", "abc")

        assert header.startswith("Digest ")
        assert 'realm="authhost"' in header
        assert 'nonce="abc"' in header
        assert 'qop="auth"' in header
        assert "stale" not in header

    def test_stale_flag(self):
        assert challenge_header("authhost", "abc", stale=True).endswith("stale=true")
