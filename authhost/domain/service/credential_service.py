"""Credential verification domain service."""

import hmac
from datetime import timedelta

import logfire
from pydantic import ValidationError as PydanticValidationError

from authhost.config import AuthSettings
from authhost.domain.error import (
    AccountLockedError,
    InvalidCredentialError,
    StaleNonceError,
    ValidationError,
)
from authhost.domain.model.user import User
from authhost.domain.repository import LoginAttemptRepository, UserRepository
from authhost.domain.value import AuthProvider, DigestCredential, UserId, Username
from authhost.util.clock import Clock
from authhost.util.digest import DigestNonceIssuer, digest_response
from authhost.util.error import PasswordHashError
from authhost.util.password import dummy_password_hash, md5_hex, verify_password

from .base import Service

PresentedCredential = str | DigestCredential

# HA1 compared against when the username is unknown
_DUMMY_HA1 = md5_hex("unknown:unknown:unknown")


class CredentialService(Service):
    """Verifies username/password, HTTP Basic and HTTP Digest credentials.

    Every scheme reduces to the same step: look up the stored hash for the
    username and compare it in constant time against a hash recomputed from
    the presented credential. Unknown usernames and wrong secrets fail the
    same way and cost the same.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        login_attempt_repository: LoginAttemptRepository,
        nonce_issuer: DigestNonceIssuer,
        auth_settings: AuthSettings,
        clock: Clock,
    ) -> None:
        """Initialize credential service.

        Args:
            user_repository: User repository for credential lookup
            login_attempt_repository: Shared failed attempt counters
            nonce_issuer: Validates HTTP Digest nonces
            auth_settings: Lockout policy and hashing parameters
            clock: Time source
        """
        self.user_repository = user_repository
        self.login_attempt_repository = login_attempt_repository
        self.nonce_issuer = nonce_issuer
        self.auth_settings = auth_settings
        self.clock = clock

    @property
    def _window(self) -> timedelta:
        return timedelta(seconds=self.auth_settings.window_seconds)

    async def verify(
        self, username: str, presented: PresentedCredential, scheme: AuthProvider
    ) -> UserId:
        """Verify a presented credential for a username.

        Args:
            username: Username as presented by the client
            presented: Password (CREDENTIALS, BASIC) or parsed Digest fields
            scheme: Credential scheme used on the wire

        Returns:
            ID of the authenticated user

        Raises:
            ValidationError: If scheme is not a credential scheme
            AccountLockedError: If the username is locked out
            InvalidCredentialError: If the username is unknown or the
                credential does not match
            StaleNonceError: If a Digest nonce is expired, forged or its
                nonce count was already used
        """
        if not scheme.is_credential_scheme:
            raise ValidationError(f"Not a credential scheme: {scheme.value}")

        with logfire.span("credential_service.verify", scheme=scheme.value):
            try:
                name = Username(username)
            except PydanticValidationError:
                # Burn the same work as a real lookup before failing
                self._matches(None, presented, scheme)
                raise InvalidCredentialError()

            if scheme is AuthProvider.DIGEST:
                self._check_digest_nonce(presented, name)

            attempts = await self.login_attempt_repository.reserve_attempt(
                name, self.clock.now(), self._window
            )
            if attempts > self.auth_settings.max_attempts:
                logfire.warn(
                    "Verification refused, account locked",
                    username=name.root,
                    attempts=attempts,
                )
                raise AccountLockedError()

            user = await self.user_repository.find_by_username(name)
            matched = self._matches(user, presented, scheme)
            if user is None or not matched:
                logfire.warn(
                    "Credential verification failed",
                    username=name.root,
                    scheme=scheme.value,
                    attempts=attempts,
                )
                raise InvalidCredentialError()

            if isinstance(presented, DigestCredential) and not self.nonce_issuer.accept(
                presented.nonce, presented.nc, self.clock.now()
            ):
                logfire.warn("Digest response replayed", username=name.root)
                raise StaleNonceError()

            await self.login_attempt_repository.reset(name)
            logfire.info(
                "Credential verified",
                user_id=str(user.id),
                scheme=scheme.value,
            )
            return user.id

    def _check_digest_nonce(self, presented: PresentedCredential, name: Username) -> None:
        if not isinstance(presented, DigestCredential):
            raise InvalidCredentialError()
        if not self.nonce_issuer.is_valid(presented.nonce, self.clock.now()):
            logfire.info("Stale or forged digest nonce", username=name.root)
            raise StaleNonceError()
        if self.nonce_issuer.is_replay(presented.nonce, presented.nc):
            logfire.warn("Digest response replayed", username=name.root)
            raise StaleNonceError()

    def _matches(
        self, user: User | None, presented: PresentedCredential, scheme: AuthProvider
    ) -> bool:
        """Recompute and compare. Always does the full work, even for no user."""
        if scheme is AuthProvider.DIGEST:
            return self._matches_digest(user, presented)
        return self._matches_password(user, presented)

    def _matches_password(self, user: User | None, presented: PresentedCredential) -> bool:
        if not isinstance(presented, str):
            return False

        stored = user.password_hash if user and user.password_hash else None
        try:
            matched = verify_password(
                presented,
                stored
                or dummy_password_hash(self.auth_settings.password_hash_iterations),
            )
        except PasswordHashError:
            logfire.error(
                "Stored password hash is malformed",
                user_id=str(user.id) if user else None,
            )
            return False
        return matched and stored is not None

    def _matches_digest(self, user: User | None, presented: PresentedCredential) -> bool:
        if not isinstance(presented, DigestCredential):
            return False

        stored = user.digest_ha1_hash if user and user.digest_ha1_hash else None
        username_ok = user is not None and user.username is not None and (
            user.username.root == presented.username.strip().lower()
        )
        realm_ok = presented.realm == self.auth_settings.digest_realm
        expected = digest_response(stored or _DUMMY_HA1, presented)
        matched = hmac.compare_digest(expected, presented.response.lower())
        return matched and stored is not None and username_ok and realm_ok
