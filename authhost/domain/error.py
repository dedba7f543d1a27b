"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class RepositoryError(DomainError):
    """Storage fault raised by a repository implementation.

    Carries no storage-engine detail in its message; the original exception
    is chained as ``__cause__``.
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Repository operation failed: {operation}")


class AuthError(DomainError):
    """Base authentication error.

    Every subclass has a stable ``kind`` code and a stable human-readable
    message that is safe to return to callers.
    """

    kind: str = "auth_error"
    message: str = "Authentication failed"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidCredentialError(AuthError):
    """Unknown username or wrong secret. Never says which."""

    kind = "invalid_credential"
    message = "Invalid username or password"


class StaleNonceError(InvalidCredentialError):
    """HTTP Digest nonce is expired or was not issued by this server."""

    message = "Digest nonce is stale, retry with a new challenge"


class AccountLockedError(AuthError):
    """Too many failed attempts inside the lockout window."""

    kind = "account_locked"
    message = "Account is temporarily locked due to too many failed attempts"


class ProviderUnreachableError(AuthError):
    """External identity provider could not be reached or timed out."""

    kind = "provider_unreachable"
    message = "Identity provider is unreachable"


class ProviderRejectedError(AuthError):
    """External identity provider rejected the authorization."""

    kind = "provider_rejected"
    message = "Identity provider rejected the authorization"


class DuplicateUsernameError(AuthError):
    """Username already taken by another credential user."""

    kind = "duplicate_username"
    message = "Username is already taken"


class IdentityAlreadyLinkedError(AuthError):
    """External identity already linked to a different user."""

    kind = "identity_already_linked"
    message = "External identity is already linked to another account"


class SessionExpiredError(AuthError):
    """Session is past its expiry."""

    kind = "session_expired"
    message = "Session has expired"


class SessionNotFoundError(AuthError):
    """Session is unknown or was revoked."""

    kind = "session_not_found"
    message = "Session not found"


class AuthInternalError(AuthError):
    """Internal failure while authenticating."""

    kind = "internal_error"
    message = "Internal authentication error"


class NotAuthorizedError(DomainError):
    """Raised when an authenticated user lacks a required role."""

    def __init__(self, role: str):
        self.role = role
        super().__init__(f"Role required: {role}")
