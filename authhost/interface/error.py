"""Translation of domain errors into HTTP responses.

Every error body has the same shape::

    {"error": "<kind>", "message": "<stable message>"}

Messages come from the error classes and never carry stack traces or
storage details.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from authhost.domain.error import (
    AccountLockedError,
    AuthError,
    AuthInternalError,
    DuplicateUsernameError,
    IdentityAlreadyLinkedError,
    InvalidCredentialError,
    NotAuthorizedError,
    NotFoundError,
    ProviderRejectedError,
    ProviderUnreachableError,
    RepositoryError,
    SessionExpiredError,
    SessionNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

AUTH_ERROR_STATUS: dict[type[AuthError], int] = {
    InvalidCredentialError: status.HTTP_401_UNAUTHORIZED,
    SessionExpiredError: status.HTTP_401_UNAUTHORIZED,
    SessionNotFoundError: status.HTTP_401_UNAUTHORIZED,
    AccountLockedError: status.HTTP_423_LOCKED,
    DuplicateUsernameError: status.HTTP_409_CONFLICT,
    IdentityAlreadyLinkedError: status.HTTP_409_CONFLICT,
    ProviderRejectedError: status.HTTP_502_BAD_GATEWAY,
    ProviderUnreachableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    AuthInternalError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(error: AuthError) -> int:
    """HTTP status for an auth error, following its class hierarchy."""
    for cls in type(error).__mro__:
        if cls in AUTH_ERROR_STATUS:
            return AUTH_ERROR_STATUS[cls]
    return status.HTTP_401_UNAUTHORIZED


def error_response(
    status_code: int,
    kind: str,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": kind, "message": message},
        headers=headers,
    )


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    status_code = status_for(exc)
    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        # Tell the client how to sign in
        headers = {"WWW-Authenticate": 'Bearer realm="authhost"'}
    logger.info(f"{request.method} {request.url.path} -> {status_code} {exc.kind}")
    return error_response(status_code, exc.kind, exc.message, headers)


async def not_authorized_handler(
    request: Request, exc: NotAuthorizedError
) -> JSONResponse:
    return error_response(status.HTTP_403_FORBIDDEN, "forbidden", str(exc))


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, "not_found", str(exc))


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "validation_error", str(exc)
    )


async def repository_error_handler(
    request: Request, exc: RepositoryError
) -> JSONResponse:
    logger.error(f"Repository failure on {request.url.path}: {exc.operation}")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        AuthInternalError.kind,
        AuthInternalError.message,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the domain error handlers on the app."""
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(NotAuthorizedError, not_authorized_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RepositoryError, repository_error_handler)
