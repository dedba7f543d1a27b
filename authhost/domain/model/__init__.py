"""Domain model entities for authhost."""

from authhost.domain.model.external_identity import ExternalIdentity
from authhost.domain.model.login_attempt import LoginAttemptWindow
from authhost.domain.model.session import Session
from authhost.domain.model.user import User

__all__ = [
    "User",
    "ExternalIdentity",
    "Session",
    "LoginAttemptWindow",
]
