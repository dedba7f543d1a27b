"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""

    pass


class ConfigurationError(UtilError):
    """Configuration error, e.g. a missing provider client secret."""

    pass


class PasswordHashError(UtilError):
    """Stored password hash cannot be parsed."""

    pass
