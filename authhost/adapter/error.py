"""Adapter layer errors."""


class AdapterError(Exception):
    """Base adapter error."""

    pass


class ProviderError(AdapterError):
    """External provider returned a response that cannot be used.

    Raised inside OAuth clients and translated to the domain's
    ``ProviderRejectedError`` / ``ProviderUnreachableError`` at the client
    boundary.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
