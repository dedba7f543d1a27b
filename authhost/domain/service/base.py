"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold authentication logic that spans several
    aggregates or talks to injected stores and providers.
    """

    pass
