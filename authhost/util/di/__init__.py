"""Dependency injection module."""

from typing import Type

from authhost.util.di.application import ProdApplicationProvider
from authhost.util.di.base import Component, ProviderBase
from authhost.util.di.core import ProdConfigProvider
from authhost.util.di.domain import ProdDomainProvider
from authhost.util.di.infrastructure import (
    OAuthProvider,
    PersistenceProvider,
    ProdOAuthProvider,
    ProdPersistenceProvider,
)

# Order is irrelevant to dishka; kept by layer for readability
PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    # Swappable
    OAuthProvider,
    PersistenceProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Resolve a provider entry to the class to instantiate.

    Concrete providers are returned as is. For a swappable base the
    subclass whose ``__is_mock__`` equals ``use_mock`` is picked.

    Raises:
        ValueError: If the base has no matching subclass
    """
    if not base.is_swappable():
        return base

    for impl in base.__subclasses__():
        if impl.__is_mock__ == use_mock:
            return impl

    kind = "mock" if use_mock else "production"
    raise ValueError(f"No {kind} implementation for {base.__mock_component__}")


def swappable_components() -> set[str]:
    """Names of the components a test container may swap for mocks."""
    return {
        base.__mock_component__
        for base in PROVIDERS
        if base.is_swappable() and base.__mock_component__
    }


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    "swappable_components",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "OAuthProvider",
    "PersistenceProvider",
    "ProdOAuthProvider",
    "ProdPersistenceProvider",
]
