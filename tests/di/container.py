"""Test container builder with selective unmocking."""

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider

from authhost.util.di import PROVIDERS, Component, get_provider, swappable_components


def build_test_container(unmock: set[Component] | None = None) -> AsyncContainer:
    """Build a container with mocks for every swappable component.

    Settings are loaded from environment variables (see tests/conftest.py).

    Args:
        unmock: Components to run with their production implementation

    Raises:
        ValueError: If unknown components are requested

    Examples:
        # Unit tests - in-memory repositories, mock OAuth clients
        container = build_test_container()

        # Integration tests - real Postgres, mock OAuth clients
        container = build_test_container(unmock={"persistence"})
    """
    unmock = unmock or set()
    unknown = unmock - swappable_components()
    if unknown:
        raise ValueError(f"Unknown components: {unknown}")

    providers = [
        get_provider(base, use_mock=base.__mock_component__ not in unmock)()
        for base in PROVIDERS
    ]
    # FastapiProvider lets the same container serve a TestClient app
    return make_async_container(*providers, FastapiProvider())
