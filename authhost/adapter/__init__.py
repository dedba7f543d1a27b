"""Adapters for external identity providers and HTTP authentication headers."""
