"""authhost - multi-provider authentication and session service."""
