"""Application layer: use cases and background tasks."""
