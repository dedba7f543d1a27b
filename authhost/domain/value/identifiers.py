"""Strongly typed identifiers for authhost domain entities.

Using NewType for strong typing prevents mixing up different entity IDs
and makes the code more self-documenting.
"""

from typing import NewType
from uuid import UUID

UserId = NewType("UserId", UUID)
ExternalIdentityId = NewType("ExternalIdentityId", UUID)

# Opaque URL-safe session token, never decoded by clients
SessionId = NewType("SessionId", str)
