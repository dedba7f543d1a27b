"""Base model for all domain entities."""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Base class for all domain models.

    Entities are immutable; changes are made with ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
