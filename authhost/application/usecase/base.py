"""Base use case."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")


class BaseUseCase(ABC, Generic[RequestT, ResponseT]):
    """One application operation: takes a request model, returns a response."""

    @abstractmethod
    async def execute(self, request: RequestT) -> ResponseT:
        pass
