"""Provider base class and the names of swappable components."""

from typing import ClassVar, Literal

from dishka import Provider

# "persistence": repositories and the database session
# "oauth": one client per enabled external identity provider
Component = Literal["persistence", "oauth"]


class ProviderBase(Provider):
    """Provider carrying the metadata container builders select on.

    A base that names a ``__mock_component__`` and has subclasses is
    swappable: the subclass with ``__is_mock__`` set serves tests, the
    other one production.
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False

    @classmethod
    def is_swappable(cls) -> bool:
        return cls.__mock_component__ is not None and bool(cls.__subclasses__())
