"""Domain models used throughout the injector."""

from dataclasses import dataclass
from typing import Any, NamedTuple


class ConfigurationKey(NamedTuple):
    """The canonical configuration query: the declaring class and the field name."""

    owner: type
    field_name: str


@dataclass(frozen=True)
class DeclaredField:
    """An annotated attribute declared directly on a class.

    Attributes:
        owner: The class whose body declares the annotation.
        name: The attribute name, already mangled for private ``__names``.
        declared_type: The annotated type with any ``Annotated`` wrapper removed.
        metadata: The ``Annotated`` metadata, empty for plain annotations.
    """

    owner: type
    name: str
    declared_type: Any
    metadata: tuple

    def __str__(self) -> str:
        return f"{self.owner.__qualname__}.{self.name}"


@dataclass(frozen=True)
class DeclaredMethod:
    """A function, staticmethod or classmethod declared directly on a class.

    Attributes:
        owner: The class whose body declares the method.
        name: The attribute name.
        member: The raw object from the class ``__dict__``.
        markers: The lifecycle markers recorded on the function.
    """

    owner: type
    name: str
    member: Any
    markers: frozenset

    def __str__(self) -> str:
        return f"{self.owner.__qualname__}.{self.name}()"
