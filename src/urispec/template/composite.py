"""Property access for composite (object) values.

A composite exposes an ordered sequence of ``(name, value)`` pairs. Three
shapes are recognised, checked in this order:

1. Objects implementing :class:`UriComposite` (a ``uri_properties()`` method).
2. Pydantic models -- declared fields in declaration order.
3. Dataclass instances -- declared fields in declaration order.

Nothing else is treated as a composite; arbitrary objects are rendered as
scalars via ``str()``. No attribute scanning or ``__dict__`` inspection is
performed.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Iterable, Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class UriComposite(Protocol):
    """Protocol for objects that expose their own expansion properties.

    Example::

        class Address:
            def __init__(self, town: str, country: str) -> None:
                self.town = town
                self.country = country

            def uri_properties(self):
                return [("town", self.town), ("country", self.country)]
    """

    def uri_properties(self) -> Iterable[tuple[str, Any]]: ...


def is_composite_type(value_type: type) -> bool:
    """Return ``True`` if instances of *value_type* expand as composites."""
    if callable(getattr(value_type, "uri_properties", None)):
        return True
    if isinstance(value_type, type) and issubclass(value_type, BaseModel):
        return True
    return dataclasses.is_dataclass(value_type)


def iter_properties(value: Any) -> Iterable[tuple[str, Any]]:
    """Return the ``(name, value)`` pairs of a composite *value*, in order.

    Raises:
        TypeError: If *value* is not a recognised composite.
    """
    if isinstance(value, UriComposite):
        return list(value.uri_properties())
    if isinstance(value, BaseModel):
        return [(name, getattr(value, name)) for name in type(value).model_fields]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return [(f.name, getattr(value, f.name)) for f in dataclasses.fields(value)]
    raise TypeError(f"{type(value).__name__} does not expose URI properties")
