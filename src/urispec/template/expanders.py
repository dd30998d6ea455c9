"""Value expanders: render one resolved variable value under a policy.

Every expander implements :class:`ExpressionExpander` and returns a
tri-state result:

* a non-empty string -- the rendered, percent-encoded value;
* ``""`` -- the value is defined but renders as empty text;
* ``None`` -- the value is undefined and must be elided (empty lists and
  maps, collections whose members are all ``None``).

Expanders are stateless and reentrant. The
:class:`~urispec.template.registry.CachingExpanderRegistry` creates one
instance per shape and shares it between templates and threads.

The built-in expanders are:

* :class:`SimpleExpander` -- scalars (strings, numbers, booleans, enums).
* :class:`ListExpander` -- ordered, non-string iterables.
* :class:`MapExpander` -- mappings.
* :class:`CompositeExpander` -- objects exposing properties (see
  :mod:`urispec.template.composite`), flattened into a map.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Optional

from urispec.exceptions import ExpansionError, RangeError, UrispecError
from urispec.models import ExpansionPolicy, VariableSpec
from urispec.template import policies
from urispec.template.composite import is_composite_type, iter_properties
from urispec.template.encoding import is_pct_encoded, pct_encode

if TYPE_CHECKING:
    from urispec.template.registry import ExpanderRegistry


def to_text(value: Any) -> str:
    """Convert a scalar to its string form before encoding.

    Booleans render as ``true``/``false`` and enums as their value, matching
    how :mod:`httpx` renders primitive query parameters.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return to_text(value.value)
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class ExpressionExpander(ABC):
    """Base class for value expanders.

    Custom expanders subclass this and are attached to a variable through a
    :class:`~urispec.template.parameters.TemplateParameter`. Implementations
    must provide a no-argument constructor and hold no per-call state.
    """

    @abstractmethod
    def expand(
        self, variable: VariableSpec, policy: ExpansionPolicy, value: Any
    ) -> Optional[str]:
        """Render *value* for *variable* under *policy*.

        Args:
            variable: The varspec being expanded (name, explode, prefix).
            policy: The policy bound to the enclosing expression.
            value: The resolved, non-``None`` value.

        Returns:
            The rendered text, ``""`` for an empty value, or ``None`` if the
            value is undefined.
        """

    def encode(self, value: str, policy: ExpansionPolicy) -> str:
        """Percent-encode *value* according to *policy*."""
        try:
            return pct_encode(value, policy.allows_reserved_characters)
        except UnicodeError as exc:
            raise ExpansionError(f"Unable to encode value {value!r}: {exc}") from exc

    def pair(self, name: str, encoded: str, policy: ExpansionPolicy) -> str:
        """Render ``name=value``, or ``name`` + the empty-pair separator."""
        if encoded:
            return f"{name}={encoded}"
        return name + policy.empty_pair_separator


class SimpleExpander(ExpressionExpander):
    """Expands scalar values, honouring the prefix modifier."""

    def expand(
        self, variable: VariableSpec, policy: ExpansionPolicy, value: Any
    ) -> Optional[str]:
        text = to_text(value)

        # Truncating pre-encoded text could split a pct-triplet.
        if variable.has_prefix and not is_pct_encoded(
            text, policy.allows_reserved_characters
        ):
            text = text[: variable.prefix]

        encoded = self.encode(text, policy)
        if policy.requires_named_parameters:
            return self.pair(self.encode(variable.name, policy), encoded, policy)
        return encoded


class MultiValueExpander(ExpressionExpander):
    """Shared algorithm for values made of several members.

    Subclasses supply the members via :meth:`get_values` and render each
    member in either exploded or joined form. Members rendering to ``None``
    are skipped; if nothing remains, the whole value is undefined.
    """

    @abstractmethod
    def get_values(self, value: Any) -> Iterable[Any]:
        """Return the members of *value* to expand."""

    @abstractmethod
    def render(self, name: str, member: Any, policy: ExpansionPolicy) -> Optional[str]:
        """Render one member in the joined (non-exploded) form."""

    @abstractmethod
    def explode(self, name: str, member: Any, policy: ExpansionPolicy) -> Optional[str]:
        """Render one member in the exploded form."""

    def expand(
        self, variable: VariableSpec, policy: ExpansionPolicy, value: Any
    ) -> Optional[str]:
        if variable.has_prefix:
            raise RangeError(
                f"Prefix limits are not allowed on list, map, or composite values "
                f"(variable '{variable.name}')."
            )

        parts: list[str] = []
        for member in self.get_values(value):
            if variable.explode:
                rendered = self.explode(variable.name, member, policy)
            else:
                rendered = self.render(variable.name, member, policy)
            if rendered is not None:
                parts.append(rendered)

        if not parts:
            return None

        if variable.explode:
            return policy.delimiter.join(parts)

        joined = ",".join(parts)
        if policy.requires_named_parameters:
            return self.pair(self.encode(variable.name, policy), joined, policy)
        return joined


class ListExpander(MultiValueExpander):
    """Expands ordered collections such as lists and tuples."""

    def get_values(self, value: Any) -> Iterable[Any]:
        if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
            raise ExpansionError(
                f"Type {type(value).__name__} is not supported by this expander. "
                "Values must be a list, tuple, or other iterable."
            )
        return [member for member in value if member is not None]

    def render(self, name: str, member: Any, policy: ExpansionPolicy) -> Optional[str]:
        return self.encode(to_text(member), policy)

    def explode(self, name: str, member: Any, policy: ExpansionPolicy) -> Optional[str]:
        encoded = self.encode(to_text(member), policy)
        if policy.requires_named_parameters:
            return self.pair(self.encode(name, policy), encoded, policy)
        return encoded


class MapExpander(MultiValueExpander):
    """Expands mappings into ``key,value`` or ``key=value`` members."""

    def get_values(self, value: Any) -> Iterable[Any]:
        if not isinstance(value, Mapping):
            raise ExpansionError(
                f"Type {type(value).__name__} is not supported by this expander. "
                "Values must be a mapping."
            )
        return [(key, val) for key, val in value.items() if val is not None]

    def render(self, name: str, member: Any, policy: ExpansionPolicy) -> Optional[str]:
        key, val = member
        return f"{self.encode(to_text(key), policy)},{self.encode(to_text(val), policy)}"

    def explode(self, name: str, member: Any, policy: ExpansionPolicy) -> Optional[str]:
        key, val = member
        encoded_key = self.encode(to_text(key), policy)
        encoded_value = self.encode(to_text(val), policy)
        if policy.requires_named_parameters:
            return self.pair(encoded_key, encoded_value, policy)
        return f"{encoded_key}={encoded_value}"


class CompositeExpander(MapExpander):
    """Expands an object by flattening its properties into a map.

    Nested composites contribute dot-qualified keys (``category.name``).
    Leaf values are rendered by the registry's expander for their type under
    the simple policy before being inserted, so a list property becomes a
    single comma-joined entry.

    Args:
        registry: Registry used to resolve expanders for leaf values.
    """

    def __init__(self, registry: ExpanderRegistry) -> None:
        self._registry = registry

    def expand(
        self, variable: VariableSpec, policy: ExpansionPolicy, value: Any
    ) -> Optional[str]:
        if variable.has_prefix:
            raise RangeError(
                f"Prefix limits are not allowed on list, map, or composite values "
                f"(variable '{variable.name}')."
            )
        flattened = self.flatten(variable, None, value, ())
        if not flattened:
            return None
        return super().expand(variable, policy, flattened)

    def flatten(
        self,
        variable: VariableSpec,
        parent: Optional[str],
        composite: Any,
        seen: tuple[int, ...],
    ) -> dict[str, str]:
        """Collect the rendered properties of *composite* into an ordered dict."""
        if id(composite) in seen:
            raise ExpansionError(
                f"Composite value for '{variable.name}' contains a reference cycle."
            )
        seen = seen + (id(composite),)

        try:
            properties = iter_properties(composite)
        except UrispecError:
            raise
        except Exception as exc:
            raise ExpansionError(
                f"Error occurred expanding {type(composite).__name__}: {exc}"
            ) from exc

        result: dict[str, str] = {}
        for name, prop in properties:
            if prop is None:
                continue
            key = f"{parent}.{name}" if parent else name
            if is_composite_type(type(prop)):
                result.update(self.flatten(variable, key, prop, seen))
                continue

            expander = self._registry.get_expander_by_type(type(prop))
            leaf = VariableSpec(name=key, explode=variable.explode)
            rendered = expander.expand(leaf, policies.SIMPLE, prop)
            if rendered is not None:
                result[key] = rendered
        return result
