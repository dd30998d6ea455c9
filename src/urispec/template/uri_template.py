"""RFC 6570 URI templates.

A :class:`Template` is parsed once from its text and expanded any number of
times with fresh variables::

    from urispec.template import Template

    template = Template.create("https://api.example.com/users{/id}{?fields*}")
    template.expand({"id": 42, "fields": ["name", "email"]})
    # 'https://api.example.com/users/42?fields=name&fields=email'

Parsing failures raise :class:`~urispec.exceptions.TemplateSyntaxError`
(or :class:`~urispec.exceptions.RangeError` for an out-of-range prefix)
and no template is returned. Expansion failures abort only the current
call; the template remains usable.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

import httpx

from urispec.exceptions import ExpansionError, TemplateSyntaxError, UrispecError
from urispec.models import Chunk, Expression, Literal
from urispec.template.parameters import TemplateParameter
from urispec.template.parser import parse_expression
from urispec.template.registry import (
    CachingExpanderRegistry,
    ExpanderRef,
    ExpanderRegistry,
)
from urispec.template.tokenizer import is_expression_token, tokenize

logger = logging.getLogger(__name__)

Variables = Mapping[Union[str, TemplateParameter], Any]
"""Variable bindings keyed by name or by :class:`TemplateParameter`."""

# httpx refuses URLs longer than this; expansions themselves are unbounded.
_MAX_CHECKED_LENGTH = 65536


def parse_template(uri: str) -> tuple[Chunk, ...]:
    """Tokenize and parse *uri* into an immutable chunk sequence.

    Raises:
        TemplateSyntaxError: If any expression is malformed.
        RangeError: If a prefix limit is outside ``[0, 10000]``.
    """
    chunks: list[Chunk] = []
    for token in tokenize(uri):
        if is_expression_token(token):
            chunks.append(parse_expression(token))
        else:
            chunks.append(Literal(text=token))
    return tuple(chunks)


class Template:
    """A parsed, immutable URI template.

    Instances are created with :meth:`create`, are safe to share between
    threads, and never change after construction. The only shared mutable
    state involved in expansion is the registry's memoization cache.

    Args:
        uri: The original template text.
        chunks: The parsed chunk sequence.
        registry: The expander registry used during expansion.
    """

    __slots__ = ("_uri", "_chunks", "_registry")

    def __init__(
        self,
        uri: str,
        chunks: tuple[Chunk, ...],
        registry: ExpanderRegistry,
    ) -> None:
        self._uri = uri
        self._chunks = chunks
        self._registry = registry

    @classmethod
    def create(cls, uri: str, registry: Optional[ExpanderRegistry] = None) -> Template:
        """Parse *uri* into a new template.

        Args:
            uri: The template text, e.g. ``"/users/{id}{?q}"``.
            registry: Expander registry to use. A fresh
                :class:`~urispec.template.registry.CachingExpanderRegistry`
                is created when omitted; pass one explicitly to share it
                between templates.

        Returns:
            The parsed :class:`Template`.

        Raises:
            TemplateSyntaxError: If *uri* is empty or malformed.
            RangeError: If a prefix limit is outside ``[0, 10000]``.
        """
        if not uri:
            raise TemplateSyntaxError("A uri template is required.")
        chunks = parse_template(uri)
        logger.debug("Parsed template %r into %d chunk(s)", uri, len(chunks))
        return cls(uri, chunks, registry or CachingExpanderRegistry())

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    @property
    def chunks(self) -> tuple[Chunk, ...]:
        """All chunks, literals and expressions, in template order."""
        return self._chunks

    @property
    def expressions(self) -> tuple[Expression, ...]:
        """The expression chunks, in template order."""
        return tuple(chunk for chunk in self._chunks if isinstance(chunk, Expression))

    @property
    def variables(self) -> list[str]:
        """Distinct variable names, in order of first appearance."""
        names: dict[str, None] = {}
        for expression in self.expressions:
            for variable in expression.variables:
                names.setdefault(variable.name, None)
        return list(names)

    @property
    def registry(self) -> ExpanderRegistry:
        """The registry that supplies expanders to :meth:`expand`."""
        return self._registry

    # ------------------------------------------------------------------ #
    # Expansion
    # ------------------------------------------------------------------ #

    def expand(self, variables: Optional[Variables] = None) -> str:
        """Expand the template into a URI string.

        Args:
            variables: Values keyed by variable name or
                :class:`~urispec.template.parameters.TemplateParameter`.
                Missing keys and ``None`` values are undefined.

        Returns:
            The expanded URI.

        Raises:
            RangeError: If a prefix limit is applied to a list, map, or
                composite value.
            ExpanderLookupError: If a custom expander cannot be resolved.
            ExpansionError: If a value cannot be rendered or the result is
                not a valid URI.
        """
        bindings = _bind(variables or {})
        parts: list[str] = []
        for chunk in self._chunks:
            if isinstance(chunk, Literal):
                parts.append(chunk.text)
                continue
            expanded = self._expand_expression(chunk, bindings)
            if expanded is not None:
                parts.append(expanded)

        uri = "".join(parts)
        _validate_uri(uri)
        return uri

    def expand_url(self, variables: Optional[Variables] = None) -> httpx.URL:
        """Expand the template and return the result as an :class:`httpx.URL`.

        Raises:
            ExpansionError: As for :meth:`expand`, and also when the URI is
                longer than httpx accepts.
        """
        uri = self.expand(variables)
        try:
            return httpx.URL(uri)
        except httpx.InvalidURL as exc:
            raise ExpansionError(f"Cannot build a URL from the expansion: {exc}") from exc

    def _expand_expression(
        self,
        expression: Expression,
        bindings: dict[str, tuple[Any, Optional[ExpanderRef]]],
    ) -> Optional[str]:
        """Expand one expression, or return ``None`` if every variable is undefined."""
        policy = expression.policy
        results: list[str] = []
        for variable in expression.variables:
            value, expander_ref = bindings.get(variable.name, (None, None))
            if value is None:
                continue

            if expander_ref is not None:
                expander = self._registry.get_expander(expander_ref)
            else:
                expander = self._registry.get_expander_by_type(type(value))

            try:
                rendered = expander.expand(variable, policy, value)
            except UrispecError:
                raise
            except Exception as exc:
                raise ExpansionError(
                    f"Error occurred expanding variable '{variable.name}': {exc}"
                ) from exc

            if rendered is not None:
                results.append(rendered)

        if not results:
            return None
        return policy.prefix + policy.delimiter.join(results)

    # ------------------------------------------------------------------ #
    # Dunder methods
    # ------------------------------------------------------------------ #

    def __str__(self) -> str:
        return self._uri

    def __repr__(self) -> str:
        return f"Template({self._uri!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Template):
            return NotImplemented
        return self._uri == other._uri

    def __hash__(self) -> int:
        return hash(self._uri)


def _bind(variables: Variables) -> dict[str, tuple[Any, Optional[ExpanderRef]]]:
    """Normalise caller bindings to ``name -> (value, expander)``."""
    bindings: dict[str, tuple[Any, Optional[ExpanderRef]]] = {}
    for key, value in variables.items():
        if isinstance(key, TemplateParameter):
            bindings[key.name] = (value, key.expander)
        elif isinstance(key, str):
            bindings[key] = (value, None)
        else:
            raise TypeError(
                f"Variable keys must be str or TemplateParameter, not {type(key).__name__}"
            )
    return bindings


def _validate_uri(uri: str) -> None:
    """Raise :class:`ExpansionError` if *uri* is not a syntactically valid URI.

    Only the first :data:`_MAX_CHECKED_LENGTH` characters are handed to
    httpx, which rejects any longer URL outright.
    """
    try:
        httpx.URL(uri[:_MAX_CHECKED_LENGTH])
    except httpx.InvalidURL as exc:
        raise ExpansionError(f"Expanded template is not a valid URI: {exc}") from exc
