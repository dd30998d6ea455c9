"""Expander registry -- resolves and memoizes expander instances.

The registry answers two questions during expansion:

* *Which built-in expander handles this value?* --
  :meth:`ExpanderRegistry.get_expander_by_type` inspects the value's type
  once and caches the answer per exact type.
* *Which instance backs this custom expander?* --
  :meth:`ExpanderRegistry.get_expander` instantiates a caller supplied
  :class:`~urispec.template.expanders.ExpressionExpander` subclass (or an
  import path such as ``"mypkg.expanders:Upper"``) once and reuses it.

A registry is created by the caller and handed to
:meth:`~urispec.template.Template.create`; several templates may share one.
The cache is append-only and guarded by a lock so that threads racing on
the same type converge on a single instance.
"""

from __future__ import annotations

import importlib
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any, Union

from urispec.exceptions import ExpanderLookupError
from urispec.template.composite import is_composite_type
from urispec.template.expanders import (
    CompositeExpander,
    ExpressionExpander,
    ListExpander,
    MapExpander,
    SimpleExpander,
)

logger = logging.getLogger(__name__)

ExpanderRef = Union[type, str]
"""An expander class or its ``module:Class`` import path."""


class ExpanderRegistry(ABC):
    """Factory for :class:`~urispec.template.expanders.ExpressionExpander` instances."""

    @abstractmethod
    def get_expander_by_type(self, value_type: type) -> ExpressionExpander:
        """Return the expander that handles values of *value_type*."""

    @abstractmethod
    def get_expander(self, expander: ExpanderRef) -> ExpressionExpander:
        """Return the shared instance of a custom expander.

        Raises:
            ExpanderLookupError: If the expander cannot be resolved or
                instantiated.
        """


class CachingExpanderRegistry(ExpanderRegistry):
    """Thread-safe registry that memoizes expanders by type and identity.

    Example::

        registry = CachingExpanderRegistry()
        registry.get_expander_by_type(list)   # ListExpander
        registry.get_expander_by_type(dict)   # MapExpander
        registry.get_expander_by_type(str)    # SimpleExpander
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_type: dict[type, ExpressionExpander] = {}
        self._custom: dict[ExpanderRef, ExpressionExpander] = {}
        self._simple = SimpleExpander()
        self._list = ListExpander()
        self._map = MapExpander()
        self._composite = CompositeExpander(self)

    def get_expander_by_type(self, value_type: type) -> ExpressionExpander:
        expander = self._by_type.get(value_type)
        if expander is not None:
            return expander
        with self._lock:
            expander = self._by_type.get(value_type)
            if expander is None:
                expander = self._select(value_type)
                self._by_type[value_type] = expander
                logger.debug(
                    "Resolved %s for %s", type(expander).__name__, value_type.__name__
                )
        return expander

    def get_expander(self, expander: ExpanderRef) -> ExpressionExpander:
        instance = self._custom.get(expander)
        if instance is not None:
            return instance
        with self._lock:
            instance = self._custom.get(expander)
            if instance is None:
                instance = self._instantiate(expander)
                self._custom[expander] = instance
                logger.debug("Created custom expander %s", type(instance).__name__)
        return instance

    def cached_types(self) -> list[type]:
        """Return the value types resolved so far, in resolution order."""
        with self._lock:
            return list(self._by_type)

    def _select(self, value_type: type) -> ExpressionExpander:
        """Choose the built-in expander for *value_type* (no caching)."""
        if issubclass(value_type, (str, bytes)):
            return self._simple
        if issubclass(value_type, Mapping):
            return self._map
        # Pydantic models are iterable, so composites are checked first.
        if is_composite_type(value_type):
            return self._composite
        if issubclass(value_type, Iterable):
            return self._list
        return self._simple

    def _instantiate(self, expander: ExpanderRef) -> ExpressionExpander:
        """Import (if needed) and instantiate a custom expander."""
        expander_cls: Any = expander
        if isinstance(expander, str):
            expander_cls = _import_object(expander)

        if not isinstance(expander_cls, type) or not issubclass(
            expander_cls, ExpressionExpander
        ):
            raise ExpanderLookupError(
                f"{expander!r} is not an ExpressionExpander subclass."
            )

        try:
            return expander_cls()
        except Exception as exc:
            logger.warning("Failed to instantiate expander %s: %s", expander_cls, exc)
            raise ExpanderLookupError(
                f"Error occurred creating custom expander {expander_cls.__name__}: {exc}"
            ) from exc


def _import_object(path: str) -> Any:
    """Import ``module:attr`` (or ``module.attr``) and return the attribute."""
    module_name, sep, attr = path.partition(":")
    if not sep:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ExpanderLookupError(f"Invalid expander path '{path}'. Use 'module:Class'.")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ExpanderLookupError(f"Cannot import module '{module_name}': {exc}") from exc
    try:
        return getattr(module, attr)
    except AttributeError:
        raise ExpanderLookupError(
            f"Module '{module_name}' has no attribute '{attr}'."
        ) from None
