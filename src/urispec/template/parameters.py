"""Template parameters -- variable names paired with the expander to use.

The contract layer describes each templated method argument as a
:class:`TemplateParameter`. Passing parameters (instead of plain strings)
as keys to :meth:`~urispec.template.Template.expand` selects a custom
expander for that variable only.
"""

from __future__ import annotations

from typing import Optional

from urispec.template.registry import ExpanderRef


class TemplateParameter:
    """A named template variable with an optional custom expander.

    Equality and hashing ignore case, so ``TemplateParameter("Name")`` and
    ``TemplateParameter("name")`` describe the same parameter. Binding does
    not: template variable names are case-sensitive, and a parameter only
    supplies the variable whose name it matches exactly.

    Args:
        name: The variable name as it appears in the template.
        expander: An :class:`~urispec.template.expanders.ExpressionExpander`
            subclass or ``module:Class`` import path. ``None`` selects the
            built-in expander for the value's type.

    Raises:
        ValueError: If *name* is empty.

    Example::

        param = TemplateParameter("date", expander=IsoDateExpander)
        template.expand({param: date(2024, 1, 31)})
    """

    __slots__ = ("_name", "_expander")

    def __init__(self, name: str, expander: Optional[ExpanderRef] = None) -> None:
        if not name:
            raise ValueError("name is required")
        self._name = name
        self._expander = expander

    @property
    def name(self) -> str:
        return self._name

    @property
    def expander(self) -> Optional[ExpanderRef]:
        return self._expander

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, TemplateParameter):
            return NotImplemented
        return self._name.lower() == other._name.lower()

    def __hash__(self) -> int:
        return hash(self._name.lower())

    def __repr__(self) -> str:
        if self._expander is None:
            return f"TemplateParameter({self._name!r})"
        return f"TemplateParameter({self._name!r}, expander={self._expander!r})"
