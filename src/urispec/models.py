"""Pydantic models for parsed templates and for configuration.

**Template models** -- produced once by the template parser and never mutated
afterwards:
    :class:`Operator`, :class:`ExpansionPolicy`, :class:`VariableSpec`,
    :class:`Literal`, and :class:`Expression`.

**Configuration models** -- read from and written to ``config.json``:
    :class:`OutputConfig` and :class:`GlobalConfig`.

Template models are declared ``frozen`` so a parsed
:class:`~urispec.template.Template` can be shared between threads and
expanded concurrently without locking.
"""

from __future__ import annotations

import enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Template models ---


class Operator(str, enum.Enum):
    """RFC 6570 expression operators.

    The member value is the operator character as it appears directly after
    the opening brace. ``SIMPLE`` is the absence of an operator (level 1).
    """

    SIMPLE = ""
    RESERVED = "+"
    FRAGMENT = "#"
    LABEL = "."
    PATH_SEGMENT = "/"
    PATH_STYLE = ";"
    FORM_STYLE = "?"
    FORM_CONTINUATION = "&"


class ExpansionPolicy(BaseModel):
    """Rules governing how one operator renders its variables.

    One instance exists per :class:`Operator`; see
    :mod:`urispec.template.policies` for the table of singletons.
    """

    model_config = ConfigDict(frozen=True)

    prefix: str = Field(description="Emitted once before the first defined variable")
    delimiter: str = Field(description="Joins variables and exploded members")
    empty_pair_separator: str = Field(
        description="Appended to a name whose value is the empty string"
    )
    requires_named_parameters: bool = Field(
        description="Render variables as name=value pairs"
    )
    allows_reserved_characters: bool = Field(
        description="Let RFC 3986 reserved characters pass unencoded"
    )


class VariableSpec(BaseModel):
    """A single variable reference inside an expression.

    ``prefix`` is ``-1`` when no ``:N`` modifier is present. ``explode`` and a
    prefix limit are mutually exclusive; the parser rejects the combination.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    explode: bool = False
    prefix: int = -1

    @property
    def has_prefix(self) -> bool:
        return self.prefix >= 0

    def __str__(self) -> str:
        text = self.name
        if self.has_prefix:
            text += f":{self.prefix}"
        if self.explode:
            text += "*"
        return text


class Literal(BaseModel):
    """Template text outside any expression, copied verbatim on expansion."""

    model_config = ConfigDict(frozen=True)

    text: str

    @property
    def value(self) -> str:
        return self.text


class Expression(BaseModel):
    """A parsed ``{...}`` expression.

    Holds the operator, the ordered variable specifications, and the
    :class:`ExpansionPolicy` bound to the operator at parse time.
    """

    model_config = ConfigDict(frozen=True)

    operator: Operator = Operator.SIMPLE
    variables: tuple[VariableSpec, ...]
    policy: ExpansionPolicy

    @property
    def value(self) -> str:
        """Re-render the expression in RFC 6570 syntax, e.g. ``{?q,page}``."""
        specs = ",".join(str(v) for v in self.variables)
        return "{" + self.operator.value + specs + "}"


Chunk = Union[Literal, Expression]
"""A single element of a parsed template."""


# --- Configuration models ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/urispec/config.json``.

    A project ``urispec.json``, ``URISPEC_FORMAT`` and CLI flags all take
    precedence over these values; see :func:`~urispec.config.resolve_config`.
    """

    output: OutputConfig = Field(default_factory=OutputConfig)
    expanders: dict[str, str] = Field(
        default_factory=dict,
        description="Variable name to custom expander import path (module:Class)",
    )
    variables: dict[str, Any] = Field(
        default_factory=dict,
        description="Default variable bindings merged under CLI-supplied values",
    )
