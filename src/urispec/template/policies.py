"""Expansion policies, one immutable instance per RFC 6570 operator.

=========  ======  =========  ==============  =====  ========
Operator   Prefix  Delimiter  Empty-pair sep  Named  Reserved
=========  ======  =========  ==============  =====  ========
(none)     ""      ","        ""              no     no
``+``      ""      ","        ""              no     yes
``#``      "#"     ","        ""              no     yes
``.``      "."     "."        ""              no     no
``/``      "/"     "/"        ""              no     no
``;``      ";"     ";"        ""              yes    no
``?``      "?"     "&"        "="             yes    no
``&``      "&"     "&"        "="             yes    no
=========  ======  =========  ==============  =====  ========
"""

from __future__ import annotations

from types import MappingProxyType

from urispec.exceptions import TemplateSyntaxError
from urispec.models import ExpansionPolicy, Operator

SIMPLE = ExpansionPolicy(
    prefix="",
    delimiter=",",
    empty_pair_separator="",
    requires_named_parameters=False,
    allows_reserved_characters=False,
)

RESERVED = ExpansionPolicy(
    prefix="",
    delimiter=",",
    empty_pair_separator="",
    requires_named_parameters=False,
    allows_reserved_characters=True,
)

FRAGMENT = ExpansionPolicy(
    prefix="#",
    delimiter=",",
    empty_pair_separator="",
    requires_named_parameters=False,
    allows_reserved_characters=True,
)

LABEL = ExpansionPolicy(
    prefix=".",
    delimiter=".",
    empty_pair_separator="",
    requires_named_parameters=False,
    allows_reserved_characters=False,
)

PATH_SEGMENT = ExpansionPolicy(
    prefix="/",
    delimiter="/",
    empty_pair_separator="",
    requires_named_parameters=False,
    allows_reserved_characters=False,
)

# Path-style parameters drop the "=" for empty values: ";name" not ";name=".
PATH_STYLE = ExpansionPolicy(
    prefix=";",
    delimiter=";",
    empty_pair_separator="",
    requires_named_parameters=True,
    allows_reserved_characters=False,
)

FORM_STYLE = ExpansionPolicy(
    prefix="?",
    delimiter="&",
    empty_pair_separator="=",
    requires_named_parameters=True,
    allows_reserved_characters=False,
)

FORM_CONTINUATION = ExpansionPolicy(
    prefix="&",
    delimiter="&",
    empty_pair_separator="=",
    requires_named_parameters=True,
    allows_reserved_characters=False,
)

POLICIES = MappingProxyType(
    {
        Operator.SIMPLE: SIMPLE,
        Operator.RESERVED: RESERVED,
        Operator.FRAGMENT: FRAGMENT,
        Operator.LABEL: LABEL,
        Operator.PATH_SEGMENT: PATH_SEGMENT,
        Operator.PATH_STYLE: PATH_STYLE,
        Operator.FORM_STYLE: FORM_STYLE,
        Operator.FORM_CONTINUATION: FORM_CONTINUATION,
    }
)
"""Read-only operator to policy table."""


def policy_for(operator: Operator | str) -> ExpansionPolicy:
    """Return the singleton policy for *operator*.

    Args:
        operator: An :class:`~urispec.models.Operator` or its character
            (``""`` for simple expansion).

    Raises:
        TemplateSyntaxError: If the character is not an RFC 6570 operator.
    """
    try:
        return POLICIES[Operator(operator)]
    except ValueError:
        raise TemplateSyntaxError(
            f"Operator '{operator}' is not supported. See RFC 6570 section 2.2."
        ) from None
