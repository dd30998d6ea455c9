"""Parse a single ``{...}`` token into an :class:`~urispec.models.Expression`.

Grammar (RFC 6570 section 2.2 - 2.4)::

    expression    =  "{" [ operator ] variable-list "}"
    operator      =  "+" / "#" / "." / "/" / ";" / "?" / "&"
    variable-list =  varspec *( "," varspec )
    varspec       =  varname [ ":" max-length / "*" ]

Variable names may contain alphanumerics, ``_``, ``.``, ``-``, ``[``, ``]``,
``%`` and ``$``. A prefix limit must be an integer in ``[0, 10000]``.

Every failure raises immediately so no partially built template escapes.
"""

from __future__ import annotations

import logging
import re

from urispec.exceptions import RangeError, TemplateSyntaxError
from urispec.models import Expression, Operator, VariableSpec
from urispec.template.policies import policy_for

logger = logging.getLogger(__name__)

MAX_PREFIX = 10000

_OPERATORS = frozenset(op.value for op in Operator if op.value)
_VARNAME_RE = re.compile(r"[A-Za-z0-9_.\-\[\]%$]+")
_VARSPEC_RE = re.compile(
    r"^(?P<name>[^:*]+)(?:(?P<explode>\*)|:(?P<prefix>[^:*]*))?$"
)


def parse_expression(token: str) -> Expression:
    """Parse an expression token, braces included.

    Args:
        token: A token such as ``"{?q,page}"`` produced by
            :func:`~urispec.template.tokenizer.tokenize`.

    Returns:
        The parsed, immutable :class:`~urispec.models.Expression`.

    Raises:
        TemplateSyntaxError: If the token does not match the grammar.
        RangeError: If a prefix limit is outside ``[0, 10000]``.
    """
    if len(token) < 2 or not token.startswith("{") or not token.endswith("}"):
        raise TemplateSyntaxError(
            f"Expression '{token}' is not valid. It must be enclosed in braces."
        )

    body = token[1:-1]
    if "{" in body or "}" in body:
        raise TemplateSyntaxError(f"Expression '{token}' contains nested braces.")

    operator = Operator.SIMPLE
    if body and body[0] in _OPERATORS:
        operator = Operator(body[0])
        body = body[1:]
    elif body and body[0] in "=,!@|":
        # RFC 6570 reserves these for future extensions.
        raise TemplateSyntaxError(
            f"Operator '{body[0]}' in expression '{token}' is not supported."
        )

    if not body:
        raise TemplateSyntaxError(f"Expression '{token}' has no variables.")

    variables = tuple(parse_varspec(spec, token) for spec in body.split(","))
    expression = Expression(
        operator=operator,
        variables=variables,
        policy=policy_for(operator),
    )
    logger.debug("Parsed expression %s into %d variable(s)", token, len(variables))
    return expression


def parse_varspec(spec: str, token: str | None = None) -> VariableSpec:
    """Parse one comma-separated variable specification.

    Args:
        spec: The varspec text, e.g. ``"list*"`` or ``"var:3"``.
        token: The enclosing expression, used only for error messages.

    Returns:
        A :class:`~urispec.models.VariableSpec`.

    Example::

        >>> parse_varspec("var:3")
        VariableSpec(name='var', explode=False, prefix=3)
    """
    where = f" in expression '{token}'" if token else ""
    if not spec:
        raise TemplateSyntaxError(f"Empty variable specification{where}.")

    match = _VARSPEC_RE.match(spec)
    if match is None:
        raise TemplateSyntaxError(f"Variable '{spec}'{where} is not a valid varspec.")

    name = match.group("name")
    if _VARNAME_RE.fullmatch(name) is None:
        raise TemplateSyntaxError(
            f"Variable name '{name}'{where} contains characters that are not allowed."
        )

    prefix = -1
    raw_prefix = match.group("prefix")
    if raw_prefix is not None:
        if not raw_prefix.isascii() or not raw_prefix.isdigit():
            raise TemplateSyntaxError(
                f"Prefix modifier ':{raw_prefix}' on '{name}'{where} is not an integer."
            )
        prefix = int(raw_prefix)
        if prefix > MAX_PREFIX:
            raise RangeError(
                f"Prefix modifier on '{name}'{where} must be between 0 and {MAX_PREFIX}."
            )

    return VariableSpec(name=name, explode=match.group("explode") is not None, prefix=prefix)
