"""Split a URI template into literal and expression tokens.

The scan is a single left-to-right pass tracking whether it is inside an
expression and how deeply braces are nested. Nested braces never open a
new expression; ``foo{bar{baz}}`` yields ``["foo", "{bar{baz}}"]`` and the
parser then rejects the nested token. No escaping is supported.
"""

from __future__ import annotations


def tokenize(template: str) -> list[str]:
    """Split *template* into an ordered list of substrings.

    Each token is either literal text or a complete ``{...}`` expression
    including its braces. An unterminated ``{`` produces a final token that
    starts with ``{`` but has no closing brace.

    Example::

        >>> tokenize("/users/{id}{?fields}")
        ['/users/', '{id}', '{?fields}']
    """
    tokens: list[str] = []
    outside = True
    level = 0
    last = 0

    for index, character in enumerate(template):
        if character == "{":
            if outside:
                if last < index:
                    tokens.append(template[last:index])
                last = index
                outside = False
            else:
                level += 1
        elif character == "}" and not outside:
            if level > 0:
                level -= 1
            else:
                tokens.append(template[last : index + 1])
                last = index + 1
                outside = True

    if last < len(template):
        tokens.append(template[last:])
    return tokens


def is_expression_token(token: str) -> bool:
    """Return ``True`` if *token* opens an expression."""
    return token.startswith("{")
