"""Inspect command -- show how a template is parsed.

Prints one row per chunk: literal text is shown as-is, expressions with
their operator and variable specifications. Useful for checking what a
template will do before wiring it into a client.
"""

from __future__ import annotations

import typer

from urispec.commands import exit_on_error
from urispec.models import Expression
from urispec.output import print_table
from urispec.template import Template


def inspect_command(
    template: str = typer.Argument(help="URI template to parse."),
) -> None:
    """Show the parsed chunks of a URI template.

    Example::

        urispec inspect '/users/{id}{?fields*}'
        urispec --json inspect '{;x,y:3}'
    """
    with exit_on_error():
        parsed = Template.create(template)

    rows: list[list[str]] = []
    for chunk in parsed.chunks:
        if isinstance(chunk, Expression):
            rows.append([
                "expression",
                chunk.value,
                chunk.operator.name.lower(),
                ", ".join(str(v) for v in chunk.variables),
            ])
        else:
            rows.append(["literal", chunk.value, "", ""])

    print_table(["Kind", "Text", "Operator", "Variables"], rows, title=template)
