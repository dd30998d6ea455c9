"""Expand command -- render a URI template with variables.

Variables are collected from three sources, lowest precedence first:

1. ``variables`` in the global or project config.
2. A JSON or YAML file passed with ``--vars``.
3. ``-v name=value`` options. Repeating a name binds a list.

Variables listed under ``expanders`` in the config are bound through a
:class:`~urispec.template.TemplateParameter` so that their custom expander
is used.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from urispec.commands import exit_on_error
from urispec.config import load_variables_file, resolve_config
from urispec.exceptions import InvalidUsageError
from urispec.models import GlobalConfig
from urispec.output import OutputFormat, debug, format_response, get_output, print_data
from urispec.template import CachingExpanderRegistry, Template, TemplateParameter


def parse_var_options(options: list[str]) -> dict[str, Any]:
    """Turn ``name=value`` strings into variable bindings.

    The first ``=`` separates the name from the value, so values may
    themselves contain ``=``. A name given more than once collects its
    values into a list, in order.

    Raises:
        InvalidUsageError: If an option has no ``=`` or an empty name.
    """
    variables: dict[str, Any] = {}
    for option in options:
        name, sep, value = option.partition("=")
        if not sep or not name:
            raise InvalidUsageError(
                f"Invalid variable '{option}'. Expected NAME=VALUE."
            )
        if name not in variables:
            variables[name] = value
        elif isinstance(variables[name], list):
            variables[name].append(value)
        else:
            variables[name] = [variables[name], value]
    return variables


def build_bindings(
    variables: dict[str, Any], config: GlobalConfig
) -> dict[Any, Any]:
    """Key each variable by name, or by a parameter carrying its custom expander."""
    bindings: dict[Any, Any] = {}
    for name, value in variables.items():
        expander = config.expanders.get(name)
        if expander:
            bindings[TemplateParameter(name, expander=expander)] = value
        else:
            bindings[name] = value
    return bindings


def expand_command(
    ctx: typer.Context,
    template: str = typer.Argument(help="URI template, e.g. '/users/{id}{?fields*}'."),
    var: Optional[list[str]] = typer.Option(
        None, "--var", "-v", help="Variable as NAME=VALUE. Repeat a name to bind a list."
    ),
    vars_file: Optional[Path] = typer.Option(
        None, "--vars", help="JSON or YAML file of variables."
    ),
) -> None:
    """Expand a URI template.

    Prints the expanded URI to stdout. With ``--json`` the template and
    result are printed as an object.

    Example::

        urispec expand '/users/{id}{?fields*}' -v id=42 -v fields=name -v fields=email
        urispec expand '{+base}/search{?q}' --vars vars.yaml
    """
    with exit_on_error():
        config = (ctx.obj or {}).get("config") or resolve_config()

        variables: dict[str, Any] = dict(config.variables)
        if vars_file is not None:
            variables.update(load_variables_file(vars_file))
        variables.update(parse_var_options(var or []))
        debug(f"Expanding with variables: {', '.join(variables) or '(none)'}")

        parsed = Template.create(template)
        uri = parsed.expand(build_bindings(variables, config))

    registry = parsed.registry
    if isinstance(registry, CachingExpanderRegistry):
        resolved = ", ".join(t.__name__ for t in registry.cached_types())
        debug(f"Built-in expanders resolved for: {resolved or '(none)'}")

    if get_output().format == OutputFormat.JSON:
        format_response({"template": template, "uri": uri})
    else:
        print_data(uri)
