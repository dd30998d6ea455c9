"""Built-in CLI sub-commands for urispec.

This package groups the Typer command modules that form the CLI's
top-level command tree:

* :mod:`~urispec.commands.expand` -- expand a template with variables.
* :mod:`~urispec.commands.inspect` -- show the parsed chunks of a template.
* :mod:`~urispec.commands.config` -- view and modify global settings.

Single commands export a plain callback registered on the root app; the
``config`` group exports a :class:`typer.Typer` sub-application.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer

from urispec.exceptions import UrispecError
from urispec.output import error


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Report a :class:`~urispec.exceptions.UrispecError` and exit with its code."""
    try:
        yield
    except UrispecError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
