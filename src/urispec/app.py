"""The ``urispec`` command line.

Commands:

* ``urispec expand TEMPLATE -v name=value ...`` -- print the expanded URI.
* ``urispec inspect TEMPLATE`` -- show literal and expression chunks.
* ``urispec config ...`` -- manage default variables and custom expanders.

:func:`main` is the console script. A :class:`~urispec.exceptions.UrispecError`
ends the process with that error's exit code; any other exception leaves a
traceback in ``<data dir>/logs`` and exits with
:data:`~urispec.exit_codes.EXIT_GENERIC_FAILURE`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from urispec import __version__
from urispec.exit_codes import EXIT_GENERIC_FAILURE

EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="urispec",
    help="Expand and inspect RFC 6570 URI templates.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

from urispec.commands.config import config_app  # noqa: E402
from urispec.commands.expand import expand_command  # noqa: E402
from urispec.commands.inspect import inspect_command  # noqa: E402

app.command("expand")(expand_command)
app.command("inspect")(inspect_command)
app.add_typer(config_app, name="config", help="Default variables and custom expanders.")


def _print_version(requested: bool) -> None:
    if requested:
        typer.echo(f"urispec {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send ``urispec.*`` log records to stderr while ``--verbose`` is on."""
    package_logger = logging.getLogger("urispec")
    for handler in [h for h in package_logger.handlers if isinstance(h, RichHandler)]:
        package_logger.removeHandler(handler)
    if verbose:
        package_logger.setLevel(logging.DEBUG)
        package_logger.addHandler(
            RichHandler(console=Console(stderr=True), show_time=False, show_path=False)
        )
    else:
        package_logger.setLevel(logging.NOTSET)


def _requested_format(json_output: bool, plain_output: bool) -> Optional[str]:
    if json_output:
        return "json"
    if plain_output:
        return "plain"
    return None


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True,
        help="Print the version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Write data as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Write data as tab-separated text."),
    no_color: bool = typer.Option(False, "--no-color", help="Never use colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide informational messages."),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug messages and library logs."),
) -> None:
    """Set up output and configuration for the sub-command.

    The resolved :class:`~urispec.models.GlobalConfig` is stored as
    ``ctx.obj["config"]``. A format given by ``--json`` or ``--plain``
    overrides ``URISPEC_FORMAT`` and the config files.
    """
    from urispec.commands import exit_on_error
    from urispec.config import resolve_config
    from urispec.output import OutputFormat, OutputManager, set_output

    _configure_logging(verbose)
    with exit_on_error():
        config = resolve_config(cli_format=_requested_format(json_output, plain_output))

    try:
        output_format = OutputFormat(config.output.format)
    except ValueError:
        output_format = OutputFormat.AUTO
    set_output(
        OutputManager(format=output_format, no_color=no_color, quiet=quiet, verbose=verbose)
    )

    ctx.ensure_object(dict)
    ctx.obj.update(config=config, verbose=verbose)


def _on_sigint(signum: int, frame: Any) -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_INTERRUPTED)


def _setup_signal_handlers() -> None:
    signal.signal(signal.SIGINT, _on_sigint)


def _write_crash_log() -> Path:
    """Save the traceback being handled and return the log file."""
    from urispec.config import get_data_dir

    log_dir = get_data_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_file.write_text(traceback.format_exc(), encoding="utf-8")
    return log_file


def main() -> None:
    """Console-script entry point."""
    from urispec.exceptions import UrispecError
    from urispec.output import error

    _setup_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except UrispecError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
