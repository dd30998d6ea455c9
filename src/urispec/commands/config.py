"""``urispec config`` -- inspect the user config and manage custom expanders.

Provides the ``urispec config`` sub-command group for reading and updating
the user's global configuration file (:class:`~urispec.models.GlobalConfig`).
Settings are persisted in the urispec config directory.
"""

from __future__ import annotations

import typer

from urispec.commands import exit_on_error
from urispec.exit_codes import EXIT_INVALID_USAGE
from urispec.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Print the user configuration.

    Example::

        urispec config show
        urispec --json config show
    """
    from urispec.config import get_config_dir, load_global_config

    with exit_on_error():
        config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set-expander")
def config_set_expander(
    name: str = typer.Argument(help="Template variable name."),
    path: str = typer.Argument(help="Expander import path, e.g. 'mypkg.expanders:Upper'."),
) -> None:
    """Use a custom expander for a variable.

    The expander is imported and instantiated before the setting is saved,
    so a typo fails immediately.

    Example::

        urispec config set-expander date mypkg.expanders:IsoDate
    """
    from urispec.config import load_global_config, save_global_config
    from urispec.template import CachingExpanderRegistry

    with exit_on_error():
        CachingExpanderRegistry().get_expander(path)
        config = load_global_config()
        config.expanders[name] = path
        save_global_config(config)
    success(f"Set expander for '{name}' = {path}")


@config_app.command("unset-expander")
def config_unset_expander(
    name: str = typer.Argument(help="Template variable name."),
) -> None:
    """Remove the custom expander for a variable.

    Example::

        urispec config unset-expander date
    """
    from urispec.config import load_global_config, save_global_config

    with exit_on_error():
        config = load_global_config()
        if name not in config.expanders:
            error(f"No expander configured for '{name}'")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        del config.expanders[name]
        save_global_config(config)
    success(f"Removed expander for '{name}'")
