"""Where urispec keeps its settings, and how they are layered.

Files:

* ``config.json`` in :func:`get_config_dir` -- the user's
  :class:`~urispec.models.GlobalConfig` (output format, custom expanders,
  default variables).
* ``./urispec.json`` -- optional per-project overrides of the same keys.
* Variables files passed to ``urispec expand --vars`` -- JSON, or YAML when
  the name ends in ``.yaml``/``.yml``.

On Linux and the BSDs the directories follow the XDG base directory
variables; elsewhere everything lives under ``~/.urispec``.

The effective configuration is built by :func:`resolve_config`, highest
precedence first: the ``--json``/``--plain`` flag, ``URISPEC_FORMAT``, the
project file, the user file, then model defaults.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml

from urispec.exceptions import ConfigError
from urispec.models import GlobalConfig

logger = logging.getLogger(__name__)

_APP_NAME = "urispec"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "urispec.json"
_FORMAT_ENV = "URISPEC_FORMAT"
_YAML_SUFFIXES = (".yaml", ".yml")

# Project entries for these keys are merged into the user's, not replaced.
_MERGED_KEYS = ("expanders", "variables")


# --- Directories ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, *default: str) -> Path:
    if _is_xdg_platform():
        base = Path(os.environ.get(xdg_var) or Path.home().joinpath(*default))
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``config.json``; created on first use.

    ``$XDG_CONFIG_HOME/urispec`` (default ``~/.config/urispec``) on XDG
    platforms, ``~/.urispec`` elsewhere.
    """
    return _app_dir("XDG_CONFIG_HOME", ".config")


def get_data_dir() -> Path:
    """Directory for crash logs; created on first use.

    ``$XDG_DATA_HOME/urispec`` (default ``~/.local/share/urispec``) on XDG
    platforms, ``~/.urispec`` elsewhere.
    """
    return _app_dir("XDG_DATA_HOME", ".local", "share")


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* through a sibling temp file and ``os.replace``.

    The original file, if any, is untouched when writing fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handle, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as tmp_file:
            tmp_file.write(data)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# --- Config files ---


def load_global_config() -> GlobalConfig:
    """Read the user's ``config.json``, or return defaults when there is none.

    Raises:
        ConfigError: The file is not valid JSON or does not match
            :class:`~urispec.models.GlobalConfig`.
    """
    path = get_config_dir() / _CONFIG_FILENAME
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    text = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    _atomic_write(get_config_dir() / _CONFIG_FILENAME, text)


def load_project_config() -> Optional[dict[str, Any]]:
    """Read ``./urispec.json`` as a raw dict, or ``None`` if it is absent.

    The dict is validated later, after it is merged in :func:`resolve_config`.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def resolve_config(cli_format: Optional[str] = None) -> GlobalConfig:
    """Build the effective configuration.

    ``expanders`` and ``variables`` from the project file are merged name
    by name over the user's; a project ``output`` section replaces the
    user's. The output format is then overridden by ``URISPEC_FORMAT`` and
    finally by *cli_format*.

    Raises:
        ConfigError: Either file is unreadable or the merged result is
            invalid.
    """
    config = load_global_config()

    project = load_project_config()
    if project is not None:
        merged = config.model_dump(mode="json")
        for key in _MERGED_KEYS:
            section = project.get(key) or {}
            if not isinstance(section, dict):
                raise ConfigError(f"Invalid project config: '{key}' must be an object")
            merged[key].update(section)
        if "output" in project:
            merged["output"] = project["output"]
        try:
            config = GlobalConfig.model_validate(merged)
        except ValueError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    for override in (os.environ.get(_FORMAT_ENV), cli_format):
        if override:
            config.output.format = override
    return config


def load_variables_file(path: Path) -> dict[str, Any]:
    """Read the mapping of template variables stored in *path*.

    An empty YAML document is an empty mapping.

    Raises:
        ConfigError: The file is missing, unreadable or unparsable, or its
            top level is not a mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Variables file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read variables file {path}: {exc}") from exc

    is_yaml = path.suffix.lower() in _YAML_SUFFIXES
    try:
        data = yaml.safe_load(text) if is_yaml else json.loads(text)
    except (yaml.YAMLError, ValueError) as exc:
        raise ConfigError(f"Invalid variables file {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Variables file {path} must contain a mapping, not {type(data).__name__}"
        )
    logger.debug("Loaded %d variable(s) from %s", len(data), path)
    return data
