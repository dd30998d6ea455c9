"""Fixtures shared by the urispec test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from urispec.output import OutputFormat, OutputManager, reset_output, set_output
from urispec.template import CachingExpanderRegistry


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Global state
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Drop the installed OutputManager so no test sees another's streams."""
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Template fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def rfc_examples() -> dict[str, Any]:
    """Load the RFC 6570 section 3 example variables and test cases."""
    with open(FIXTURES_DIR / "rfc6570-examples.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def rfc_variables(rfc_examples: dict[str, Any]) -> dict[str, Any]:
    """The RFC 6570 example variable bindings."""
    return dict(rfc_examples["variables"])


@pytest.fixture
def registry() -> CachingExpanderRegistry:
    """A fresh expander registry."""
    return CachingExpanderRegistry()


# ---------------------------------------------------------------------------
# Filesystem and environment
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config, data and the working directory at *tmp_path*.

    Forces the XDG layout, clears ``URISPEC_FORMAT`` and ``NO_COLOR``, and
    returns *tmp_path* so tests can drop project or variables files there.
    """
    monkeypatch.setattr("urispec.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("URISPEC_FORMAT", raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output and CLI
# ---------------------------------------------------------------------------


@pytest.fixture
def plain_output() -> OutputManager:
    """Install a PLAIN-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()
