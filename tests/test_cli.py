"""Tests for the urispec CLI -- expand, inspect, config, and the entry point."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Optional

import pytest
from typer.testing import CliRunner

from urispec import __version__
from urispec.app import _configure_logging, app, main
from urispec.commands.expand import build_bindings, parse_var_options
from urispec.config import load_global_config, save_global_config
from urispec.exceptions import ExpansionError, InvalidUsageError
from urispec.exit_codes import (
    EXIT_EXPANDER_LOOKUP,
    EXIT_EXPANSION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_RANGE_ERROR,
    EXIT_TEMPLATE_SYNTAX,
)
from urispec.models import GlobalConfig, VariableSpec
from urispec.template import ExpressionExpander, TemplateParameter


class Shout(ExpressionExpander):
    def expand(self, variable: VariableSpec, policy: Any, value: Any) -> Optional[str]:
        return self.encode(str(value).upper(), policy)


_SHOUT_PATH = f"{__name__}:Shout"


@pytest.fixture(autouse=True)
def _detach_log_handler():
    """Drop the handler a --verbose invocation attaches to the package logger."""
    yield
    _configure_logging(False)


def _invoke(runner: CliRunner, *args: str):
    """Invoke the app with colour disabled so diagnostics are plain text."""
    return runner.invoke(app, ["--no-color", *args])


# ---------------------------------------------------------------------------
# Variable option parsing
# ---------------------------------------------------------------------------


class TestParseVarOptions:
    def test_scalars(self) -> None:
        assert parse_var_options(["a=1", "b=two"]) == {"a": "1", "b": "two"}

    def test_repeated_name_builds_list(self) -> None:
        assert parse_var_options(["t=a", "t=b", "t=c"]) == {"t": ["a", "b", "c"]}

    def test_value_may_contain_equals(self) -> None:
        assert parse_var_options(["q=a=b"]) == {"q": "a=b"}

    def test_empty_value(self) -> None:
        assert parse_var_options(["e="]) == {"e": ""}

    @pytest.mark.parametrize("option", ["novalue", "=value"])
    def test_invalid(self, option: str) -> None:
        with pytest.raises(InvalidUsageError):
            parse_var_options([option])


class TestBuildBindings:
    def test_configured_expander_becomes_parameter(self) -> None:
        config = GlobalConfig(expanders={"name": _SHOUT_PATH})
        bindings = build_bindings({"name": "bob", "id": 1}, config)
        keys = list(bindings)
        assert keys[0] == TemplateParameter("name")
        assert keys[0].expander == _SHOUT_PATH
        assert keys[1] == "id"


# ---------------------------------------------------------------------------
# expand
# ---------------------------------------------------------------------------


class TestExpandCommand:
    def test_simple(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "expand", "/users/{id}", "-v", "id=42")
        assert result.exit_code == 0, result.output
        assert result.stdout == "/users/42\n"

    def test_repeated_var_is_list(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "expand", "{?tags*}", "-v", "tags=a", "-v", "tags=b")
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "?tags=a&tags=b"

    def test_undefined_variables_elided(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "expand", "/search{?q,page}")
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "/search"

    def test_yaml_vars_file(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        vars_file = isolated_config / "vars.yaml"
        vars_file.write_text("filter:\n  state: open\n  sort: new\nid: 7\n", encoding="utf-8")
        result = _invoke(cli_runner, "expand", "/items/{id}{?filter*}", "--vars", str(vars_file))
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "/items/7?state=open&sort=new"

    def test_var_option_overrides_file(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        vars_file = isolated_config / "vars.json"
        vars_file.write_text(json.dumps({"id": 7}), encoding="utf-8")
        result = _invoke(cli_runner, "expand", "/{id}", "--vars", str(vars_file), "-v", "id=8")
        assert result.stdout.strip() == "/8"

    def test_config_variables_are_defaults(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(variables={"host": "api.example.com"}))
        result = _invoke(cli_runner, "expand", "https://{host}/v1")
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "https://api.example.com/v1"

    def test_project_config_variables(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        (isolated_config / "urispec.json").write_text(
            json.dumps({"variables": {"version": "v2"}}), encoding="utf-8"
        )
        result = _invoke(cli_runner, "expand", "/api/{version}")
        assert result.stdout.strip() == "/api/v2"

    def test_configured_custom_expander(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(expanders={"name": _SHOUT_PATH}))
        result = _invoke(cli_runner, "expand", "/hello/{name}", "-v", "name=bob")
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "/hello/BOB"

    def test_json_output(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "--json", "expand", "{?x}", "-v", "x=1")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"template": "{?x}", "uri": "?x=1"}

    def test_verbose(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "--verbose", "expand", "{x}", "-v", "x=1")
        assert result.exit_code == 0, result.output
        assert "[debug]" in result.output

    def test_verbose_lists_resolved_value_types(
        self, cli_runner: CliRunner, isolated_config: Path
    ) -> None:
        result = _invoke(
            cli_runner, "--verbose", "expand", "{x}{?tags}", "-v", "x=1", "-v", "tags=a", "-v", "tags=b"
        )
        assert result.exit_code == 0, result.output
        assert "Built-in expanders resolved for: str, list" in result.output


class TestExpandErrors:
    def test_invalid_var_option(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "expand", "{x}", "-v", "novalue")
        assert result.exit_code == EXIT_INVALID_USAGE
        assert "Expected NAME=VALUE" in result.output

    def test_syntax_error(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "expand", "/users/{id")
        assert result.exit_code == EXIT_TEMPLATE_SYNTAX
        assert "Error:" in result.output

    def test_prefix_on_list(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "expand", "{list:2}", "-v", "list=a", "-v", "list=b")
        assert result.exit_code == EXIT_RANGE_ERROR

    def test_unknown_expander(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(expanders={"x": "no_such_pkg_xyz:Thing"}))
        result = _invoke(cli_runner, "expand", "{x}", "-v", "x=1")
        assert result.exit_code == EXIT_EXPANDER_LOOKUP

    def test_invalid_uri(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "expand", "http://example.com:{port}/", "-v", "port=http")
        assert result.exit_code == EXIT_EXPANSION_ERROR

    def test_missing_vars_file(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "expand", "{x}", "--vars", "missing.yaml")
        assert result.exit_code == EXIT_GENERIC_FAILURE
        assert "not found" in result.output

    def test_invalid_global_config(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        config_file = isolated_config / "config" / "urispec" / "config.json"
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text("{", encoding="utf-8")
        result = _invoke(cli_runner, "expand", "{x}")
        assert result.exit_code == EXIT_GENERIC_FAILURE
        assert "Invalid global config" in result.output


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


class TestInspectCommand:
    def test_plain_table(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "--plain", "inspect", "/u/{id}{?q,tags*}")
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == [
            "Kind\tText\tOperator\tVariables",
            "literal\t/u/\t\t",
            "expression\t{id}\tsimple\tid",
            "expression\t{?q,tags*}\tform_style\tq, tags*",
        ]

    def test_json(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "--json", "inspect", "{;x:3}")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == [
            {"Kind": "expression", "Text": "{;x:3}", "Operator": "path_style", "Variables": "x:3"}
        ]

    def test_syntax_error(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "inspect", "{a,,b}")
        assert result.exit_code == EXIT_TEMPLATE_SYNTAX

    def test_range_error(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "inspect", "{a:10001}")
        assert result.exit_code == EXIT_RANGE_ERROR


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_show(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(expanders={"a": _SHOUT_PATH}))
        result = _invoke(cli_runner, "--json", "--quiet", "config", "show")
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["expanders"] == {"a": _SHOUT_PATH}
        assert data["output"]["format"] == "auto"

    def test_set_expander(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "config", "set-expander", "name", _SHOUT_PATH)
        assert result.exit_code == 0, result.output
        assert load_global_config().expanders == {"name": _SHOUT_PATH}

    def test_set_expander_rejects_bad_path(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "config", "set-expander", "name", "urispec.models:GlobalConfig")
        assert result.exit_code == EXIT_EXPANDER_LOOKUP
        assert load_global_config().expanders == {}

    def test_unset_expander(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(expanders={"name": _SHOUT_PATH, "other": _SHOUT_PATH}))
        result = _invoke(cli_runner, "config", "unset-expander", "name")
        assert result.exit_code == 0, result.output
        assert load_global_config().expanders == {"other": _SHOUT_PATH}

    def test_unset_missing_expander(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = _invoke(cli_runner, "config", "unset-expander", "name")
        assert result.exit_code == EXIT_INVALID_USAGE
        assert "No expander configured" in result.output


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


class TestEntryPoint:
    def test_version(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.stdout.strip() == f"urispec {__version__}"

    def test_no_args_shows_help(self, cli_runner: CliRunner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, [])
        assert "expand" in result.output
        assert "inspect" in result.output

    def test_main_exits_with_command_code(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("urispec.app._setup_signal_handlers", lambda: None)
        monkeypatch.setattr(sys, "argv", ["urispec", "--no-color", "expand", "{"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == EXIT_TEMPLATE_SYNTAX

    def test_main_maps_escaped_urispec_error(
        self, isolated_config: Path, plain_output, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("urispec.app._setup_signal_handlers", lambda: None)
        def _boom() -> None:
            raise ExpansionError("escaped")

        monkeypatch.setattr("urispec.app.app", _boom)
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == EXIT_EXPANSION_ERROR

    def test_main_writes_crash_log(
        self,
        isolated_config: Path,
        plain_output,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture,
    ) -> None:
        monkeypatch.setattr("urispec.app._setup_signal_handlers", lambda: None)
        def _boom() -> None:
            raise RuntimeError("unexpected")

        monkeypatch.setattr("urispec.app.app", _boom)
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == EXIT_GENERIC_FAILURE
        logs = list((isolated_config / "data" / "urispec" / "logs").glob("crash-*.log"))
        assert len(logs) == 1
        assert "RuntimeError: unexpected" in logs[0].read_text()
        assert "Debug log:" in capsys.readouterr().err
