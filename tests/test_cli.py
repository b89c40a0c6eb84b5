"""Unit tests for the CLI entry point (woolball_scaffold.cli).

Tests cover:
- Argument parsing
- --list output
- run(): cancel paths (exit 0), unknown selection and failures (exit 1),
  happy path wiring of selector -> registry -> materialize
- main(): exit codes and --base-dir
"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from woolball_scaffold.cli import build_parser, list_templates, main, run
from woolball_scaffold.config import ScaffoldConfig
from woolball_scaffold.errors import (
    FilesystemError,
    NetworkError,
    NotAProjectRoot,
    OperationCancelled,
)
from woolball_scaffold.scaffolder import registry
from woolball_scaffold.scaffolder.models import Feature, MaterializationResult, Stack, Variant
from woolball_scaffold.selector import Selector

pytestmark = pytest.mark.unit

MATERIALIZE = "woolball_scaffold.cli.materialize"


def _args(**overrides) -> argparse.Namespace:
    values = {"feature": None, "stack": None, "variant": None, "yes": False}
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.fixture
def selector() -> MagicMock:
    mock = MagicMock(spec=Selector)
    mock.select_feature.return_value = Feature.SPEECH_TO_TEXT
    mock.select_stack.return_value = Stack.DOTNET
    mock.select_variant.return_value = Variant.MINIMAL_API
    mock.ask_secret.return_value = "XYZ123"
    return mock


@pytest.fixture(autouse=True)
def no_env_key():
    with patch.dict(os.environ, {}, clear=False):
        os.environ.pop("WOOLBALL_API_KEY", None)
        yield


def _result(tmp_path: Path) -> MaterializationResult:
    return MaterializationResult(
        destination_root=tmp_path,
        written={"Program.cs": tmp_path / "Program.cs"},
    )


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.feature is None
        assert args.stack is None
        assert args.variant is None
        assert args.base_dir is None
        assert args.yes is False
        assert args.list is False
        assert args.verbose is False

    def test_flags(self):
        args = build_parser().parse_args(
            ["--stack", "NODEJS", "--variant", "express", "-y", "-v", "--base-dir", "/tmp/x"]
        )
        assert args.stack == "NODEJS"
        assert args.variant == "express"
        assert args.yes is True
        assert args.verbose is True
        assert args.base_dir == "/tmp/x"


class TestListTemplates:
    def test_lists_every_template(self, capsys):
        list_templates()
        out = capsys.readouterr().out
        assert "Available templates" in out
        assert "DOTNET" in out
        assert "nextjs" in out
        assert "express" in out


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------


class TestRun:
    def test_cancel_at_feature_menu(self, selector, capsys):
        selector.select_feature.return_value = None
        with patch(MATERIALIZE, new=AsyncMock()) as materialize:
            assert run(_args(), ScaffoldConfig(), selector) == 0
        assert "bye." in capsys.readouterr().out
        materialize.assert_not_called()
        selector.select_stack.assert_not_called()

    def test_happy_path(self, selector, tmp_path, capsys):
        config = ScaffoldConfig(base_dir=tmp_path)
        with patch(MATERIALIZE, new=AsyncMock(return_value=_result(tmp_path))) as materialize:
            assert run(_args(), config, selector) == 0

        manifest = registry.resolve("SPEECH-TO-TEXT", "DOTNET", "minimal-api")
        materialize.assert_awaited_once_with(manifest, "XYZ123", config)
        selector.guard_overwrite.assert_called_once_with(
            manifest, tmp_path / "WoolBallMinimalApi", assume_yes=False
        )
        selector.check_project.assert_called_once_with(manifest, tmp_path)
        out = capsys.readouterr().out
        assert "Files created at:" in out
        assert "Program.cs" in out
        assert "dotnet run" in out

    def test_arguments_skip_prompts(self, selector, tmp_path):
        args = _args(feature="SPEECH-TO-TEXT", stack="NODEJS", variant="express", yes=True)
        with patch(MATERIALIZE, new=AsyncMock(return_value=_result(tmp_path))) as materialize:
            assert run(args, ScaffoldConfig(base_dir=tmp_path), selector) == 0
        selector.select_feature.assert_not_called()
        selector.select_stack.assert_not_called()
        selector.select_variant.assert_not_called()
        assert selector.guard_overwrite.call_args.kwargs["assume_yes"] is True
        manifest = materialize.await_args.args[0]
        assert manifest is registry.resolve("SPEECH-TO-TEXT", "NODEJS", "express")

    def test_env_api_key_skips_prompt(self, selector, tmp_path):
        with patch.dict(os.environ, {"WOOLBALL_API_KEY": "FROM-ENV"}):
            with patch(MATERIALIZE, new=AsyncMock(return_value=_result(tmp_path))) as materialize:
                assert run(_args(), ScaffoldConfig(base_dir=tmp_path), selector) == 0
        selector.ask_secret.assert_not_called()
        assert materialize.await_args.args[1] == "FROM-ENV"

    def test_unknown_selection(self, selector, capsys):
        args = _args(stack="DOTNET", variant="nextjs")
        with patch(MATERIALIZE, new=AsyncMock()) as materialize:
            assert run(args, ScaffoldConfig(), selector) == 1
        materialize.assert_not_called()
        selector.ask_secret.assert_not_called()
        assert "Unsupported template" in capsys.readouterr().out

    def test_declined_overwrite_exits_cleanly(self, selector, tmp_path, capsys):
        selector.guard_overwrite.side_effect = OperationCancelled("Operation canceled by user.")
        with patch(MATERIALIZE, new=AsyncMock()) as materialize:
            assert run(_args(), ScaffoldConfig(base_dir=tmp_path), selector) == 0
        materialize.assert_not_called()
        assert "Operation canceled by user." in capsys.readouterr().out
        assert list(tmp_path.iterdir()) == []

    def test_not_a_project_root(self, selector, tmp_path, capsys):
        selector.check_project.side_effect = NotAProjectRoot(tmp_path, "Next.js")
        with patch(MATERIALIZE, new=AsyncMock()) as materialize:
            assert run(_args(), ScaffoldConfig(base_dir=tmp_path), selector) == 1
        materialize.assert_not_called()
        assert "root of your Next.js project" in capsys.readouterr().out

    @pytest.mark.parametrize(
        "error",
        [
            NetworkError("https://x.test/a", httpx.ConnectError("refused"), relative_path="Program.cs"),
            FilesystemError(Path("/ro/Program.cs"), PermissionError("denied"), relative_path="Program.cs"),
        ],
    )
    def test_materialize_failure(self, selector, tmp_path, capsys, error):
        with patch(MATERIALIZE, new=AsyncMock(side_effect=error)):
            assert run(_args(), ScaffoldConfig(base_dir=tmp_path), selector) == 1
        out = capsys.readouterr().out
        assert "Error downloading template" in out
        assert "Program.cs" in out

    def test_secret_never_printed(self, selector, tmp_path, capsys):
        selector.ask_secret.return_value = "TOP-SECRET-VALUE"
        with patch(MATERIALIZE, new=AsyncMock(return_value=_result(tmp_path))):
            run(_args(), ScaffoldConfig(base_dir=tmp_path), selector)
        assert "TOP-SECRET-VALUE" not in capsys.readouterr().out


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------


class TestMain:
    @pytest.fixture(autouse=True)
    def quiet_logging(self):
        with patch("woolball_scaffold.cli.configure_logging"):
            yield

    def test_list_does_not_prompt(self, capsys):
        with patch("woolball_scaffold.cli.run") as run_mock:
            main(["--list"])
        run_mock.assert_not_called()
        assert "Available templates" in capsys.readouterr().out

    def test_success_returns_normally(self):
        with patch("woolball_scaffold.cli.run", return_value=0):
            main([])

    def test_failure_exits_nonzero(self):
        with patch("woolball_scaffold.cli.run", return_value=1):
            with pytest.raises(SystemExit) as excinfo:
                main([])
        assert excinfo.value.code == 1

    def test_base_dir_reaches_config(self, tmp_path):
        with patch("woolball_scaffold.cli.run", return_value=0) as run_mock:
            main(["--base-dir", str(tmp_path)])
        config = run_mock.call_args.args[1]
        assert config.base_dir == tmp_path
