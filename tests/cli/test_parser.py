"""
Tests for the protogo command-line interface.
"""

from pathlib import Path
from unittest.mock import MagicMock, call, patch

import pytest

from protogo.cli.parser import CLI, InvocationArgs, split_arguments
from protogo.compilers.families import FLATC, PROTOC
from protogo.config.settings import Settings
from protogo.core.exceptions import InstallError
from protogo.core.platform import PlatformInfo

GO_BIN = Path("/home/me/go/bin")


class TestSplitArguments:
    """Test argument splitting around '--'."""

    def test_no_delimiter(self):
        assert split_arguments(["build", "./..."]) is None
        assert split_arguments([]) is None

    def test_full(self):
        args = split_arguments(
            ["generate", "./...", "--", "protoc", "--go_out=.", "api.proto"]
        )

        assert args == InvocationArgs(
            go_args=["generate", "./..."],
            compiler="protoc",
            compiler_args=["--go_out=.", "api.proto"],
        )

    def test_nothing_after_delimiter(self):
        assert split_arguments(["build", "--"]) == InvocationArgs(["build"], "", [])

    def test_only_compiler(self):
        assert split_arguments(["--", "flatc"]) == InvocationArgs([], "flatc", [])

    def test_first_delimiter_wins(self):
        """Test later '--' belong to the compiler arguments."""
        args = split_arguments(["run", ".", "--", "protoc", "--", "x"])

        assert args.go_args == ["run", "."]
        assert args.compiler_args == ["--", "x"]


@pytest.fixture
def go():
    go = MagicMock()
    go.executable = "go"
    go.platform = PlatformInfo("linux", "amd64")
    go.binary_dir.return_value = GO_BIN
    return go


@pytest.fixture
def pipeline(go):
    """Patch go discovery, compiler preparation and process execution."""
    with patch("protogo.cli.parser.GoToolchain") as mock_toolchain, patch(
        "protogo.cli.parser.CompilerManager"
    ) as mock_manager, patch("protogo.cli.parser.run_command") as mock_run:
        mock_toolchain.discover.return_value = go
        mock_manager.return_value.prepare.return_value = Path("/cache/protoc-31.0/bin/protoc")
        mock_run.return_value = 0
        yield mock_toolchain, mock_manager, mock_run


class TestCLI:
    """Test CLI.run()."""

    def test_help_without_delimiter(self, capsys):
        """Test help is printed when '--' is missing."""
        result = CLI(Settings()).run(["build"])

        assert result == 0
        captured = capsys.readouterr()
        assert "'protogo' is an automatization tool" in captured.out
        assert "PROTOGO_PROTOC_VERSION" in captured.out

    def test_unknown_compiler(self, pipeline):
        """Test an unknown compiler fails before anything runs."""
        mock_toolchain, mock_manager, mock_run = pipeline

        assert CLI(Settings()).run(["build", "--", "grpc"]) == 1

        mock_toolchain.discover.assert_not_called()
        mock_run.assert_not_called()

    def test_invalid_settings(self, monkeypatch, tmp_path, capsys):
        """Test configuration errors are reported on stderr."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PROTOGO_LOG_LEVEL", "shout")

        assert CLI().run(["build", "--", "protoc"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_compiler_then_go(self, pipeline, go):
        """Test the compiler runs first with the go binary dir on PATH."""
        mock_toolchain, mock_manager, mock_run = pipeline

        result = CLI(Settings()).run(
            ["generate", "./...", "--", "protoc", "--go_out=.", "api.proto"]
        )

        assert result == 0
        manager = mock_manager.return_value
        manager.prepare.assert_called_once_with(PROTOC)
        manager.ensure_plugins.assert_called_once_with(PROTOC, go, GO_BIN)
        assert mock_run.call_args_list == [
            call(
                Path("/cache/protoc-31.0/bin/protoc"),
                ["--go_out=.", "api.proto"],
                extra_path=GO_BIN,
            ),
            call("go", ["generate", "./..."]),
        ]

    def test_manager_uses_go_platform(self, pipeline, go):
        mock_toolchain, mock_manager, mock_run = pipeline
        settings = Settings()

        CLI(settings).run(["--", "flatc", "--go", "schema.fbs"])

        mock_manager.assert_called_once_with(settings, platform=go.platform)
        mock_manager.return_value.prepare.assert_called_once_with(FLATC)

    def test_compiler_failure_stops(self, pipeline):
        """Test a failing compiler status is returned and go is skipped."""
        mock_toolchain, mock_manager, mock_run = pipeline
        mock_run.return_value = 2

        assert CLI(Settings()).run(["build", "--", "protoc", "bad.proto"]) == 2
        assert mock_run.call_count == 1

    def test_go_failure(self, pipeline):
        mock_toolchain, mock_manager, mock_run = pipeline
        mock_run.side_effect = [0, 1]

        assert CLI(Settings()).run(["build", "--", "protoc", "a.proto"]) == 1

    def test_no_compiler(self, pipeline):
        """Test only go runs when no compiler is named."""
        mock_toolchain, mock_manager, mock_run = pipeline

        assert CLI(Settings()).run(["build", "./...", "--"]) == 0

        mock_manager.assert_not_called()
        mock_run.assert_called_once_with("go", ["build", "./..."])

    def test_compiler_without_arguments(self, pipeline):
        """Test the compiler is installed but not run without arguments."""
        mock_toolchain, mock_manager, mock_run = pipeline

        assert CLI(Settings()).run(["--", "protoc"]) == 0

        mock_manager.return_value.prepare.assert_called_once_with(PROTOC)
        mock_run.assert_not_called()

    def test_install_error(self, pipeline):
        """Test pipeline errors turn into exit status 1."""
        mock_toolchain, mock_manager, mock_run = pipeline
        mock_manager.return_value.prepare.side_effect = InstallError("broken archive")

        assert CLI(Settings()).run(["build", "--", "protoc", "a.proto"]) == 1
        mock_run.assert_not_called()

    def test_keyboard_interrupt(self, pipeline):
        mock_toolchain, mock_manager, mock_run = pipeline
        mock_run.side_effect = KeyboardInterrupt

        assert CLI(Settings()).run(["build", "--"]) == 130

    def test_configured_go_executable(self, pipeline):
        mock_toolchain, mock_manager, mock_run = pipeline

        CLI(Settings(go_executable="/opt/go/bin/go")).run(["version", "--"])

        mock_toolchain.discover.assert_called_once_with("/opt/go/bin/go")
