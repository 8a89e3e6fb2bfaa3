"""
Tests for protogo.toolchain.go module.
"""

import os
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from protogo.compilers.families import GoPackage
from protogo.core.exceptions import GoToolchainError, PluginInstallError
from protogo.core.platform import PlatformInfo
from protogo.toolchain.go import GoToolchain

PROTOC_GEN_GO = GoPackage("google.golang.org/protobuf/cmd", "protoc-gen-go")


def _completed(stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout, stderr=stderr
    )


@pytest.fixture
def go(linux_amd64):
    return GoToolchain("go", linux_amd64)


class TestDiscover:
    """Tests for GoToolchain.discover()."""

    def test_found_on_path(self, linux_amd64):
        """Test 'go' is looked up on PATH by default."""
        with patch(
            "protogo.toolchain.go.find_executable", return_value=Path("/usr/bin/go")
        ) as mock_find:
            go = GoToolchain.discover(platform=linux_amd64)

        mock_find.assert_called_once_with("go")
        assert go.executable == "go"
        assert go.platform == linux_amd64

    def test_windows_name(self, windows_amd64):
        with patch(
            "protogo.toolchain.go.find_executable", return_value=Path("C:/Go/bin/go.exe")
        ) as mock_find:
            GoToolchain.discover(platform=windows_amd64)

        mock_find.assert_called_once_with("go.exe")

    def test_not_found(self, linux_amd64):
        """Test a missing go executable."""
        with patch("protogo.toolchain.go.find_executable", return_value=None):
            with pytest.raises(GoToolchainError, match="couldn't be found: go1.21"):
                GoToolchain.discover("go1.21", platform=linux_amd64)

    def test_explicit_path(self, temp_dir, linux_amd64):
        """Test a configured path is checked directly."""
        go_path = temp_dir / "go"
        go_path.write_text("#!/bin/sh\n")

        go = GoToolchain.discover(str(go_path), platform=linux_amd64)

        assert go.executable == str(go_path)

    def test_relative_path(self, temp_dir, linux_amd64, monkeypatch):
        """Test './go' is checked in place instead of on PATH."""
        (temp_dir / "go").write_text("#!/bin/sh\n")
        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv("PATH", "")
        relative = os.path.join(".", "go")

        with patch("protogo.toolchain.go.find_executable") as mock_find:
            go = GoToolchain.discover(relative, platform=linux_amd64)

        assert go.executable == relative
        mock_find.assert_not_called()

    def test_explicit_path_missing(self, temp_dir, linux_amd64):
        with pytest.raises(GoToolchainError):
            GoToolchain.discover(str(temp_dir / "missing" / "go"), platform=linux_amd64)


class TestLookupEnv:
    """Tests for 'go env' lookups."""

    @patch("protogo.toolchain.go.subprocess.run")
    def test_value(self, mock_run, go):
        mock_run.return_value = _completed("/home/me/go/bin\n")

        assert go.lookup_env("GOBIN") == "/home/me/go/bin"
        args, kwargs = mock_run.call_args
        assert args[0] == ["go", "env", "GOBIN"]
        assert kwargs["capture_output"] is True

    @patch("protogo.toolchain.go.subprocess.run")
    def test_empty_value(self, mock_run, go):
        mock_run.return_value = _completed("\n")

        assert go.lookup_env("GOBIN") is None

    @patch("protogo.toolchain.go.subprocess.run")
    def test_failure(self, mock_run, go):
        mock_run.return_value = _completed("", returncode=1)

        assert go.lookup_env("GOBIN") is None

    @patch("protogo.toolchain.go.subprocess.run", side_effect=OSError("not found"))
    def test_cannot_start(self, mock_run, go):
        assert go.lookup_env("GOPATH") is None


class TestBinaryDir:
    """Tests for GoToolchain.binary_dir()."""

    def test_gobin(self, go):
        with patch.object(go, "lookup_env", side_effect=lambda key: {"GOBIN": "/opt/gobin"}.get(key)):
            assert go.binary_dir() == Path("/opt/gobin")

    def test_gopath(self, go):
        """Test the first GOPATH entry is used."""
        gopath = os.pathsep.join(["/work/gopath", "/other/gopath"])
        with patch.object(go, "lookup_env", side_effect=lambda key: {"GOPATH": gopath}.get(key)):
            assert go.binary_dir() == Path("/work/gopath/bin")

    def test_home_default(self, go):
        with patch.object(go, "lookup_env", return_value=None):
            with patch("pathlib.Path.home", return_value=Path("/home/me")):
                assert go.binary_dir() == Path("/home/me/go/bin")


class TestEnsurePackageInstalled:
    """Tests for plugin installation."""

    @patch("protogo.toolchain.go.subprocess.run")
    def test_already_installed(self, mock_run, go, temp_dir):
        """Test an existing plugin binary is not reinstalled."""
        (temp_dir / "protoc-gen-go").write_bytes(b"plugin")

        result = go.ensure_package_installed(PROTOC_GEN_GO, temp_dir)

        assert result == temp_dir / "protoc-gen-go"
        mock_run.assert_not_called()

    @patch("protogo.toolchain.go.subprocess.run")
    def test_installs_missing(self, mock_run, go, temp_dir):
        """Test 'go install' runs with host GOOS/GOARCH."""

        def fake_install(command, **kwargs):
            (temp_dir / "protoc-gen-go").write_bytes(b"plugin")
            return _completed()

        mock_run.side_effect = fake_install

        result = go.ensure_package_installed(PROTOC_GEN_GO, temp_dir)

        assert result == temp_dir / "protoc-gen-go"
        args, kwargs = mock_run.call_args
        assert args[0] == [
            "go",
            "install",
            "google.golang.org/protobuf/cmd/protoc-gen-go@latest",
        ]
        assert kwargs["env"]["GOOS"] == "linux"
        assert kwargs["env"]["GOARCH"] == "amd64"

    @patch("protogo.toolchain.go.subprocess.run")
    def test_windows_plugin_name(self, mock_run, temp_dir):
        (temp_dir / "protoc-gen-go.exe").write_bytes(b"plugin")
        go = GoToolchain("go.exe", PlatformInfo("windows", "amd64"))

        assert go.ensure_package_installed(PROTOC_GEN_GO, temp_dir).name == (
            "protoc-gen-go.exe"
        )
        mock_run.assert_not_called()

    @patch("protogo.toolchain.go.subprocess.run")
    def test_install_fails(self, mock_run, go, temp_dir):
        """Test a failing 'go install' reports its output."""
        mock_run.return_value = _completed(
            "", returncode=1, stderr="go: module lookup disabled"
        )

        with pytest.raises(PluginInstallError, match="module lookup disabled"):
            go.ensure_package_installed(PROTOC_GEN_GO, temp_dir)

    @patch("protogo.toolchain.go.subprocess.run")
    def test_still_missing(self, mock_run, go, temp_dir):
        """Test success without a binary is an error."""
        mock_run.return_value = _completed()

        with pytest.raises(PluginInstallError, match="still could not find"):
            go.ensure_package_installed(PROTOC_GEN_GO, temp_dir)

    @patch(
        "protogo.toolchain.go.subprocess.run",
        side_effect=subprocess.TimeoutExpired(cmd="go", timeout=600),
    )
    def test_timeout(self, mock_run, go, temp_dir):
        with pytest.raises(PluginInstallError):
            go.ensure_package_installed(PROTOC_GEN_GO, temp_dir)

    def test_looks_up_binary_dir(self, go, temp_dir):
        """Test the binary directory is looked up when not given."""
        (temp_dir / "protoc-gen-go").write_bytes(b"plugin")
        go.binary_dir = MagicMock(return_value=temp_dir)

        assert go.ensure_package_installed(PROTOC_GEN_GO) == temp_dir / "protoc-gen-go"
        go.binary_dir.assert_called_once_with()
