"""
Pytest configuration and shared fixtures for protogo tests.
"""

import tempfile
import zipfile
from pathlib import Path
from typing import Dict, Generator, Optional

import pytest

from protogo.core.platform import PlatformInfo, clear_platform_cache


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def cache_root(temp_dir: Path) -> Path:
    """Empty protogo cache root."""
    root = temp_dir / "cache"
    root.mkdir()
    return root


@pytest.fixture
def linux_amd64() -> PlatformInfo:
    return PlatformInfo("linux", "amd64")


@pytest.fixture
def windows_amd64() -> PlatformInfo:
    return PlatformInfo("windows", "amd64")


@pytest.fixture
def isolated_tempdir(temp_dir: Path, monkeypatch) -> Path:
    """Redirect the system temporary directory to an inspectable location."""
    system_tmp = temp_dir / "system-tmp"
    system_tmp.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(system_tmp))
    return system_tmp


@pytest.fixture(autouse=True)
def reset_platform_cache():
    """Make sure detect_platform() re-detects in every test."""
    clear_platform_cache()
    yield
    clear_platform_cache()


def _build_zip(
    path: Path,
    files: Dict[str, bytes],
    directories: Optional[list] = None,
    modes: Optional[Dict[str, int]] = None,
) -> Path:
    """
    Create a ZIP archive for tests.

    Args:
        path: Archive to create
        files: Member name -> content
        directories: Directory member names (with trailing '/')
        modes: Member name -> unix permission bits
    """
    modes = modes or {}
    with zipfile.ZipFile(path, "w") as zf:
        for name in directories or []:
            info = zipfile.ZipInfo(name)
            info.external_attr = (0o40755 << 16) | 0x10
            zf.writestr(info, b"")
        for name, content in files.items():
            info = zipfile.ZipInfo(name)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = (0o100000 | modes.get(name, 0o644)) << 16
            zf.writestr(info, content)
    return path


@pytest.fixture
def make_zip():
    """Factory creating ZIP archives, see _build_zip()."""
    return _build_zip
