"""
Pytest configuration and shared fixtures for safe-releases tests.
"""

import io
import tarfile
import zipfile
from pathlib import Path

import pytest

from safe_releases.config.parser import ReleaseRepoConfig
from safe_releases.repository import ReleaseRepository

GITHUB_API = "https://github.test"
CRATES_IO = "https://crates.test"
S3_BASE = "https://s3.test"


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
# Archive Builders
# ============================================================================


def _write_tar_gz(path: Path, entries: dict, mode: int = 0o755) -> Path:
    """Write a .tar.gz holding ``entries`` (name -> bytes), in order."""
    with tarfile.open(path, "w:gz") as tar:
        for name, content in entries.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = mode
            tar.addfile(info, io.BytesIO(content))
    return path


def _write_zip(path: Path, entries: dict) -> Path:
    """Write a .zip holding ``entries`` (name -> bytes), in order."""
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return path


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def make_tar_gz():
    """Factory writing a .tar.gz archive from a name -> bytes mapping."""
    return _write_tar_gz


@pytest.fixture
def make_zip():
    """Factory writing a .zip archive from a name -> bytes mapping."""
    return _write_zip


@pytest.fixture
def repo_config() -> ReleaseRepoConfig:
    """Configuration pointing every endpoint at mocked hosts."""
    base_urls = {
        name: f"{S3_BASE}/{name}"
        for name in (
            "faucet",
            "safe",
            "safenode",
            "safenode-manager",
            "safenode_rpc_client",
            "testnet",
            "node-launchpad",
            "nat-detection",
        )
    }
    return ReleaseRepoConfig(
        github_api_base_url=GITHUB_API,
        crates_io_base_url=CRATES_IO,
        base_urls=base_urls,
    )


@pytest.fixture
def release_repo(repo_config) -> ReleaseRepository:
    """ReleaseRepository wired to mocked endpoints."""
    return ReleaseRepository(repo_config)


@pytest.fixture
def download_dir(tmp_path) -> Path:
    path = tmp_path / "download_to"
    path.mkdir()
    return path


@pytest.fixture
def extract_dir(tmp_path) -> Path:
    path = tmp_path / "extract_to"
    path.mkdir()
    return path


@pytest.fixture
def no_network(monkeypatch):
    """Disable network access for tests."""
    import socket

    def guard(*args, **kwargs):
        raise RuntimeError("Network access not allowed in this test")

    monkeypatch.setattr(socket, "socket", guard)
