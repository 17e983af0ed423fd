"""YAML configuration parser for safe-releases.

This module provides the settings a ReleaseRepository is built from, loaded
from an optional safe-releases.yaml file and the environment.

Example safe-releases.yaml::

    github_api_base_url: https://api.github.com
    github_org: maidsafe
    user_agent: my-deployer
    cutoff_days: 14
    base_urls:
      safenode: https://mirror.example.com/sn-node
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional

import yaml

from safe_releases.core.exceptions import ConfigError
from safe_releases.releases.release_type import ReleaseType

GITHUB_API_URL = "https://api.github.com"
GITHUB_ORG_NAME = "maidsafe"
GITHUB_REPO_NAME = "safe_network"
CRATES_IO_URL = "https://crates.io"

ENV_GITHUB_API_URL = "SAFE_RELEASES_GITHUB_API_URL"
ENV_CRATES_IO_URL = "SAFE_RELEASES_CRATES_IO_URL"
ENV_GITHUB_TOKEN = "GITHUB_TOKEN"


@dataclass
class ReleaseRepoConfig:
    """Endpoints and limits used to resolve and download releases."""

    github_api_base_url: str = GITHUB_API_URL
    github_org: str = GITHUB_ORG_NAME
    github_repo: str = GITHUB_REPO_NAME  # Shared multi-binary repository
    crates_io_base_url: str = CRATES_IO_URL
    base_urls: Dict[str, str] = field(default_factory=dict)  # display name -> URL
    user_agent: str = "safe-releases"
    github_token: Optional[str] = None
    per_page: int = 100
    cutoff_days: int = 14
    request_timeout: Optional[float] = None  # None: callers apply their own deadline

    def base_url_for(self, release_type: ReleaseType) -> str:
        """Get the distribution base URL for a release type."""
        url = self.base_urls.get(release_type.display_name)
        if url is None:
            url = release_type.info.default_base_url
        return url.rstrip("/")


def parse_config(config_path: Path) -> ReleaseRepoConfig:
    """
    Parse a safe-releases.yaml configuration file.

    Args:
        config_path: Path to the YAML file

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If the file is missing or the configuration is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        return ReleaseRepoConfig()

    return _parse_and_validate(data)


def load_config(config_path: Optional[Path] = None) -> ReleaseRepoConfig:
    """
    Build configuration from an optional file plus environment overrides.

    Environment variables take precedence over the file:
    SAFE_RELEASES_GITHUB_API_URL, SAFE_RELEASES_CRATES_IO_URL, GITHUB_TOKEN.
    """
    config = parse_config(config_path) if config_path else ReleaseRepoConfig()

    if os.environ.get(ENV_GITHUB_API_URL):
        config.github_api_base_url = os.environ[ENV_GITHUB_API_URL]
    if os.environ.get(ENV_CRATES_IO_URL):
        config.crates_io_base_url = os.environ[ENV_CRATES_IO_URL]
    if os.environ.get(ENV_GITHUB_TOKEN):
        config.github_token = os.environ[ENV_GITHUB_TOKEN]

    return config


def _parse_and_validate(data: dict) -> ReleaseRepoConfig:
    """Parse and validate configuration data."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    known = {f.name for f in fields(ReleaseRepoConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    for key in (
        "github_api_base_url",
        "github_org",
        "github_repo",
        "crates_io_base_url",
        "user_agent",
    ):
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"{key} must be a string")

    if data.get("github_token") is not None and not isinstance(
        data["github_token"], str
    ):
        raise ConfigError("github_token must be a string")

    for key in ("per_page", "cutoff_days"):
        if key in data:
            value = data[key]
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{key} must be a positive integer")

    if "per_page" in data and data["per_page"] > 100:
        raise ConfigError("per_page cannot exceed 100")

    timeout = data.get("request_timeout")
    if timeout is not None and (
        isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0
    ):
        raise ConfigError("request_timeout must be a positive number")

    base_urls = _parse_base_urls(data.get("base_urls") or {})

    values = {k: v for k, v in data.items() if k != "base_urls"}
    return ReleaseRepoConfig(base_urls=base_urls, **values)


def _parse_base_urls(data) -> Dict[str, str]:
    """Parse per-release-type base URL overrides."""
    if not isinstance(data, dict):
        raise ConfigError("base_urls must be a dictionary")

    base_urls = {}
    for name, url in data.items():
        try:
            release_type = ReleaseType.from_name(str(name))
        except ValueError:
            raise ConfigError(f"base_urls references unknown release type: {name}")
        if not isinstance(url, str) or not url:
            raise ConfigError(f"base_urls.{name} must be a non-empty string")
        base_urls[release_type.display_name] = url

    return base_urls
