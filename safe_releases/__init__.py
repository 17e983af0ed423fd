"""
safe-releases: resolve and fetch release binaries for the Safe Network.

Usage:
    from safe_releases import ReleaseRepoActions, ReleaseType, get_running_platform

    repo = ReleaseRepoActions.default_config()
    platform = get_running_platform()
    version = repo.get_latest_version(ReleaseType.SAFENODE)
    archive = repo.download_release_from_s3(
        ReleaseType.SAFENODE, version, platform,
        platform.default_archive_type(), "downloads",
    )
    binary = repo.extract_release_archive(archive, "bin")
"""

__version__ = "0.1.0"

from safe_releases.core import (
    Platform,
    get_running_platform,
    SafeReleasesError,
    PlatformNotSupported,
    LatestReleaseNotFound,
    TagNameVersionParsingFailed,
    UrlIsNotArchive,
    ReleaseBinaryNotFound,
)
from safe_releases.releases import ArchiveType, ReleaseType, Version
from safe_releases.config import ReleaseRepoConfig, load_config
from safe_releases.repository import ReleaseRepoActions, ReleaseRepository

__all__ = [
    "Platform",
    "get_running_platform",
    "SafeReleasesError",
    "PlatformNotSupported",
    "LatestReleaseNotFound",
    "TagNameVersionParsingFailed",
    "UrlIsNotArchive",
    "ReleaseBinaryNotFound",
    "ArchiveType",
    "ReleaseType",
    "Version",
    "ReleaseRepoConfig",
    "load_config",
    "ReleaseRepoActions",
    "ReleaseRepository",
]
