"""
Core functionality for safe-releases.

This package contains the foundational modules that release resolution and
retrieval depend on: platform detection, streaming downloads, archive
extraction and the exception hierarchy.
"""

from .platform import (
    Platform,
    detect_platform,
    get_running_platform,
    clear_platform_cache,
)

from .download import (
    DownloadProgress,
    ProgressCallback,
    download_url,
    format_progress,
)

from .filesystem import extract_release_archive

from .exceptions import (
    SafeReleasesError,
    PlatformNotSupported,
    ReleaseResolutionError,
    LatestReleaseNotFound,
    TagNameVersionParsingFailed,
    MalformedResponseError,
    ReleaseMetadataError,
    RegistryResponseError,
    InvalidVersionError,
    DownloadError,
    UrlIsNotArchive,
    CannotParseFilenameFromUrl,
    ReleaseBinaryNotFound,
    ArchiveExtractionError,
    ArchiveNotFoundError,
    UnsupportedArchiveFormat,
    InsecureArchiveError,
    ConfigError,
)

__all__ = [
    "Platform",
    "detect_platform",
    "get_running_platform",
    "clear_platform_cache",
    "DownloadProgress",
    "ProgressCallback",
    "download_url",
    "format_progress",
    "extract_release_archive",
    "SafeReleasesError",
    "PlatformNotSupported",
    "ReleaseResolutionError",
    "LatestReleaseNotFound",
    "TagNameVersionParsingFailed",
    "MalformedResponseError",
    "ReleaseMetadataError",
    "RegistryResponseError",
    "InvalidVersionError",
    "DownloadError",
    "UrlIsNotArchive",
    "CannotParseFilenameFromUrl",
    "ReleaseBinaryNotFound",
    "ArchiveExtractionError",
    "ArchiveNotFoundError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
    "ConfigError",
]
