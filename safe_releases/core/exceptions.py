"""
Centralized exception hierarchy for safe-releases.

Every error raised on purpose by this package derives from SafeReleasesError.
Transport failures from ``requests`` and low-level archive errors are not
wrapped here; they propagate to the caller unchanged (or chained, in the
case of archive extraction).
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class SafeReleasesError(Exception):
    """Base exception for all safe-releases errors."""

    pass


# ============================================================================
# Platform Exceptions
# ============================================================================


class PlatformNotSupported(SafeReleasesError):
    """Raised when no binaries are published for the host OS/arch combination."""

    pass


# ============================================================================
# Version Resolution Exceptions
# ============================================================================


class ReleaseResolutionError(SafeReleasesError):
    """Base exception for errors while resolving a release version."""

    pass


class LatestReleaseNotFound(ReleaseResolutionError):
    """Raised when no release matching the artifact could be found."""

    def __init__(self, release_name: str):
        self.release_name = release_name
        super().__init__(f"Latest release not found for {release_name}")


class TagNameVersionParsingFailed(ReleaseResolutionError):
    """Raised when a version cannot be parsed out of a release tag."""

    def __init__(self, tag_name: str):
        self.tag_name = tag_name
        super().__init__(f"Could not parse version from tag name '{tag_name}'")


class MalformedResponseError(ReleaseResolutionError):
    """Upstream API returned JSON that does not have the expected shape."""

    pass


class ReleaseMetadataError(ReleaseResolutionError):
    """A release entry carried metadata that could not be interpreted."""

    pass


class RegistryResponseError(ReleaseResolutionError):
    """Raised when the package registry answers with a non-success status."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"Unexpected response from crates.io: {status_code}")


class InvalidVersionError(ReleaseResolutionError):
    """Invalid semantic version string."""

    pass


# ============================================================================
# Retrieval Exceptions
# ============================================================================


class DownloadError(SafeReleasesError):
    """Base exception for release archive download errors."""

    pass


class UrlIsNotArchive(DownloadError):
    """Raised when a download URL does not point to a zip or tar.gz archive."""

    def __init__(self, url: str = ""):
        self.url = url
        super().__init__("The URL must point to a zip or gzipped tar archive")


class CannotParseFilenameFromUrl(DownloadError):
    """Raised when no file name can be derived from a download URL."""

    def __init__(self, url: str = ""):
        self.url = url
        super().__init__(f"Cannot parse file name from the URL: {url}")


class ReleaseBinaryNotFound(DownloadError):
    """
    Raised when the archive URL answers with a non-success status.

    This usually means the requested artifact/version/platform combination
    was never published, and is distinct from a transport failure.
    """

    def __init__(self, url: str, status_code: int = 0):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Release binary {url} was not found")


# ============================================================================
# Extraction Exceptions
# ============================================================================


class ArchiveExtractionError(SafeReleasesError):
    """Failed to extract an archive."""

    pass


class ArchiveNotFoundError(ArchiveExtractionError, FileNotFoundError):
    """The archive to extract does not exist."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(SafeReleasesError):
    """Configuration parsing or validation error."""

    pass
