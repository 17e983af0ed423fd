"""
Release repository: version resolution and archive retrieval.

ReleaseRepoActions is the interface callers program against. The single
implementation, ReleaseRepository, holds nothing but endpoint configuration;
tests point it at mocked endpoints instead of subclassing it.

Resolution strategies, by release stream:

- standalone: the repository's "latest release" endpoint is authoritative
- shared: the shared repository's releases are paged newest-first and the
  newest tag whose first segment equals the resolver key wins. Paging stops
  as soon as an entry older than the cutoff window (14 days by default) is
  seen, so a binary that was last released before the window is reported as
  not found rather than searched for indefinitely
- registry: the newest version published to the crates registry
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Union

import requests

from safe_releases.config.parser import ReleaseRepoConfig
from safe_releases.core.download import ProgressCallback, download_url
from safe_releases.core.exceptions import (
    CannotParseFilenameFromUrl,
    LatestReleaseNotFound,
    UrlIsNotArchive,
)
from safe_releases.core.filesystem import extract_release_archive
from safe_releases.core.platform import Platform
from safe_releases.releases.github import (
    GitHubReleasesApi,
    ReleaseCandidate,
    build_headers,
    parse_release_entry,
)
from safe_releases.releases.registry import CratesIoRegistry
from safe_releases.releases.release_type import ArchiveType, ReleaseStream, ReleaseType
from safe_releases.releases.tags import get_version_from_tag_name, tag_matches
from safe_releases.releases.version import Version, coerce_version

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = (".tar.gz", ".zip")


class ReleaseRepoActions(ABC):
    """Operations for resolving, downloading and unpacking release binaries."""

    @abstractmethod
    def get_latest_version(self, release_type: ReleaseType) -> Version:
        """Resolve the newest published version of a release type."""
        pass

    @abstractmethod
    def download_release_from_s3(
        self,
        release_type: ReleaseType,
        version: Union[Version, str],
        platform: Platform,
        archive_type: ArchiveType,
        dest_dir: Union[str, Path],
        callback: Optional[ProgressCallback] = None,
    ) -> Path:
        """Download the archive for a release type, version and platform."""
        pass

    @abstractmethod
    def download_release(
        self,
        url: str,
        dest_dir: Union[str, Path],
        callback: Optional[ProgressCallback] = None,
    ) -> Path:
        """Download an arbitrary release archive URL."""
        pass

    @abstractmethod
    def extract_release_archive(
        self, archive_path: Union[str, Path], dest_dir: Union[str, Path]
    ) -> Path:
        """Extract the binary from a downloaded archive."""
        pass

    @staticmethod
    def default_config() -> "ReleaseRepoActions":
        """Get a repository configured with the production endpoints."""
        return ReleaseRepository(ReleaseRepoConfig())


class ReleaseRepository(ReleaseRepoActions):
    """
    Resolves and retrieves release binaries.

    Example:
        >>> repo = ReleaseRepoActions.default_config()
        >>> version = repo.get_latest_version(ReleaseType.SAFENODE)
        >>> archive = repo.download_release_from_s3(
        ...     ReleaseType.SAFENODE, version, Platform.LINUX_MUSL,
        ...     ArchiveType.TAR_GZ, "downloads", lambda done, total: None)
        >>> repo.extract_release_archive(archive, "bin")
        PosixPath('bin/safenode')
    """

    def __init__(
        self,
        config: Optional[ReleaseRepoConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the repository.

        Args:
            config: Endpoint configuration, production defaults if None
            session: Optional requests session shared by all calls. A session
                passed in is left open by close(); the caller owns it.
        """
        self.config = config if config is not None else ReleaseRepoConfig()
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()

        headers = build_headers(self.config.user_agent, self.config.github_token)
        self.github = GitHubReleasesApi(
            self.config.github_api_base_url,
            self.config.github_org,
            headers,
            timeout=self.config.request_timeout,
            session=self.session,
        )
        self.registry = CratesIoRegistry(
            self.config.crates_io_base_url,
            {"User-Agent": self.config.user_agent},
            timeout=self.config.request_timeout,
            session=self.session,
        )

    def close(self):
        """Close the HTTP session if this repository created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "ReleaseRepository":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ------------------------------------------------------------------
    # Version resolution
    # ------------------------------------------------------------------

    def get_latest_version(
        self, release_type: ReleaseType, now: Optional[datetime] = None
    ) -> Version:
        """
        Get the latest version for a release type.

        Args:
            release_type: Binary to resolve
            now: Reference instant for the cutoff window, current UTC time
                if None. Only meaningful for the shared stream.

        Returns:
            The resolved Version

        Raises:
            LatestReleaseNotFound: If no matching release could be found
            TagNameVersionParsingFailed: If the winning tag has no version
            MalformedResponseError: If an API response has an unexpected shape
            RegistryResponseError: If the registry answers with a non-success status
            requests.RequestException: If an HTTP request fails
        """
        stream = release_type.stream
        if stream is ReleaseStream.STANDALONE:
            version = self._get_latest_release_tag_version(release_type)
        elif stream is ReleaseStream.REGISTRY:
            version = self.registry.get_newest_version(release_type.resolver_key)
        else:
            version = self._search_shared_releases(release_type, now)

        logger.info(f"Latest version of {release_type} is {version}")
        return version

    def _get_latest_release_tag_version(self, release_type: ReleaseType) -> Version:
        tag_name = self.github.get_latest_release_tag(release_type.repo_name)
        return Version.parse(tag_name)

    def _search_shared_releases(
        self, release_type: ReleaseType, now: Optional[datetime]
    ) -> Version:
        """
        Page through the shared repository for the newest matching tag.

        Every fetched page is scanned in full, newest to oldest. The first
        entry older than the cutoff window stops any further pages from
        being requested.
        """
        now = now if now is not None else datetime.now(timezone.utc)
        cutoff = timedelta(days=self.config.cutoff_days)
        target_key = release_type.resolver_key

        latest: Optional[ReleaseCandidate] = None
        page = 1

        while True:
            releases, next_page = self.github.get_releases_page(
                self.config.github_repo, page, self.config.per_page
            )

            continue_search = True
            for entry in releases:
                candidate = parse_release_entry(entry)
                if candidate is None:
                    continue

                if tag_matches(candidate.tag_name, target_key):
                    if latest is None or candidate.created_at > latest.created_at:
                        latest = candidate

                if continue_search and now - candidate.created_at > cutoff:
                    logger.debug(
                        f"{candidate.tag_name} is older than {cutoff.days} days, "
                        f"not paging past page {page}"
                    )
                    continue_search = False

            if continue_search and next_page:
                page += 1
            else:
                break

        if latest is None:
            raise LatestReleaseNotFound(release_type.display_name)

        return get_version_from_tag_name(latest.tag_name)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    def get_archive_name(
        self,
        release_type: ReleaseType,
        version: Union[Version, str],
        platform: Platform,
        archive_type: ArchiveType,
    ) -> str:
        """
        Build the distribution file name of an archive.

        Example:
            >>> repo.get_archive_name(ReleaseType.SAFE, "0.83.51",
            ...                       Platform.LINUX_MUSL, ArchiveType.TAR_GZ)
            'safe-0.83.51-x86_64-unknown-linux-musl.tar.gz'
        """
        version = coerce_version(version)
        return (
            f"{release_type.display_name.lower()}-{version}-"
            f"{platform.triple}.{archive_type.extension}"
        )

    def get_download_url(
        self,
        release_type: ReleaseType,
        version: Union[Version, str],
        platform: Platform,
        archive_type: ArchiveType,
    ) -> str:
        """Build the distribution URL of an archive."""
        archive_name = self.get_archive_name(
            release_type, version, platform, archive_type
        )
        return f"{self.config.base_url_for(release_type)}/{archive_name}"

    def download_release_from_s3(
        self,
        release_type: ReleaseType,
        version: Union[Version, str],
        platform: Platform,
        archive_type: ArchiveType,
        dest_dir: Union[str, Path],
        callback: Optional[ProgressCallback] = None,
    ) -> Path:
        """
        Download a release binary archive from its distribution bucket.

        Args:
            release_type: The type of release
            version: The version of the release
            platform: The target platform
            archive_type: The archive format (tar.gz or zip)
            dest_dir: Directory the archive is written to
            callback: Called with (bytes_downloaded, total_bytes) per chunk

        Returns:
            Full path of the downloaded archive

        Raises:
            ReleaseBinaryNotFound: If nothing is published at the built URL
            requests.RequestException: If the HTTP request fails
        """
        url = self.get_download_url(release_type, version, platform, archive_type)
        archive_name = self.get_archive_name(
            release_type, version, platform, archive_type
        )
        archive_path = Path(dest_dir) / archive_name

        logger.info(f"Downloading {release_type} {version} for {platform.triple}")
        return self._download(url, archive_path, callback)

    def download_release(
        self,
        url: str,
        dest_dir: Union[str, Path],
        callback: Optional[ProgressCallback] = None,
    ) -> Path:
        """
        Download a release archive from an arbitrary URL.

        Args:
            url: URL ending in .tar.gz or .zip
            dest_dir: Directory the archive is written to
            callback: Called with (bytes_downloaded, total_bytes) per chunk

        Returns:
            Full path of the downloaded archive

        Raises:
            UrlIsNotArchive: If the URL has no archive suffix (checked before
                any request is made)
            CannotParseFilenameFromUrl: If the URL has no file name
            ReleaseBinaryNotFound: If the server answers with a non-success status
        """
        if not url.endswith(ARCHIVE_SUFFIXES):
            raise UrlIsNotArchive(url)

        file_name = url.rsplit("/", 1)[-1]
        if not file_name or file_name in ARCHIVE_SUFFIXES:
            raise CannotParseFilenameFromUrl(url)

        return self._download(url, Path(dest_dir) / file_name, callback)

    def _download(
        self, url: str, dest_path: Path, callback: Optional[ProgressCallback]
    ) -> Path:
        return download_url(
            url,
            dest_path,
            progress_callback=callback,
            headers={"User-Agent": self.config.user_agent},
            timeout=self.config.request_timeout,
            session=self.session,
        )

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract_release_archive(
        self, archive_path: Union[str, Path], dest_dir: Union[str, Path]
    ) -> Path:
        """
        Extract a release binary archive.

        The archive is expected to hold a single binary; only its first
        entry is extracted. The archive itself is left in place.

        Returns:
            Full path of the extracted binary
        """
        return extract_release_archive(archive_path, dest_dir)


__all__ = [
    "ReleaseRepoActions",
    "ReleaseRepository",
]
