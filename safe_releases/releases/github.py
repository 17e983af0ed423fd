"""
GitHub releases API access.

Two endpoints are used:

- ``GET /repos/{org}/{repo}/releases/latest`` for repositories that only
  release one binary
- ``GET /repos/{org}/{repo}/releases?page=N&per_page=M`` for the shared
  repository, where pagination continues while the ``Link`` header carries
  a ``rel="next"`` entry
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import requests

from safe_releases.core.exceptions import MalformedResponseError, ReleaseMetadataError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReleaseCandidate:
    """A release entry from a listing page."""

    tag_name: str
    created_at: datetime


def build_headers(user_agent: str, token: Optional[str] = None) -> Dict[str, str]:
    """Build the request headers GitHub requires."""
    headers = {
        "User-Agent": user_agent,
        "Accept": "application/vnd.github+json",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def has_next_page(headers: Mapping[str, str]) -> bool:
    """
    Check a response's ``Link`` header for a next page.

    Example:
        >>> has_next_page({"link": '<https://api.github.com/x?page=2>; rel="next"'})
        True
    """
    links = headers.get("link")
    if not links:
        return False
    return any('rel="next"' in link for link in links.split(","))


def parse_created_at(value: str) -> datetime:
    """
    Parse a GitHub ISO-8601 timestamp such as ``2024-01-10T12:00:00Z``.

    Raises:
        ReleaseMetadataError: If the timestamp cannot be parsed
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ReleaseMetadataError(f"Invalid created_at timestamp: {value}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_release_entry(entry: Any) -> Optional[ReleaseCandidate]:
    """
    Read ``tag_name`` and ``created_at`` from a listing entry.

    Returns:
        ReleaseCandidate, or None if the entry lacks either field
    """
    if not isinstance(entry, dict):
        return None
    tag_name = entry.get("tag_name")
    created_at = entry.get("created_at")
    if not isinstance(tag_name, str) or not isinstance(created_at, str):
        return None
    return ReleaseCandidate(tag_name, parse_created_at(created_at))


class GitHubReleasesApi:
    """
    Thin client over the GitHub releases endpoints.

    Example:
        >>> api = GitHubReleasesApi("https://api.github.com", "maidsafe", build_headers("me"))
        >>> api.get_latest_release_tag("sn-node-manager")
        'v0.1.8'
    """

    def __init__(
        self,
        base_url: str,
        org: str,
        headers: Mapping[str, str],
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.org = org
        self.headers = dict(headers)
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def get_latest_release_tag(self, repo: str) -> str:
        """
        Get the tag name of a repository's latest release.

        Raises:
            MalformedResponseError: If the response has no tag_name
            requests.RequestException: If the request fails
        """
        url = f"{self.base_url}/repos/{self.org}/{repo}/releases/latest"
        logger.debug(f"Fetching latest release from {url}")

        response = self.session.get(url, headers=self.headers, timeout=self.timeout)
        response.raise_for_status()

        latest_release = response.json()
        tag_name = (
            latest_release.get("tag_name") if isinstance(latest_release, dict) else None
        )
        if not isinstance(tag_name, str):
            raise MalformedResponseError(
                f"Latest release response for {self.org}/{repo} has no tag_name"
            )
        return tag_name

    def get_releases_page(
        self, repo: str, page: int, per_page: int
    ) -> tuple[List[Any], bool]:
        """
        Fetch one page of a repository's releases, newest first.

        Returns:
            Tuple of (release entries, whether a next page exists)

        Raises:
            MalformedResponseError: If the body is not a JSON array
            requests.RequestException: If the request fails
        """
        url = f"{self.base_url}/repos/{self.org}/{repo}/releases"
        logger.debug(f"Fetching releases page {page} from {url}")

        response = self.session.get(
            url,
            params={"page": page, "per_page": per_page},
            headers=self.headers,
            timeout=self.timeout,
        )
        response.raise_for_status()

        releases = response.json()
        if not isinstance(releases, list):
            raise MalformedResponseError(
                f"Expected a list of releases from {url}, got {type(releases).__name__}"
            )
        return releases, has_next_page(response.headers)
