"""
Release metadata for safe-releases.

This package provides:
- The catalogue of release types and archive formats
- Semantic version values
- Release tag matching
- GitHub releases and crates registry clients
"""

from safe_releases.releases.release_type import (
    ArchiveType,
    ReleaseInfo,
    ReleaseStream,
    ReleaseType,
)
from safe_releases.releases.version import Version
from safe_releases.releases.tags import (
    get_version_from_tag_name,
    match_tag,
    tag_matches,
)
from safe_releases.releases.github import (
    GitHubReleasesApi,
    ReleaseCandidate,
    has_next_page,
)
from safe_releases.releases.registry import CratesIoRegistry

__all__ = [
    "ArchiveType",
    "ReleaseInfo",
    "ReleaseStream",
    "ReleaseType",
    "Version",
    "get_version_from_tag_name",
    "match_tag",
    "tag_matches",
    "GitHubReleasesApi",
    "ReleaseCandidate",
    "has_next_page",
    "CratesIoRegistry",
]
