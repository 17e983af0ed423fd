"""
Crates registry lookups.

Some binaries are not released through GitHub tags that can be matched; for
those the newest published version of their crate is used instead.
"""

import logging
from typing import Mapping, Optional

import requests

from safe_releases.core.exceptions import LatestReleaseNotFound, RegistryResponseError

from .version import Version

logger = logging.getLogger(__name__)


class CratesIoRegistry:
    """Client for the ``/api/v1/crates/{name}`` endpoint."""

    def __init__(
        self,
        base_url: str,
        headers: Mapping[str, str],
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.headers = dict(headers)
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def get_newest_version(self, crate_name: str) -> Version:
        """
        Get the newest published version of a crate.

        Raises:
            RegistryResponseError: If the registry answers with a non-success status
            LatestReleaseNotFound: If the response has no newest_version
            requests.RequestException: If the request fails
        """
        url = f"{self.base_url}/api/v1/crates/{crate_name}"
        logger.debug(f"Fetching crate metadata from {url}")

        response = self.session.get(url, headers=self.headers, timeout=self.timeout)
        if not response.ok:
            raise RegistryResponseError(response.status_code)

        body = response.json()
        crate = body.get("crate") if isinstance(body, dict) else None
        newest = crate.get("newest_version") if isinstance(crate, dict) else None
        if not isinstance(newest, str):
            raise LatestReleaseNotFound(crate_name)

        return Version.parse(newest)
