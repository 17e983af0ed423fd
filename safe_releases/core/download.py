"""
Streaming download of release archives with progress reporting.

The response body is written to disk chunk by chunk and a progress callback
receives ``(bytes_downloaded, total_bytes)`` after every chunk. A total of 0
means the server sent no usable ``content-length`` header. Bytes are written
exactly as served with any ``Content-Encoding`` left in place, so the byte
count matches ``content-length``.

No retries are attempted and no timeout is applied unless the caller asks
for one; a failed request or a non-success status surfaces immediately.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional

import requests

from .exceptions import ReleaseBinaryNotFound

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

CHUNK_SIZE = 8192


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int

    @property
    def percentage(self) -> float:
        if self.total_bytes <= 0:
            return 0.0
        return self.bytes_downloaded / self.total_bytes * 100

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


def download_url(
    url: str,
    destination: Path,
    progress_callback: Optional[ProgressCallback] = None,
    headers: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Stream the body at ``url`` into ``destination``.

    Args:
        url: URL to download from
        destination: Local file path to write
        progress_callback: Called with (bytes_downloaded, total_bytes) after
            every chunk. It runs inline and must return quickly.
        headers: Extra request headers
        timeout: Request timeout in seconds, None for no timeout
        session: Optional requests session to issue the request with

    Returns:
        Path to the downloaded file

    Raises:
        ReleaseBinaryNotFound: If the server answers with a non-success status
        requests.RequestException: If the HTTP request itself fails

    Example:
        >>> def on_progress(downloaded, total):
        ...     print(DownloadProgress(downloaded, total))
        >>> download_url("https://example.com/safe.tar.gz", Path("safe.tar.gz"), on_progress)
    """
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    http = session if session is not None else requests
    logger.debug(f"Downloading from {url}")

    response = http.get(url, headers=headers, stream=True, timeout=timeout)
    with response:
        if not response.ok:
            logger.debug(f"GET {url} returned {response.status_code}")
            raise ReleaseBinaryNotFound(url, response.status_code)

        total_size = parse_content_length(response.headers.get("content-length"))

        downloaded = 0
        with open(destination, "wb") as f:
            # Undecoded bytes: a .tar.gz served with Content-Encoding: gzip
            # must stay gzipped on disk
            for chunk in response.raw.stream(CHUNK_SIZE, decode_content=False):
                if not chunk:
                    continue
                f.write(chunk)
                downloaded += len(chunk)
                if progress_callback:
                    progress_callback(downloaded, total_size)

    logger.info(f"Download complete: {destination} ({downloaded} bytes)")
    return destination


def parse_content_length(value: Optional[str]) -> int:
    """
    Interpret a content-length header value.

    Returns:
        The size in bytes, or 0 if the header is missing or unparsable
    """
    if not value:
        return 0
    try:
        size = int(value.strip())
    except ValueError:
        return 0
    return size if size >= 0 else 0


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> print(format_progress(DownloadProgress(52428800, 104857600)))
        50.0/100.0 MB (50.0%)
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024

    if progress.total_bytes > 0:
        return f"{mb_downloaded:.1f}/{mb_total:.1f} MB ({progress.percentage:.1f}%)"
    else:
        # Unknown total size
        return f"{mb_downloaded:.1f} MB"
