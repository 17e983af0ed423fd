"""
Release archive extraction.

Release archives are packaged with a single binary inside, so only the first
entry of an archive is extracted:

- ``.gz``: treated as a gzip-compressed tar; the first entry from the
  archive's member iterator is unpacked
- ``.zip``: the entry at index 0 is unpacked (or created, if it is a
  directory entry)

Any further entries are ignored.
"""

import logging
import os
import shutil
import sys
import tarfile
import zipfile
from pathlib import Path
from typing import Union

from .exceptions import (
    ArchiveExtractionError,
    ArchiveNotFoundError,
    InsecureArchiveError,
    UnsupportedArchiveFormat,
)

logger = logging.getLogger(__name__)


def _validate_archive_path(path: str, destination: Path) -> Path:
    """
    Validate that an archive member path is safe to extract.

    Prevents directory traversal attacks (e.g., paths containing '../').

    Args:
        path: Member path from archive
        destination: Extraction destination

    Returns:
        The path the member will be written to

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not member_path.is_relative_to(destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )
    return destination / path


def extract_release_archive(
    archive_path: Union[str, Path], destination: Union[str, Path]
) -> Path:
    """
    Extract the binary contained in a release archive.

    Args:
        archive_path: Path to the .tar.gz or .zip archive
        destination: Directory to extract to (created if missing)

    Returns:
        Full path of the extracted file, ``destination / <entry name>``

    Raises:
        ArchiveNotFoundError: If the archive does not exist
        UnsupportedArchiveFormat: If the extension is neither .gz nor .zip
        InsecureArchiveError: If the entry would be written outside destination
        ArchiveExtractionError: If the archive is empty or unpacking fails

    Example:
        >>> extract_release_archive("safenode-0.1.0-x86_64-unknown-linux-musl.tar.gz", "bin")
        PosixPath('bin/safenode')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveNotFoundError(f"Archive not found at: {archive_path}")

    extension = archive_path.suffix.lower()
    if extension not in (".gz", ".zip"):
        raise UnsupportedArchiveFormat(
            f"Unsupported archive format: {archive_path.suffix}. Supported: .tar.gz, .zip"
        )

    destination.mkdir(parents=True, exist_ok=True)

    try:
        if extension == ".gz":
            out_path = _extract_first_tar_entry(archive_path, destination)
        else:
            out_path = _extract_first_zip_entry(archive_path, destination)
    except InsecureArchiveError:
        raise
    except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e

    logger.info(f"Extracted {archive_path.name} to {out_path}")
    return out_path


def _extract_first_tar_entry(archive_path: Path, destination: Path) -> Path:
    with tarfile.open(archive_path, "r:gz") as tar:
        member = tar.next()
        if member is None:
            raise ArchiveExtractionError(
                f"Failed to extract archive: {archive_path} has no entries"
            )

        out_path = _validate_archive_path(member.name, destination)

        # Python 3.12+ applies the safe "data" filter when asked to
        if sys.version_info >= (3, 12):
            tar.extract(member, destination, filter="data")
        else:
            tar.extract(member, destination)

    return out_path


def _extract_first_zip_entry(archive_path: Path, destination: Path) -> Path:
    with zipfile.ZipFile(archive_path, "r") as zf:
        entries = zf.infolist()
        if not entries:
            raise ArchiveExtractionError(
                f"Failed to extract archive: {archive_path} has no entries"
            )

        entry = entries[0]
        out_path = _validate_archive_path(entry.filename, destination)

        if entry.filename.endswith("/"):
            out_path.mkdir(parents=True, exist_ok=True)
            return out_path

        out_path.parent.mkdir(parents=True, exist_ok=True)
        with zf.open(entry) as source, open(out_path, "wb") as target:
            shutil.copyfileobj(source, target)

    # Unix permission bits live in the high word of external_attr
    mode = (entry.external_attr >> 16) & 0o777
    if mode and os.name != "nt":
        out_path.chmod(mode)

    return out_path


__all__ = [
    "extract_release_archive",
]
