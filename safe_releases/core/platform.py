"""
Platform detection for safe-releases.

This module maps the host operating system and CPU architecture onto one of
the fixed set of targets that release binaries are published for.

Features:
- Operating system detection (Linux, macOS, Windows)
- CPU architecture detection and normalization (x86_64, aarch64, arm, armv7)
- Target triple strings used verbatim in distribution URLs
- Fails closed for OS/arch combinations that have no published binaries

Usage:
    from safe_releases.core.platform import get_running_platform

    platform = get_running_platform()
    print(f"Target triple: {platform.triple}")
"""

import functools
import platform as host_platform
from enum import Enum
from typing import Optional

from .exceptions import PlatformNotSupported


class Platform(Enum):
    """Targets that release archives are built for."""

    LINUX_MUSL = "linux-musl-x86_64"
    LINUX_MUSL_AARCH64 = "linux-musl-aarch64"
    LINUX_MUSL_ARM = "linux-musl-arm"
    LINUX_MUSL_ARM_V7 = "linux-musl-armv7"
    MACOS = "macos-x86_64"
    MACOS_AARCH64 = "macos-aarch64"
    WINDOWS = "windows-x86_64"

    @property
    def triple(self) -> str:
        """
        Get the target triple used in distribution URLs.

        Example:
            >>> Platform.LINUX_MUSL.triple
            'x86_64-unknown-linux-musl'
        """
        return _PLATFORM_TRIPLES[self]

    @property
    def is_windows(self) -> bool:
        return self is Platform.WINDOWS

    def default_archive_type(self):
        """Windows binaries ship as zip, everything else as tar.gz."""
        from safe_releases.releases.release_type import ArchiveType

        return ArchiveType.ZIP if self.is_windows else ArchiveType.TAR_GZ

    def binary_name(self, release_type) -> str:
        """
        Get the file name the binary for ``release_type`` is packaged under.

        Example:
            >>> from safe_releases.releases import ReleaseType
            >>> Platform.WINDOWS.binary_name(ReleaseType.SAFENODE)
            'safenode.exe'
        """
        name = release_type.display_name
        return f"{name}.exe" if self.is_windows else name

    def __str__(self) -> str:
        return self.triple


_PLATFORM_TRIPLES = {
    Platform.LINUX_MUSL: "x86_64-unknown-linux-musl",
    Platform.LINUX_MUSL_AARCH64: "aarch64-unknown-linux-musl",
    Platform.LINUX_MUSL_ARM: "arm-unknown-linux-musleabi",
    Platform.LINUX_MUSL_ARM_V7: "armv7-unknown-linux-musleabihf",
    Platform.MACOS: "x86_64-apple-darwin",
    Platform.MACOS_AARCH64: "aarch64-apple-darwin",
    Platform.WINDOWS: "x86_64-pc-windows-msvc",
}

_LINUX_PLATFORMS = {
    "x86_64": Platform.LINUX_MUSL,
    "armv7": Platform.LINUX_MUSL_ARM_V7,
    "arm": Platform.LINUX_MUSL_ARM,
    "aarch64": Platform.LINUX_MUSL_AARCH64,
}


def detect_platform(
    system: Optional[str] = None, machine: Optional[str] = None
) -> Platform:
    """
    Map an OS name and CPU architecture onto a supported Platform.

    Args:
        system: OS name as reported by ``platform.system()``. Detected if None.
        machine: CPU architecture as reported by ``platform.machine()``.
            Detected if None.

    Returns:
        The matching Platform

    Raises:
        PlatformNotSupported: If no binaries exist for the combination

    Example:
        >>> detect_platform("Linux", "aarch64")
        <Platform.LINUX_MUSL_AARCH64: 'linux-musl-aarch64'>
    """
    os_name = _normalize_os(system if system is not None else host_platform.system())
    arch = _normalize_architecture(
        machine if machine is not None else host_platform.machine()
    )

    if os_name == "linux":
        if arch not in _LINUX_PLATFORMS:
            raise PlatformNotSupported(
                f"We currently do not have binaries for the {os_name}/{arch} combination"
            )
        return _LINUX_PLATFORMS[arch]
    elif os_name == "windows":
        if arch != "x86_64":
            raise PlatformNotSupported(
                "We currently only have x86_64 binaries available for Windows"
            )
        return Platform.WINDOWS
    elif os_name == "macos":
        if arch == "aarch64":
            return Platform.MACOS_AARCH64
        return Platform.MACOS

    raise PlatformNotSupported(f"{os_name} is not currently supported")


@functools.lru_cache(maxsize=1)
def get_running_platform() -> Platform:
    """
    Detect the Platform of the running host.

    This function is cached - it only runs detection once per process.

    Raises:
        PlatformNotSupported: If the host has no published binaries
    """
    return detect_platform()


def clear_platform_cache():
    """Force the next get_running_platform() call to re-detect."""
    get_running_platform.cache_clear()


def _normalize_os(system: str) -> str:
    system = system.lower()
    if system == "darwin":
        return "macos"
    return system


def _normalize_architecture(machine: str) -> str:
    """
    Normalize CPU architecture names.

    Returns:
        'x86_64', 'aarch64', 'armv7', 'arm', or the lower-cased input
    """
    machine = machine.lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x86_64"
    elif machine in ("aarch64", "arm64"):
        return "aarch64"
    elif machine.startswith("armv7"):
        return "armv7"
    elif machine.startswith("arm"):
        return "arm"
    else:
        return machine


__all__ = [
    "Platform",
    "detect_platform",
    "get_running_platform",
    "clear_platform_cache",
]
