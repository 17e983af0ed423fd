"""
Semantic version values.

Versions are parsed from release tags and registry responses and must print
back exactly as they were published, pre-release suffix included.
"""

import re

from safe_releases.core.exceptions import InvalidVersionError

_VERSION_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


class Version:
    """
    Semantic version parser and comparator.

    Supports ``major.minor.patch`` with an optional ``-pre.release`` suffix
    and ``+build`` metadata. Ordering follows semver precedence, so a
    pre-release sorts below the release it precedes.

    Example:
        >>> v1 = Version.parse("0.1.6-rc.1")
        >>> v2 = Version.parse("0.1.6")
        >>> v1 < v2
        True
        >>> str(v1)
        '0.1.6-rc.1'
    """

    def __init__(
        self,
        major: int,
        minor: int,
        patch: int,
        pre_release: str = "",
        build: str = "",
    ):
        self.major = major
        self.minor = minor
        self.patch = patch
        self.pre_release = pre_release
        self.build = build

    @classmethod
    def parse(cls, version_string: str) -> "Version":
        """
        Parse a version string, tolerating a leading 'v'.

        Raises:
            InvalidVersionError: If the string is not a semantic version
        """
        text = version_string.strip()
        if text.startswith("v"):
            text = text[1:]

        match = _VERSION_RE.match(text)
        if not match:
            raise InvalidVersionError(
                f"Invalid version format: {version_string}. "
                "Expected format: major.minor.patch[-pre.release]"
            )

        major, minor, patch, pre_release, build = match.groups()
        return cls(int(major), int(minor), int(patch), pre_release or "", build or "")

    @property
    def is_pre_release(self) -> bool:
        return bool(self.pre_release)

    def _precedence_key(self) -> tuple:
        pre: tuple = ()
        if self.pre_release:
            pre = tuple(
                (0, int(part), "") if part.isdigit() else (1, 0, part)
                for part in self.pre_release.split(".")
            )
        # A release (no pre-release) outranks any of its pre-releases
        return (self.major, self.minor, self.patch, 0 if pre else 1, pre, self.build)

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() < other._precedence_key()

    def __le__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() <= other._precedence_key()

    def __gt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() > other._precedence_key()

    def __ge__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() >= other._precedence_key()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence_key() == other._precedence_key()

    def __hash__(self) -> int:
        return hash(self._precedence_key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release:
            text += f"-{self.pre_release}"
        if self.build:
            text += f"+{self.build}"
        return text

    def __repr__(self) -> str:
        return f"Version('{self}')"


def coerce_version(version) -> Version:
    """Accept either a Version or its string form."""
    if isinstance(version, Version):
        return version
    return Version.parse(str(version))
