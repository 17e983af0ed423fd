"""
Release tag matching.

Tags in the shared release stream have the form ``<resolver-key>-v<version>``,
for example ``sn_node-v0.98.1`` or ``sn_cli-v0.83.51-alpha.2``.

A tag belongs to an artifact when the segment before the first ``-`` equals
the artifact's resolver key exactly. Prefix matching is not used: it would
let one artifact claim tags of another whose key merely starts the same way.
"""

from typing import Optional

from safe_releases.core.exceptions import InvalidVersionError, TagNameVersionParsingFailed

from .version import Version


def split_tag_name(tag_name: str) -> tuple[str, str]:
    """
    Split a tag into its artifact key and version remainder.

    Example:
        >>> split_tag_name("sn_node-v0.98.1-alpha.1")
        ('sn_node', 'v0.98.1-alpha.1')
    """
    key, _, remainder = tag_name.partition("-")
    return key, remainder


def tag_matches(tag_name: str, resolver_key: str) -> bool:
    """Check whether a tag was published for the given resolver key."""
    key, _ = split_tag_name(tag_name)
    return key == resolver_key


def get_version_from_tag_name(tag_name: str) -> Version:
    """
    Extract the version from a release tag.

    Raises:
        TagNameVersionParsingFailed: If the tag has no version segment, or
            the segment is not a semantic version
    """
    _, remainder = split_tag_name(tag_name)
    if not remainder:
        raise TagNameVersionParsingFailed(tag_name)

    try:
        return Version.parse(remainder)
    except InvalidVersionError as e:
        raise TagNameVersionParsingFailed(tag_name) from e


def match_tag(tag_name: str, resolver_key: str) -> Optional[Version]:
    """
    Return the tag's version if it belongs to ``resolver_key``, else None.

    Example:
        >>> match_tag("sn_node-v0.98.1", "sn_node")
        Version('0.98.1')
        >>> match_tag("sn_node_rpc_client-v0.1.0", "sn_node") is None
        True
    """
    if not tag_matches(tag_name, resolver_key):
        return None
    return get_version_from_tag_name(tag_name)
