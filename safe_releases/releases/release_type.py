"""
Catalogue of releasable binaries and archive formats.

Each ReleaseType carries the name used in download URLs, the key used to
recognise its tags (or its registry package name) and the release stream it
is published through. The table is immutable and built at import time.
"""

from dataclasses import dataclass
from enum import Enum


class ReleaseStream(Enum):
    """Where the version history of a release type lives."""

    SHARED = "shared"  # Many binaries interleaved in one repo's releases
    STANDALONE = "standalone"  # The repo releases this binary only
    REGISTRY = "registry"  # Newest version comes from the crates registry


class ArchiveType(Enum):
    """Archive formats release binaries are packaged in."""

    TAR_GZ = "tar.gz"
    ZIP = "zip"

    @property
    def extension(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ReleaseInfo:
    """Static description of a release type."""

    display_name: str
    """Binary name, used lower-cased in distribution URLs"""

    resolver_key: str
    """Tag prefix in the shared stream, or package name in the registry"""

    stream: ReleaseStream
    """Release stream the version is resolved from"""

    repo_name: str = "safe_network"
    """GitHub repository holding the releases"""

    s3_bucket: str = ""
    """Bucket the archives are published to"""

    @property
    def default_base_url(self) -> str:
        return f"https://{self.s3_bucket}.s3.eu-west-2.amazonaws.com"


class ReleaseType(Enum):
    """Binaries that can be resolved and downloaded."""

    FAUCET = "faucet"
    SAFE = "safe"
    SAFENODE = "safenode"
    SAFENODE_MANAGER = "safenode-manager"
    SAFENODE_RPC_CLIENT = "safenode_rpc_client"
    TESTNET = "testnet"
    NODE_LAUNCHPAD = "node-launchpad"
    NAT_DETECTION = "nat-detection"

    @property
    def info(self) -> ReleaseInfo:
        return RELEASE_INFO[self]

    @property
    def display_name(self) -> str:
        return self.info.display_name

    @property
    def resolver_key(self) -> str:
        return self.info.resolver_key

    @property
    def stream(self) -> ReleaseStream:
        return self.info.stream

    @property
    def repo_name(self) -> str:
        return self.info.repo_name

    @classmethod
    def from_name(cls, name: str) -> "ReleaseType":
        """
        Look up a release type by display name or resolver key.

        Raises:
            ValueError: If no release type has that name
        """
        lowered = name.lower()
        for release_type in cls:
            if lowered in (release_type.display_name, release_type.resolver_key):
                return release_type
        raise ValueError(f"Unknown release type: {name}")

    def __str__(self) -> str:
        return self.display_name


RELEASE_INFO = {
    ReleaseType.FAUCET: ReleaseInfo(
        "faucet", "sn_faucet", ReleaseStream.SHARED, s3_bucket="sn-faucet"
    ),
    ReleaseType.SAFE: ReleaseInfo(
        "safe", "sn_cli", ReleaseStream.SHARED, s3_bucket="sn-cli"
    ),
    ReleaseType.SAFENODE: ReleaseInfo(
        "safenode", "sn_node", ReleaseStream.SHARED, s3_bucket="sn-node"
    ),
    ReleaseType.SAFENODE_MANAGER: ReleaseInfo(
        "safenode-manager",
        "sn-node-manager",
        ReleaseStream.STANDALONE,
        repo_name="sn-node-manager",
        s3_bucket="sn-node-manager",
    ),
    ReleaseType.SAFENODE_RPC_CLIENT: ReleaseInfo(
        "safenode_rpc_client",
        "sn_node_rpc_client",
        ReleaseStream.SHARED,
        s3_bucket="sn-node-rpc-client",
    ),
    ReleaseType.TESTNET: ReleaseInfo(
        "testnet", "sn_testnet", ReleaseStream.SHARED, s3_bucket="sn-testnet"
    ),
    ReleaseType.NODE_LAUNCHPAD: ReleaseInfo(
        "node-launchpad",
        "node-launchpad",
        ReleaseStream.REGISTRY,
        s3_bucket="node-launchpad",
    ),
    ReleaseType.NAT_DETECTION: ReleaseInfo(
        "nat-detection",
        "nat-detection",
        ReleaseStream.REGISTRY,
        s3_bucket="nat-detection",
    ),
}
