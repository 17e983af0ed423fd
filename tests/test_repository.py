"""
Unit tests for ReleaseRepository.

Version resolution and retrieval run against mocked GitHub, crates registry
and distribution endpoints.
"""

import io
import tarfile
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
import responses
from responses import matchers

from safe_releases.core.exceptions import (
    CannotParseFilenameFromUrl,
    LatestReleaseNotFound,
    ReleaseBinaryNotFound,
    UrlIsNotArchive,
)
from safe_releases.core.platform import Platform
from safe_releases.releases.release_type import ArchiveType, ReleaseType
from safe_releases.releases.version import Version
from safe_releases.repository import ReleaseRepoActions, ReleaseRepository

GITHUB_API = "https://github.test"
CRATES_IO = "https://crates.test"
S3_BASE = "https://s3.test"
RELEASES_URL = f"{GITHUB_API}/repos/maidsafe/safe_network/releases"

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def release(tag_name, days_ago, hours_ago=0):
    created_at = NOW - timedelta(days=days_ago, hours=hours_ago)
    return {
        "tag_name": tag_name,
        "created_at": created_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
    }


def add_page(page, releases, has_next=False):
    headers = {}
    if has_next:
        headers["Link"] = f'<{RELEASES_URL}?page={page + 1}>; rel="next"'
    responses.add(
        responses.GET,
        RELEASES_URL,
        match=[matchers.query_param_matcher({"page": str(page), "per_page": "100"})],
        json=releases,
        headers=headers,
    )


def tar_gz_bytes(name, content):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        info = tarfile.TarInfo(name)
        info.size = len(content)
        info.mode = 0o755
        tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


class TestSharedStreamResolution:
    """Tests for paging through the shared release stream."""

    @responses.activate
    def test_newest_matching_tag_wins(self, release_repo):
        add_page(
            1,
            [
                release("sn_cli-v0.83.52", 1),
                release("sn_node-v0.98.2", 2),
                release("sn_node-v0.98.1", 3),
            ],
        )

        version = release_repo.get_latest_version(ReleaseType.SAFENODE, now=NOW)

        assert version == Version.parse("0.98.2")

    @responses.activate
    def test_later_created_at_preferred_over_listing_order(self, release_repo):
        add_page(
            1,
            [
                release("sn_node-v0.98.1", 3),
                release("sn_node-v0.98.2", 2),
            ],
        )

        version = release_repo.get_latest_version(ReleaseType.SAFENODE, now=NOW)

        assert version == Version.parse("0.98.2")

    @responses.activate
    def test_tie_keeps_first_seen(self, release_repo):
        add_page(
            1,
            [
                release("sn_node-v0.98.3", 2),
                release("sn_node-v0.98.2", 2),
            ],
        )

        version = release_repo.get_latest_version(ReleaseType.SAFENODE, now=NOW)

        assert version == Version.parse("0.98.3")

    @responses.activate
    def test_prefix_sharing_key_not_matched(self, release_repo):
        """Test sn_node does not pick up newer sn_node_rpc_client tags."""
        add_page(
            1,
            [
                release("sn_node_rpc_client-v0.2.0", 1),
                release("sn_node-v0.98.1", 2),
            ],
        )

        version = release_repo.get_latest_version(ReleaseType.SAFENODE, now=NOW)

        assert version == Version.parse("0.98.1")

    @responses.activate
    def test_pre_release_version_preserved(self, release_repo):
        add_page(1, [release("sn_cli-v0.83.51-alpha.1", 1)])

        version = release_repo.get_latest_version(ReleaseType.SAFE, now=NOW)

        assert str(version) == "0.83.51-alpha.1"

    @responses.activate
    def test_follows_next_page_while_recent(self, release_repo):
        add_page(1, [release("sn_cli-v0.83.52", 1)], has_next=True)
        add_page(2, [release("sn_faucet-v0.3.1", 5)])

        version = release_repo.get_latest_version(ReleaseType.FAUCET, now=NOW)

        assert version == Version.parse("0.3.1")
        assert len(responses.calls) == 2

    @responses.activate
    def test_cutoff_stops_paging(self, release_repo):
        """Test an entry older than 14 days ends pagination despite a next link."""
        add_page(
            1,
            [
                release("sn_node-v0.98.2", 1),
                release("sn_cli-v0.83.50", 15),
            ],
            has_next=True,
        )
        add_page(2, [release("sn_node-v0.99.0", 16)])

        version = release_repo.get_latest_version(ReleaseType.SAFENODE, now=NOW)

        assert version == Version.parse("0.98.2")
        assert len(responses.calls) == 1

    @responses.activate
    def test_first_page_scanned_even_when_old(self, release_repo):
        """Test matches on an already-old first page are still found."""
        add_page(
            1,
            [
                release("sn_cli-v0.83.50", 30),
                release("sn_testnet-v0.2.4", 31),
            ],
            has_next=True,
        )

        version = release_repo.get_latest_version(ReleaseType.TESTNET, now=NOW)

        assert version == Version.parse("0.2.4")
        assert len(responses.calls) == 1

    @responses.activate
    def test_exactly_at_cutoff_keeps_paging(self, release_repo):
        add_page(1, [release("sn_cli-v0.83.52", 14)], has_next=True)
        add_page(2, [release("sn_node-v0.98.0", 14, hours_ago=1)])

        version = release_repo.get_latest_version(ReleaseType.SAFENODE, now=NOW)

        assert version == Version.parse("0.98.0")
        assert len(responses.calls) == 2

    @responses.activate
    def test_entries_without_fields_skipped(self, release_repo):
        add_page(
            1,
            [
                {"tag_name": "sn_node-v9.9.9"},
                release("sn_node-v0.98.1", 1),
            ],
        )

        version = release_repo.get_latest_version(ReleaseType.SAFENODE, now=NOW)

        assert version == Version.parse("0.98.1")

    @responses.activate
    def test_no_match_within_cutoff(self, release_repo):
        add_page(1, [release("sn_cli-v0.83.52", 1), release("sn_cli-v0.83.51", 20)])

        with pytest.raises(LatestReleaseNotFound) as exc_info:
            release_repo.get_latest_version(ReleaseType.SAFENODE_RPC_CLIENT, now=NOW)

        assert str(exc_info.value) == "Latest release not found for safenode_rpc_client"

    @responses.activate
    def test_empty_listing(self, release_repo):
        add_page(1, [])

        with pytest.raises(LatestReleaseNotFound):
            release_repo.get_latest_version(ReleaseType.SAFENODE, now=NOW)

    @responses.activate
    def test_custom_cutoff(self, repo_config):
        repo_config.cutoff_days = 2
        repo = ReleaseRepository(repo_config)
        add_page(1, [release("sn_cli-v0.83.52", 3)], has_next=True)

        with pytest.raises(LatestReleaseNotFound):
            repo.get_latest_version(ReleaseType.SAFENODE, now=NOW)

        assert len(responses.calls) == 1


class TestOtherStreams:
    """Tests for standalone-repo and registry-backed release types."""

    @responses.activate
    def test_standalone_uses_latest_endpoint(self, release_repo):
        responses.add(
            responses.GET,
            f"{GITHUB_API}/repos/maidsafe/sn-node-manager/releases/latest",
            json={"tag_name": "v0.1.8"},
        )

        version = release_repo.get_latest_version(ReleaseType.SAFENODE_MANAGER)

        assert version == Version.parse("0.1.8")
        assert len(responses.calls) == 1

    @responses.activate
    def test_registry_backed(self, release_repo):
        responses.add(
            responses.GET,
            f"{CRATES_IO}/api/v1/crates/node-launchpad",
            json={"crate": {"newest_version": "0.4.6-rc.1"}},
        )

        version = release_repo.get_latest_version(ReleaseType.NODE_LAUNCHPAD)

        assert str(version) == "0.4.6-rc.1"


class TestDownloadUrls:
    """Tests for distribution URL construction."""

    def test_default_config_url(self):
        repo = ReleaseRepoActions.default_config()

        url = repo.get_download_url(
            ReleaseType.SAFE, "0.83.51", Platform.LINUX_MUSL, ArchiveType.TAR_GZ
        )

        assert url == (
            "https://sn-cli.s3.eu-west-2.amazonaws.com/"
            "safe-0.83.51-x86_64-unknown-linux-musl.tar.gz"
        )

    def test_windows_zip_url(self, release_repo):
        url = release_repo.get_download_url(
            ReleaseType.SAFENODE_RPC_CLIENT,
            Version.parse("0.1.0"),
            Platform.WINDOWS,
            ArchiveType.ZIP,
        )

        assert url == (
            f"{S3_BASE}/safenode_rpc_client/"
            "safenode_rpc_client-0.1.0-x86_64-pc-windows-msvc.zip"
        )


class TestDownloadRelease:
    """Tests for downloading arbitrary archive URLs."""

    @responses.activate
    def test_non_archive_url_rejected_without_request(
        self, release_repo, download_dir, no_network
    ):
        url = (
            "https://sn-node.s3.eu-west-2.amazonaws.com/jacderida/file-upload-address/"
            "safenode-charlie-x86_64-unknown-linux-musl.txt"
        )

        with pytest.raises(UrlIsNotArchive) as exc_info:
            release_repo.download_release(url, download_dir, lambda done, total: None)

        assert str(exc_info.value) == "The URL must point to a zip or gzipped tar archive"
        assert len(responses.calls) == 0

    @pytest.mark.parametrize(
        "url",
        ["https://host.test/.zip", "https://host.test/downloads/.tar.gz"],
    )
    @responses.activate
    def test_url_without_file_name(self, release_repo, download_dir, url):
        with pytest.raises(CannotParseFilenameFromUrl):
            release_repo.download_release(url, download_dir)

        assert len(responses.calls) == 0

    @responses.activate
    def test_custom_archive_url(self, release_repo, download_dir):
        url = (
            "https://sn-node.s3.eu-west-2.amazonaws.com/jacderida/file-upload-address/"
            "safenode-charlie-x86_64-unknown-linux-musl.tar.gz"
        )
        responses.add(responses.GET, url, body=b"archive")

        result = release_repo.download_release(url, download_dir)

        assert result == download_dir / "safenode-charlie-x86_64-unknown-linux-musl.tar.gz"
        assert result.is_file()


class TestDownloadFromS3:
    """Tests for downloading by release type, version and platform."""

    @responses.activate
    def test_missing_combination_reports_url(self, release_repo, download_dir):
        url = f"{S3_BASE}/safenode/safenode-9.9.9-aarch64-apple-darwin.tar.gz"
        responses.add(responses.GET, url, status=404)

        with pytest.raises(ReleaseBinaryNotFound) as exc_info:
            release_repo.download_release_from_s3(
                ReleaseType.SAFENODE,
                "9.9.9",
                Platform.MACOS_AARCH64,
                ArchiveType.TAR_GZ,
                download_dir,
            )

        assert exc_info.value.url == url

    @responses.activate
    def test_download_and_extract(self, release_repo, download_dir, extract_dir):
        url = f"{S3_BASE}/safe/safe-0.83.51-x86_64-unknown-linux-musl.tar.gz"
        body = tar_gz_bytes("safe", b"client binary")
        responses.add(
            responses.GET, url, body=body, headers={"content-length": str(len(body))}
        )
        progress = []

        archive_path = release_repo.download_release_from_s3(
            ReleaseType.SAFE,
            Version.parse("0.83.51"),
            Platform.LINUX_MUSL,
            ArchiveType.TAR_GZ,
            download_dir,
            lambda done, total: progress.append((done, total)),
        )
        binary_path = release_repo.extract_release_archive(archive_path, extract_dir)

        assert archive_path == download_dir / "safe-0.83.51-x86_64-unknown-linux-musl.tar.gz"
        assert binary_path == extract_dir / "safe"
        assert binary_path.read_bytes() == b"client binary"
        assert archive_path.exists()
        assert progress[-1] == (len(body), len(body))

    @responses.activate
    def test_download_and_extract_windows(self, release_repo, download_dir, extract_dir, tmp_path, make_zip):
        zip_path = make_zip(tmp_path / "source.zip", {"safenode.exe": b"MZ"})
        url = f"{S3_BASE}/safenode/safenode-0.98.1-x86_64-pc-windows-msvc.zip"
        responses.add(responses.GET, url, body=zip_path.read_bytes())

        archive_path = release_repo.download_release_from_s3(
            ReleaseType.SAFENODE,
            "0.98.1",
            Platform.WINDOWS,
            Platform.WINDOWS.default_archive_type(),
            download_dir,
        )
        binary_path = release_repo.extract_release_archive(archive_path, extract_dir)

        assert binary_path == extract_dir / Platform.WINDOWS.binary_name(ReleaseType.SAFENODE)
        assert binary_path.is_file()


class TestSessionLifecycle:
    """Tests for closing the HTTP session."""

    def test_context_manager_closes_own_session(self, repo_config):
        with ReleaseRepository(repo_config) as repo:
            repo.session.close = Mock()

        repo.session.close.assert_called_once_with()

    def test_caller_session_left_open(self, repo_config):
        session = Mock()

        with ReleaseRepository(repo_config, session=session) as repo:
            assert repo.session is session

        session.close.assert_not_called()
