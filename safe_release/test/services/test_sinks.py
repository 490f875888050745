from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from botocore.exceptions import ClientError

from safe_release.core.result import Err, Ok
from safe_release.output.console import MockConsole
from safe_release.platform.process import ProcessError
from safe_release.services import sinks as sinks_mod
from safe_release.services.sinks import DryRunSink, GhReleaseSink, S3BucketSink


def _err(*, stderr: str, returncode: int = 1) -> Err[ProcessError]:
    return Err(
        ProcessError(
            command=("gh", "release", "upload", "sn_node-v1.0.0"),
            returncode=returncode,
            stdout="",
            stderr=stderr,
        )
    )


def _no_sleep(seconds: float) -> None:
    del seconds


@pytest.fixture
def gh_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sinks_mod.shutil, "which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr(sinks_mod, "sleep", _no_sleep)


class TestGhReleaseSink:
    def test_upload_command(self, tmp_path: Path) -> None:
        sink = GhReleaseSink(workspace_root=tmp_path, repo="maidsafe/safe_network")
        cmd = sink.upload_command("sn_node-v1.0.0", [Path("/d/a.zip"), Path("/d/a.tar.gz")])
        assert cmd == [
            "gh",
            "release",
            "upload",
            "sn_node-v1.0.0",
            "--repo",
            "maidsafe/safe_network",
            "--clobber",
            "/d/a.zip",
            "/d/a.tar.gz",
        ]

    def test_retries_transient_error(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, gh_on_path: None
    ) -> None:
        calls: list[list[str]] = []
        responses = [_err(stderr="HTTP 502 Bad Gateway"), Ok("")]

        def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
            del cwd, timeout
            calls.append(cmd)
            return responses.pop(0)

        monkeypatch.setattr(sinks_mod, "run_process", fake_run)
        sink = GhReleaseSink(workspace_root=tmp_path, repo="maidsafe/safe_network")

        assert sink.upload("sn_node-v1.0.0", [tmp_path / "a.zip"]) == Ok(None)
        assert len(calls) == 2

    def test_does_not_retry_permanent_error(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, gh_on_path: None
    ) -> None:
        calls: list[list[str]] = []

        def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
            del cwd, timeout
            calls.append(cmd)
            return _err(stderr="release not found")

        monkeypatch.setattr(sinks_mod, "run_process", fake_run)
        sink = GhReleaseSink(workspace_root=tmp_path, repo="maidsafe/safe_network")

        result = sink.upload("sn_node-v1.0.0", [tmp_path / "a.zip"])

        assert isinstance(result, Err)
        assert result.error.destination == "sn_node-v1.0.0"
        assert "release not found" in result.error.message
        assert len(calls) == 1

    def test_gh_missing(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setattr(sinks_mod.shutil, "which", lambda name: None)
        sink = GhReleaseSink(workspace_root=tmp_path, repo="maidsafe/safe_network")

        result = sink.upload("sn_node-v1.0.0", [tmp_path / "a.zip"])

        assert isinstance(result, Err)
        assert "gh: missing" in result.error.message


class FakeS3Client:
    def __init__(self, fail_keys: frozenset[str] = frozenset()) -> None:
        self.fail_keys = fail_keys
        self.uploads: list[tuple[str, str, str, dict[str, Any]]] = []

    def upload_file(
        self, filename: str, bucket: str, key: str, ExtraArgs: dict[str, Any] | None = None
    ) -> None:
        if key in self.fail_keys:
            raise ClientError(
                {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject"
            )
        self.uploads.append((filename, bucket, key, ExtraArgs or {}))


class TestS3BucketSink:
    def test_put_public_read(self, tmp_path: Path) -> None:
        client = FakeS3Client()
        path = tmp_path / "safe-1.0.0-x86_64-apple-darwin.zip"

        result = S3BucketSink(client=client).put("sn-cli", path.name, path, public_read=True)

        assert result == Ok(None)
        assert client.uploads == [
            (
                str(path),
                "sn-cli",
                path.name,
                {"ACL": "public-read", "ContentType": "application/zip"},
            )
        ]

    def test_put_private(self, tmp_path: Path) -> None:
        client = FakeS3Client()
        path = tmp_path / "safe-1.0.0-x86_64-apple-darwin.tar.gz"

        S3BucketSink(client=client).put("sn-cli", path.name, path, public_read=False).unwrap()

        assert client.uploads[0][3] == {"ContentType": "application/gzip"}

    def test_client_error(self, tmp_path: Path) -> None:
        client = FakeS3Client(fail_keys=frozenset({"a.zip"}))

        result = S3BucketSink(client=client).put(
            "sn-cli", "a.zip", tmp_path / "a.zip", public_read=True
        )

        assert isinstance(result, Err)
        assert result.error.destination == "s3://sn-cli/a.zip"
        assert "AccessDenied" in result.error.message


def test_dry_run_sink_reports_only(tmp_path: Path) -> None:
    console = MockConsole()
    sink = DryRunSink(console)

    assert sink.upload("sn_node-v1.0.0", [tmp_path / "a.zip"]) == Ok(None)
    assert sink.put("sn-node", "a.zip", tmp_path / "a.zip", public_read=True) == Ok(None)
    assert console.find("[dry-run] release sn_node-v1.0.0 <- a.zip")
    assert console.find("[dry-run] s3://sn-node/a.zip <- a.zip (public-read)")
