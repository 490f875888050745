"""Upload destinations for packaged archives.

- ReleaseSink: attaches files to an existing GitHub release (gh CLI).
- BucketSink: puts files into an S3 bucket (boto3).

Both overwrite on re-upload: ``gh release upload --clobber`` replaces an
asset of the same name, and an S3 put replaces the object at the key.
"""

from __future__ import annotations

import shutil
from collections.abc import Sequence
from pathlib import Path
from time import sleep
from typing import TYPE_CHECKING, Any, Protocol

from safe_release.core.result import Err, Ok, Result
from safe_release.output.console import ConsoleProtocol
from safe_release.platform.process import ProcessError
from safe_release.platform.process import run as run_process
from safe_release.release.errors import SinkError

if TYPE_CHECKING:
    from safe_release.core.config import StorageConfig

__all__ = [
    "BucketSink",
    "DryRunSink",
    "GhReleaseSink",
    "ReleaseSink",
    "S3BucketSink",
]

GH_UPLOAD_TIMEOUT_SECONDS = 10 * 60.0
GH_RETRY_ATTEMPTS = 3
GH_RETRY_DELAY_SECONDS = 2.0

_CONTENT_TYPES = {
    ".zip": "application/zip",
    ".gz": "application/gzip",
}


class ReleaseSink(Protocol):
    def upload(self, tag: str, files: Sequence[Path]) -> Result[None, SinkError]: ...


class BucketSink(Protocol):
    def put(
        self, bucket: str, key: str, path: Path, *, public_read: bool
    ) -> Result[None, SinkError]: ...


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    return any(marker in text for marker in markers)


class GhReleaseSink:
    """Uploads release assets with the GitHub CLI."""

    def __init__(
        self,
        *,
        workspace_root: Path,
        repo: str,
        retry_attempts: int = GH_RETRY_ATTEMPTS,
    ) -> None:
        self._root = workspace_root
        self._repo = repo
        self._attempts = max(1, retry_attempts)

    def upload_command(self, tag: str, files: Sequence[Path]) -> list[str]:
        return [
            "gh",
            "release",
            "upload",
            tag,
            "--repo",
            self._repo,
            "--clobber",
            *(str(f) for f in files),
        ]

    def upload(self, tag: str, files: Sequence[Path]) -> Result[None, SinkError]:
        if shutil.which("gh") is None:
            return Err(
                SinkError(
                    destination=tag,
                    message="gh: missing (install GitHub CLI: https://cli.github.com/)",
                )
            )

        cmd = self.upload_command(tag, files)
        for attempt in range(self._attempts):
            result = run_process(cmd, cwd=self._root, timeout=GH_UPLOAD_TIMEOUT_SECONDS)
            if isinstance(result, Ok):
                return Ok(None)

            error = result.error
            if attempt < self._attempts - 1 and _is_transient_gh_error(error):
                sleep(GH_RETRY_DELAY_SECONDS * (attempt + 1))
                continue

            detail = error.stderr.strip() or str(error)
            return Err(
                SinkError(
                    destination=tag,
                    message=f"upload to release {tag} in {self._repo} failed: {detail}",
                )
            )

        return Err(SinkError(destination=tag, message=f"upload to release {tag} failed"))


class S3BucketSink:
    """Puts archives into S3 buckets with boto3."""

    def __init__(
        self,
        *,
        client: Any | None = None,
        region: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        self._client = client
        self._region = region
        self._endpoint_url = endpoint_url

    @classmethod
    def from_config(cls, storage: StorageConfig) -> S3BucketSink:
        return cls(region=storage.region, endpoint_url=storage.endpoint_url)

    def _get_client(self) -> Any:
        if self._client is None:
            import boto3
            from botocore.config import Config

            kwargs: dict[str, Any] = {"config": Config(signature_version="s3v4")}
            if self._region:
                kwargs["region_name"] = self._region
            if self._endpoint_url:
                kwargs["endpoint_url"] = self._endpoint_url
            self._client = boto3.client("s3", **kwargs)
        return self._client

    def put(
        self, bucket: str, key: str, path: Path, *, public_read: bool
    ) -> Result[None, SinkError]:
        from boto3.exceptions import S3UploadFailedError
        from botocore.exceptions import BotoCoreError, ClientError

        extra_args: dict[str, str] = {}
        if public_read:
            extra_args["ACL"] = "public-read"
        content_type = _CONTENT_TYPES.get(path.suffix)
        if content_type:
            extra_args["ContentType"] = content_type

        destination = f"s3://{bucket}/{key}"
        try:
            self._get_client().upload_file(str(path), bucket, key, ExtraArgs=extra_args)
        except (BotoCoreError, ClientError, S3UploadFailedError, OSError) as e:
            return Err(SinkError(destination=destination, message=f"{destination}: {e}"))
        return Ok(None)


class DryRunSink:
    """Both sinks at once: reports what would be uploaded and succeeds."""

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def upload(self, tag: str, files: Sequence[Path]) -> Result[None, SinkError]:
        for f in files:
            self._console.info(f"[dry-run] release {tag} <- {f.name}")
        return Ok(None)

    def put(
        self, bucket: str, key: str, path: Path, *, public_read: bool
    ) -> Result[None, SinkError]:
        acl = " (public-read)" if public_read else ""
        self._console.info(f"[dry-run] s3://{bucket}/{key} <- {path.name}{acl}")
        return Ok(None)
