"""Publish packaged archives for a release commit.

For each (component, version) in the release event:

- components without a publishable binary are filtered out (library crates
  are bumped in the same commit as binaries);
- the binary's full archive set for that version (every target, every
  format) is taken from ``deploy/<binary>``; a partial set is never uploaded;
- the release sink receives them under ``<component>-v<version>`` when the
  component is on the release-host allow-list;
- the bucket sink receives each archive under its file name, always.

Unlike builds, publishing continues past failures. Every outcome lands in
the PublishReport and the caller decides what is fatal.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from safe_release.core.result import Err, Ok, Result
from safe_release.core.workspace import ReleasePaths
from safe_release.output.console import ConsoleProtocol
from safe_release.release.errors import NotPublishable, UnknownBinary
from safe_release.release.model import ARCHIVE_FORMATS, ReleaseEvent, ReleaseTag, archive_basename
from safe_release.release.registry import BinaryRegistry, BinarySpec
from safe_release.release.targets import TargetMatrix
from safe_release.services.sinks import BucketSink, ReleaseSink

__all__ = [
    "BinaryOutcome",
    "PublishReport",
    "Publisher",
    "SinkOutcome",
    "SinkStatus",
]

SinkStatus = Literal[
    "success",
    "skipped_no_archive",
    "incomplete_archive",
    "skipped_not_allowed",
    "filtered",
    "upload_error",
]


@dataclass(frozen=True, slots=True)
class SinkOutcome:
    status: SinkStatus
    detail: str | None = None

    @property
    def failed(self) -> bool:
        return self.status == "upload_error"


_FILTERED = SinkOutcome("filtered")


@dataclass(frozen=True, slots=True)
class BinaryOutcome:
    """What happened to one release tag on each sink."""

    tag: ReleaseTag
    binary: str | None
    release: SinkOutcome
    bucket: SinkOutcome

    @property
    def filtered(self) -> bool:
        return self.binary is None

    @property
    def failed(self) -> bool:
        return self.release.failed or self.bucket.failed


@dataclass(frozen=True, slots=True)
class PublishReport:
    outcomes: tuple[BinaryOutcome, ...]

    @property
    def failures(self) -> tuple[BinaryOutcome, ...]:
        return tuple(o for o in self.outcomes if o.failed)

    @property
    def missing_archives(self) -> tuple[BinaryOutcome, ...]:
        return tuple(o for o in self.outcomes if o.bucket.status == "skipped_no_archive")

    @property
    def incomplete_archives(self) -> tuple[BinaryOutcome, ...]:
        return tuple(o for o in self.outcomes if o.bucket.status == "incomplete_archive")

    @property
    def ok(self) -> bool:
        return not self.failures

    def outcome_for(self, component: str) -> BinaryOutcome | None:
        for outcome in self.outcomes:
            if outcome.tag.component == component:
                return outcome
        return None


class Publisher:
    def __init__(
        self,
        *,
        paths: ReleasePaths,
        matrix: TargetMatrix,
        registry: BinaryRegistry,
        release_host_components: frozenset[str],
        console: ConsoleProtocol,
        public_read: bool = True,
    ) -> None:
        self._paths = paths
        self._matrix = matrix
        self._registry = registry
        self._release_host_components = release_host_components
        self._console = console
        self._public_read = public_read

    def expected_archives(self, binary: str, version: str) -> tuple[Path, ...]:
        """The full archive set of binary at version, in matrix order."""
        out_dir = self._paths.deploy_dir_for(binary)
        return tuple(
            out_dir / f"{archive_basename(binary, version, target.triple)}.{fmt}"
            for target in self._matrix.all()
            for fmt in ARCHIVE_FORMATS
        )

    def _check_complete(self, binary: str, version: str) -> tuple[Path, ...] | SinkOutcome:
        """The full archive set, or the outcome explaining why it can't be published."""
        expected = self.expected_archives(binary, version)
        missing = [p.name for p in expected if not p.is_file()]
        if len(missing) == len(expected):
            out_dir = self._paths.deploy_dir_for(binary)
            detail = f"no {binary} {version} archives in {out_dir}"
            self._console.warning(detail)
            return SinkOutcome("skipped_no_archive", detail)
        if missing:
            detail = f"incomplete {binary} {version} archive set, missing: {', '.join(missing)}"
            self._console.error(detail)
            return SinkOutcome("incomplete_archive", detail)
        return expected

    def publish(
        self,
        event: ReleaseEvent,
        *,
        bucket_sink: BucketSink,
        release_sink: ReleaseSink,
    ) -> PublishReport:
        outcomes: list[BinaryOutcome] = []
        for tag in event:
            spec = self._registry.publishable_for_component(tag.component)
            if spec is None:
                self._console.print(f"{tag.tag}: no publishable binary, skipping")
                outcomes.append(BinaryOutcome(tag, None, _FILTERED, _FILTERED))
                continue
            outcomes.append(self._publish_one(tag, spec, bucket_sink, release_sink))
        return PublishReport(tuple(outcomes))

    def _publish_one(
        self,
        tag: ReleaseTag,
        spec: BinarySpec,
        bucket_sink: BucketSink,
        release_sink: ReleaseSink,
    ) -> BinaryOutcome:
        archives = self._check_complete(spec.name, tag.version)
        if isinstance(archives, SinkOutcome):
            return BinaryOutcome(tag, spec.name, archives, archives)

        self._console.header(f"Publishing {spec.name} ({tag.tag})")

        if tag.component in self._release_host_components:
            self._console.print(f"Uploading {len(archives)} assets to release {tag.tag}...")
            uploaded = release_sink.upload(tag.tag, archives)
            if isinstance(uploaded, Err):
                self._console.error(uploaded.error.message)
                release = SinkOutcome("upload_error", uploaded.error.message)
            else:
                release = SinkOutcome("success")
        else:
            release = SinkOutcome(
                "skipped_not_allowed", f"{tag.component} does not publish release assets"
            )

        bucket = self.upload_to_bucket(spec, archives, bucket_sink)
        return BinaryOutcome(tag, spec.name, release, bucket)

    def upload_to_bucket(
        self, spec: BinarySpec, archives: tuple[Path, ...], bucket_sink: BucketSink
    ) -> SinkOutcome:
        """Put every archive into the binary's bucket, continuing past failures."""
        errors: list[str] = []
        for path in archives:
            self._console.print(f"Uploading {path.name} to s3://{spec.bucket}...")
            put = bucket_sink.put(spec.bucket, path.name, path, public_read=self._public_read)
            if isinstance(put, Err):
                self._console.error(put.error.message)
                errors.append(put.error.message)
        if errors:
            return SinkOutcome("upload_error", "; ".join(errors))
        return SinkOutcome("success")

    def publish_to_bucket(
        self, binary: str, version: str | None, bucket_sink: BucketSink
    ) -> Result[SinkOutcome, UnknownBinary | NotPublishable]:
        """Upload one binary's packaged archives to its bucket only.

        With no version, every archive in the binary's deploy directory is
        uploaded.
        """
        spec_result = self._registry.resolve(binary)
        if isinstance(spec_result, Err):
            return spec_result
        spec = spec_result.value
        if not spec.publishable:
            return Err(
                NotPublishable(name=binary, publishable=tuple(sorted(self._registry.publishable())))
            )

        if version:
            checked = self._check_complete(binary, version)
            if isinstance(checked, SinkOutcome):
                return Ok(checked)
            archives = checked
        else:
            out_dir = self._paths.deploy_dir_for(binary)
            archives = tuple(
                sorted(
                    p for p in out_dir.glob(f"{binary}-*") if p.name.endswith((".zip", ".tar.gz"))
                )
            )
        if not archives:
            return Ok(
                SinkOutcome(
                    "skipped_no_archive",
                    f"no {binary} archives in {self._paths.deploy_dir_for(binary)}",
                )
            )
        return Ok(self.upload_to_bucket(spec, archives, bucket_sink))
