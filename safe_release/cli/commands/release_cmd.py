from __future__ import annotations

import typer

from safe_release.cli.commands._helpers import exit_with_code, unwrap_or_exit
from safe_release.cli.context import CLIContext, build_context
from safe_release.core.errors import ErrorCode
from safe_release.git.repository import Repository
from safe_release.output.console import Style
from safe_release.release.model import ReleaseEvent
from safe_release.release.tags import resolve_release_tags
from safe_release.services.publisher import PublishReport, Publisher
from safe_release.services.sinks import DryRunSink, GhReleaseSink, S3BucketSink


def _release_event(ctx: CLIContext, message: str | None) -> ReleaseEvent:
    if message is None:
        message = unwrap_or_exit(Repository(ctx.workspace.root).commit_message(), ctx)
    return unwrap_or_exit(resolve_release_tags(message), ctx)


def _publisher(ctx: CLIContext) -> Publisher:
    return Publisher(
        paths=ctx.paths,
        matrix=ctx.matrix,
        registry=ctx.registry,
        release_host_components=ctx.release_host_components,
        console=ctx.console,
        public_read=ctx.config.storage.public_read,
    )


def _print_report(ctx: CLIContext, report: PublishReport) -> None:
    ctx.console.header("Publish report")
    for outcome in report.outcomes:
        name = outcome.binary or "-"
        line = (
            f"{outcome.tag.tag:<32} {name:<20} "
            f"release={outcome.release.status:<20} bucket={outcome.bucket.status}"
        )
        blocked = outcome.failed or outcome.bucket.status == "incomplete_archive"
        if blocked:
            ctx.console.error(line)
        elif outcome.filtered:
            ctx.console.print(line, Style.DIM)
        else:
            ctx.console.print(line)
        for detail in dict.fromkeys((outcome.release.detail, outcome.bucket.detail)):
            if detail and blocked:
                ctx.console.print(f"  {detail}", Style.DIM)


def tags(
    message: str | None = typer.Option(
        None, "--message", "-m", help="Release commit message (default: HEAD commit)"
    ),
) -> None:
    """Resolve the (crate, version) pairs named by a release commit."""
    ctx = build_context()
    for tag in _release_event(ctx, message):
        ctx.console.print(f"{tag.component} {tag.version}")


def publish(
    message: str | None = typer.Option(
        None, "--message", "-m", help="Release commit message (default: HEAD commit)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report uploads without making them"),
    allow_partial: bool = typer.Option(
        False, "--allow-partial", help="Exit 0 even if some uploads failed"
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Treat a publishable binary without archives as a failure"
    ),
) -> None:
    """Upload packaged archives for every binary bumped by the release commit."""
    ctx = build_context()
    event = _release_event(ctx, message)

    if dry_run:
        dry = DryRunSink(ctx.console)
        report = _publisher(ctx).publish(event, bucket_sink=dry, release_sink=dry)
    else:
        report = _publisher(ctx).publish(
            event,
            bucket_sink=S3BucketSink.from_config(ctx.config.storage),
            release_sink=GhReleaseSink(
                workspace_root=ctx.workspace.root, repo=ctx.config.release_host.repo
            ),
        )

    _print_report(ctx, report)
    if report.failures and not allow_partial:
        exit_with_code(int(ErrorCode.NETWORK_ERROR))
    if report.incomplete_archives:
        exit_with_code(int(ErrorCode.IO_ERROR))
    if strict and report.missing_archives:
        exit_with_code(int(ErrorCode.IO_ERROR))


def upload_bucket(
    binary: str = typer.Argument(..., help="Publishable binary name, e.g. safenode"),
    version: str | None = typer.Option(
        None, "--version", help="Only upload archives of this version"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report uploads without making them"),
) -> None:
    """Upload one binary's packaged archives to its bucket."""
    ctx = build_context()
    sink = DryRunSink(ctx.console) if dry_run else S3BucketSink.from_config(ctx.config.storage)
    outcome = unwrap_or_exit(_publisher(ctx).publish_to_bucket(binary, version, sink), ctx)
    match outcome.status:
        case "success":
            ctx.console.success(f"{binary} uploaded")
        case "skipped_no_archive" | "incomplete_archive":
            ctx.console.error(outcome.detail or f"no {binary} archives")
            exit_with_code(int(ErrorCode.IO_ERROR))
        case _:
            ctx.console.error(outcome.detail or f"{binary} upload failed")
            exit_with_code(int(ErrorCode.NETWORK_ERROR))
