from __future__ import annotations

from safe_release.cli.context import build_context
from safe_release.output.console import Style


def targets() -> None:
    """List supported platforms and registered binaries."""
    ctx = build_context()

    ctx.console.header("Platforms")
    for target in ctx.matrix.all():
        ctx.console.print(f"  {target.triple:<34} {target.strategy}")

    allow = ctx.release_host_components
    ctx.console.header("Binaries")
    for spec in ctx.registry:
        flags: list[str] = []
        if spec.publishable:
            flags.append("publish")
        if spec.publishable and spec.component in allow:
            flags.append("release-assets")
        features = ",".join(spec.features) or "-"
        line = (
            f"  {spec.name:<20} {spec.component:<20} s3://{spec.bucket:<20} "
            f"features={features:<30} {' '.join(flags)}"
        )
        ctx.console.print(line, Style.DEFAULT if spec.publishable else Style.DIM)
