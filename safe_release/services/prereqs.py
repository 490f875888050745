"""Host prerequisites for building release targets.

Native musl builds link with the host's ``musl-gcc`` (from ``musl-tools``).
On a fresh Debian/Ubuntu CI agent we install it; elsewhere we report it
missing rather than letting cargo fail with an obscure linker error.
"""

from __future__ import annotations

from pathlib import Path
from shutil import which

from safe_release.core.result import Err, Ok, Result
from safe_release.output.console import ConsoleProtocol
from safe_release.platform.detection import LinuxDistro, detect_linux_distro
from safe_release.platform.process import run_silent
from safe_release.release.errors import PrereqMissing

__all__ = ["PrereqService", "MUSL_TOOLS_PACKAGE"]

MUSL_TOOLS_PACKAGE = "musl-tools"
_MUSL_COMPILER = "musl-gcc"
_APT_TIMEOUT_SECONDS = 10 * 60.0


class PrereqService:
    def __init__(
        self,
        *,
        console: ConsoleProtocol,
        cwd: Path,
        distro: LinuxDistro | None = None,
    ) -> None:
        self._console = console
        self._cwd = cwd
        self._distro = distro

    def ensure_musl_tools(self, *, dry_run: bool = False) -> Result[None, PrereqMissing]:
        """Make sure musl-gcc is available. No-op when it already is."""
        if which(_MUSL_COMPILER) is not None:
            return Ok(None)

        distro = self._distro if self._distro is not None else detect_linux_distro()
        if distro != LinuxDistro.DEBIAN:
            return Err(
                PrereqMissing(
                    name=MUSL_TOOLS_PACKAGE,
                    hint=f"Install {MUSL_TOOLS_PACKAGE} so that {_MUSL_COMPILER} is on PATH",
                )
            )

        self._console.info(f"installing {MUSL_TOOLS_PACKAGE}")
        for argv in (
            ["sudo", "apt-get", "update", "-y"],
            ["sudo", "apt-get", "install", "-y", MUSL_TOOLS_PACKAGE],
        ):
            self._console.command(argv)
            if dry_run:
                continue
            result = run_silent(argv, cwd=self._cwd, timeout=_APT_TIMEOUT_SECONDS)
            if isinstance(result, Err):
                return Err(
                    PrereqMissing(
                        name=MUSL_TOOLS_PACKAGE,
                        hint=f"'{' '.join(argv)}' failed (exit {result.error.returncode})",
                    )
                )

        if not dry_run and which(_MUSL_COMPILER) is None:
            return Err(
                PrereqMissing(
                    name=MUSL_TOOLS_PACKAGE,
                    hint=f"{MUSL_TOOLS_PACKAGE} installed but {_MUSL_COMPILER} is not on PATH",
                )
            )
        return Ok(None)
