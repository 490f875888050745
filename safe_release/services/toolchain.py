"""Compile release binaries for one target and stage them.

Strategy per target comes from the target matrix (cargo for hosts that can
build natively, cross for the ARM targets). Setup commands and feature sets
are table-driven so adding a target or a binary is a single table edit.

Layout:
- toolchain output: ``target/<triple>/release/<exe>``
- staging:          ``artifacts/<triple>/release/<exe>`` (flat)
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from safe_release.core.result import Err, Ok, Result
from safe_release.core.workspace import ReleasePaths
from safe_release.output.console import ConsoleProtocol
from safe_release.platform.process import run_silent
from safe_release.release.errors import (
    BuildError,
    CompileFailed,
    OutputMissing,
    PrereqMissing,
    ToolchainSetupFailed,
)
from safe_release.release.registry import BinaryRegistry, BinarySpec
from safe_release.release.targets import BuildStrategy, Target, TargetMatrix

__all__ = [
    "BuildOptions",
    "CargoCompiler",
    "Compiler",
    "MuslPrereqs",
    "StagedArtifacts",
    "ToolchainDispatcher",
]

_SETUP_TIMEOUT_SECONDS = 15 * 60.0
_COMPILE_TIMEOUT_SECONDS = 60 * 60.0

# Files cargo leaves in target/<triple>/release that are not binaries.
_EXCLUDED_NAMES = frozenset({".cargo-lock"})
_EXCLUDED_SUFFIXES = (".d",)


@dataclass(frozen=True, slots=True)
class BuildOptions:
    clean: bool = True
    network_version_mode: str | None = None
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class StagedArtifacts:
    target: Target
    directory: Path
    files: tuple[Path, ...]


class Compiler(Protocol):
    """External toolchain collaborator."""

    def prepare(self, target: Target, options: BuildOptions) -> Result[None, BuildError]: ...

    def clean(self, options: BuildOptions) -> Result[None, BuildError]: ...

    def compile(
        self, spec: BinarySpec, target: Target, options: BuildOptions
    ) -> Result[Path, BuildError]: ...


class MuslPrereqs(Protocol):
    def ensure_musl_tools(self, *, dry_run: bool = False) -> Result[None, PrereqMissing]: ...


_EXTRA_SETUP: dict[BuildStrategy, list[list[str]]] = {
    BuildStrategy.NATIVE: [],
    BuildStrategy.CROSS: [["cargo", "install", "cross"]],
}


def _setup_commands(target: Target) -> list[list[str]]:
    return [["rustup", "target", "add", target.triple], *_EXTRA_SETUP[target.strategy]]


class CargoCompiler:
    """Compiler backed by cargo (native) and cross (containerised)."""

    def __init__(self, *, paths: ReleasePaths, console: ConsoleProtocol) -> None:
        self._paths = paths
        self._console = console

    def build_command(self, spec: BinarySpec, target: Target) -> list[str]:
        argv = [target.strategy.program, "build", "--release", "--target", target.triple]
        if spec.features:
            argv += ["--features", ",".join(spec.features)]
        argv += ["--bin", spec.name]
        return argv

    def build_env(self, target: Target, options: BuildOptions) -> dict[str, str] | None:
        mode = options.network_version_mode
        if not mode:
            return None
        env = dict(os.environ)
        env["NETWORK_VERSION_MODE"] = mode
        if target.strategy is BuildStrategy.CROSS:
            # cross only forwards variables listed in the container options
            env["CROSS_CONTAINER_OPTS"] = f"--env NETWORK_VERSION_MODE={mode}"
        return env

    def prepare(self, target: Target, options: BuildOptions) -> Result[None, BuildError]:
        for argv in _setup_commands(target):
            self._console.command(argv)
            if options.dry_run:
                continue
            result = run_silent(argv, cwd=self._paths.root, timeout=_SETUP_TIMEOUT_SECONDS)
            if isinstance(result, Err):
                return Err(
                    ToolchainSetupFailed(
                        target=target.triple,
                        command=" ".join(argv),
                        returncode=result.error.returncode,
                    )
                )
        return Ok(None)

    def clean(self, options: BuildOptions) -> Result[None, BuildError]:
        argv = ["cargo", "clean"]
        self._console.command(argv)
        if options.dry_run:
            return Ok(None)
        result = run_silent(argv, cwd=self._paths.root, timeout=_SETUP_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                ToolchainSetupFailed(
                    target="*", command="cargo clean", returncode=result.error.returncode
                )
            )
        return Ok(None)

    def compile(
        self, spec: BinarySpec, target: Target, options: BuildOptions
    ) -> Result[Path, BuildError]:
        argv = self.build_command(spec, target)
        out = self._paths.toolchain_output_dir(target.triple) / target.exe_name(spec.name)
        self._console.command(argv)
        if options.dry_run:
            return Ok(out)

        result = run_silent(
            argv,
            cwd=self._paths.root,
            env=self.build_env(target, options),
            timeout=_COMPILE_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return Err(
                CompileFailed(
                    binary=spec.name, target=target.triple, returncode=result.error.returncode
                )
            )
        if not out.is_file():
            return Err(OutputMissing(binary=spec.name, target=target.triple, path=out))
        return Ok(out)


def _is_artifact(path: Path) -> bool:
    if not path.is_file():
        return False
    if path.name in _EXCLUDED_NAMES:
        return False
    return not path.name.endswith(_EXCLUDED_SUFFIXES)


class ToolchainDispatcher:
    """Builds a list of binaries for one target, all or nothing."""

    def __init__(
        self,
        *,
        paths: ReleasePaths,
        matrix: TargetMatrix,
        registry: BinaryRegistry,
        console: ConsoleProtocol,
        compiler: Compiler,
        prereqs: MuslPrereqs,
    ) -> None:
        self._paths = paths
        self._matrix = matrix
        self._registry = registry
        self._console = console
        self._compiler = compiler
        self._prereqs = prereqs

    def build(
        self,
        platform: str,
        binaries: Sequence[str],
        options: BuildOptions | None = None,
    ) -> Result[StagedArtifacts, BuildError]:
        """Build binaries for platform and stage the results.

        An empty binaries list builds every registered binary. Any failure
        aborts the platform: the staging directory is left empty.
        """
        options = options or BuildOptions()

        target_result = self._matrix.get(platform)
        if isinstance(target_result, Err):
            return target_result
        target = target_result.value

        specs: list[BinarySpec] = []
        for name in dict.fromkeys(binaries or self._registry.names()):
            spec = self._registry.resolve(name)
            if isinstance(spec, Err):
                return spec
            specs.append(spec.value)

        staging = self._paths.staging_dir(target.triple)
        if not options.dry_run:
            shutil.rmtree(staging, ignore_errors=True)

        self._console.header(f"Building {len(specs)} binaries for {target} ({target.strategy})")

        if target.needs_musl_tools:
            prereq = self._prereqs.ensure_musl_tools(dry_run=options.dry_run)
            if isinstance(prereq, Err):
                return prereq

        prepared = self._compiler.prepare(target, options)
        if isinstance(prepared, Err):
            return prepared

        if options.clean:
            cleaned = self._compiler.clean(options)
            if isinstance(cleaned, Err):
                return cleaned

        for spec in specs:
            compiled = self._compiler.compile(spec, target, options)
            if isinstance(compiled, Err):
                return compiled

        if options.dry_run:
            return Ok(StagedArtifacts(target=target, directory=staging, files=()))

        return Ok(self._stage(target, staging))

    def _stage(self, target: Target, staging: Path) -> StagedArtifacts:
        source = self._paths.toolchain_output_dir(target.triple)
        staging.mkdir(parents=True, exist_ok=True)
        staged: list[Path] = []
        if source.is_dir():
            for path in sorted(source.iterdir()):
                if not _is_artifact(path):
                    continue
                dest = staging / path.name
                shutil.copy2(path, dest)
                staged.append(dest)
        self._console.success(f"staged {len(staged)} files in {staging}")
        return StagedArtifacts(target=target, directory=staging, files=tuple(staged))
