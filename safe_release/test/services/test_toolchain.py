from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from safe_release.core.config import Config
from safe_release.core.result import Err, Ok, Result
from safe_release.core.workspace import ReleasePaths, Workspace
from safe_release.output.console import MockConsole
from safe_release.release.errors import (
    BuildError,
    CompileFailed,
    PrereqMissing,
    UnknownBinary,
    UnsupportedPlatform,
)
from safe_release.release.registry import BinarySpec, default_registry
from safe_release.release.targets import Target, default_target_matrix
from safe_release.services.toolchain import (
    BuildOptions,
    CargoCompiler,
    ToolchainDispatcher,
)


@dataclass
class FakeCompiler:
    """Writes a fake executable into the toolchain output dir per compile."""

    paths: ReleasePaths
    fail_on: str | None = None
    calls: list[str] = field(default_factory=list)

    def prepare(self, target: Target, options: BuildOptions) -> Result[None, BuildError]:
        self.calls.append(f"prepare {target}")
        return Ok(None)

    def clean(self, options: BuildOptions) -> Result[None, BuildError]:
        self.calls.append("clean")
        return Ok(None)

    def compile(
        self, spec: BinarySpec, target: Target, options: BuildOptions
    ) -> Result[Path, BuildError]:
        self.calls.append(f"compile {spec.name}")
        if spec.name == self.fail_on:
            return Err(CompileFailed(binary=spec.name, target=target.triple, returncode=101))
        out_dir = self.paths.toolchain_output_dir(target.triple)
        out_dir.mkdir(parents=True, exist_ok=True)
        out = out_dir / target.exe_name(spec.name)
        out.write_bytes(spec.name.encode())
        return Ok(out)


@dataclass
class FakePrereqs:
    result: Result[None, PrereqMissing] = field(default_factory=lambda: Ok(None))
    calls: int = 0

    def ensure_musl_tools(self, *, dry_run: bool = False) -> Result[None, PrereqMissing]:
        self.calls += 1
        return self.result


def _setup(
    root: Path, *, fail_on: str | None = None, prereqs: FakePrereqs | None = None
) -> tuple[ToolchainDispatcher, FakeCompiler, FakePrereqs, ReleasePaths]:
    paths = ReleasePaths.from_workspace(Workspace(root=root), Config())
    compiler = FakeCompiler(paths=paths, fail_on=fail_on)
    prereqs = prereqs or FakePrereqs()
    dispatcher = ToolchainDispatcher(
        paths=paths,
        matrix=default_target_matrix(),
        registry=default_registry(),
        console=MockConsole(),
        compiler=compiler,
        prereqs=prereqs,
    )
    return dispatcher, compiler, prereqs, paths


def test_builds_and_stages_all_binaries(tmp_path: Path) -> None:
    dispatcher, compiler, _, paths = _setup(tmp_path)

    result = dispatcher.build("x86_64-pc-windows-msvc", ["safe", "safenode"])

    assert isinstance(result, Ok)
    staging = paths.staging_dir("x86_64-pc-windows-msvc")
    assert result.value.directory == staging
    assert sorted(p.name for p in staging.iterdir()) == ["safe.exe", "safenode.exe"]
    assert compiler.calls == [
        "prepare x86_64-pc-windows-msvc",
        "clean",
        "compile safe",
        "compile safenode",
    ]


def test_empty_list_builds_every_registered_binary(tmp_path: Path) -> None:
    dispatcher, compiler, _, _ = _setup(tmp_path)

    dispatcher.build("x86_64-apple-darwin", []).unwrap()

    compiled = [c.removeprefix("compile ") for c in compiler.calls if c.startswith("compile")]
    assert compiled == list(default_registry().names())


def test_one_failure_aborts_platform(tmp_path: Path) -> None:
    dispatcher, compiler, _, paths = _setup(tmp_path, fail_on="safenode")
    staging = paths.staging_dir("x86_64-apple-darwin")
    staging.mkdir(parents=True)
    (staging / "stale").write_bytes(b"old")

    result = dispatcher.build("x86_64-apple-darwin", ["safe", "safenode", "faucet"])

    assert isinstance(result, Err)
    assert isinstance(result.error, CompileFailed)
    assert result.error.binary == "safenode"
    assert "compile faucet" not in compiler.calls
    assert not staging.exists() or not any(staging.iterdir())


def test_excludes_cargo_bookkeeping_files(tmp_path: Path) -> None:
    dispatcher, _, _, paths = _setup(tmp_path)
    out_dir = paths.toolchain_output_dir("x86_64-apple-darwin")
    out_dir.mkdir(parents=True)
    (out_dir / ".cargo-lock").write_bytes(b"")
    (out_dir / "safe.d").write_text("deps", encoding="utf-8")
    (out_dir / "deps").mkdir()

    staged = dispatcher.build("x86_64-apple-darwin", ["safe"]).unwrap()

    assert [p.name for p in staged.files] == ["safe"]


def test_unsupported_platform(tmp_path: Path) -> None:
    dispatcher, compiler, _, _ = _setup(tmp_path)
    result = dispatcher.build("x86_64-unknown-freebsd", ["safe"])
    assert isinstance(result, Err)
    assert isinstance(result.error, UnsupportedPlatform)
    assert compiler.calls == []


def test_unknown_binary_before_any_work(tmp_path: Path) -> None:
    dispatcher, compiler, _, _ = _setup(tmp_path)
    result = dispatcher.build("x86_64-apple-darwin", ["safe", "bogus"])
    assert isinstance(result, Err)
    assert isinstance(result.error, UnknownBinary)
    assert compiler.calls == []


def test_native_musl_checks_prereqs(tmp_path: Path) -> None:
    dispatcher, _, prereqs, _ = _setup(tmp_path)
    dispatcher.build("x86_64-unknown-linux-musl", ["safe"]).unwrap()
    assert prereqs.calls == 1

    dispatcher.build("aarch64-unknown-linux-musl", ["safe"]).unwrap()
    assert prereqs.calls == 1


def test_missing_prereq_fails_build(tmp_path: Path) -> None:
    prereqs = FakePrereqs(result=Err(PrereqMissing(name="musl-tools", hint="install it")))
    dispatcher, compiler, _, _ = _setup(tmp_path, prereqs=prereqs)

    result = dispatcher.build("x86_64-unknown-linux-musl", ["safe"])

    assert isinstance(result, Err)
    assert isinstance(result.error, PrereqMissing)
    assert compiler.calls == []


def test_no_clean(tmp_path: Path) -> None:
    dispatcher, compiler, _, _ = _setup(tmp_path)
    dispatcher.build("x86_64-apple-darwin", ["safe"], BuildOptions(clean=False)).unwrap()
    assert "clean" not in compiler.calls


class TestCargoCompiler:
    def _compiler(self, root: Path, console: MockConsole | None = None) -> CargoCompiler:
        paths = ReleasePaths.from_workspace(Workspace(root=root), Config())
        return CargoCompiler(paths=paths, console=console or MockConsole())

    def test_native_command_with_features(self, tmp_path: Path) -> None:
        spec = default_registry().resolve("safe").unwrap()
        argv = self._compiler(tmp_path).build_command(spec, Target("x86_64-apple-darwin"))
        assert argv == [
            "cargo",
            "build",
            "--release",
            "--target",
            "x86_64-apple-darwin",
            "--features",
            "network-contacts,distribution",
            "--bin",
            "safe",
        ]

    def test_cross_command_without_features(self, tmp_path: Path) -> None:
        spec = default_registry().resolve("sn_auditor").unwrap()
        target = Target("armv7-unknown-linux-musleabihf")
        argv = self._compiler(tmp_path).build_command(spec, target)
        assert argv[0] == "cross"
        assert "--features" not in argv
        assert argv[-2:] == ["--bin", "sn_auditor"]

    def test_network_mode_forwarded_to_cross(self, tmp_path: Path) -> None:
        compiler = self._compiler(tmp_path)
        options = BuildOptions(network_version_mode="restricted")

        env = compiler.build_env(Target("aarch64-unknown-linux-musl"), options)

        assert env is not None
        assert env["NETWORK_VERSION_MODE"] == "restricted"
        assert env["CROSS_CONTAINER_OPTS"] == "--env NETWORK_VERSION_MODE=restricted"

    def test_no_env_without_network_mode(self, tmp_path: Path) -> None:
        compiler = self._compiler(tmp_path)
        assert compiler.build_env(Target("x86_64-apple-darwin"), BuildOptions()) is None

    def test_dry_run_echoes_setup(self, tmp_path: Path) -> None:
        console = MockConsole()
        compiler = self._compiler(tmp_path, console)

        compiler.prepare(Target("aarch64-unknown-linux-musl"), BuildOptions(dry_run=True)).unwrap()

        assert console.commands == [
            "rustup target add aarch64-unknown-linux-musl",
            "cargo install cross",
        ]
