"""Target matrix: the platforms we ship binaries for.

A Target wraps a Rust target triple and derives everything the pipeline
needs from it (executable suffix, libc, build strategy) in one place, so
call sites never inspect the triple string themselves.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from safe_release.core.result import Err, Ok, Result
from safe_release.release.errors import UnsupportedPlatform

__all__ = [
    "BuildStrategy",
    "DEFAULT_TRIPLES",
    "Target",
    "TargetMatrix",
    "default_target_matrix",
    "strategy_for",
]


class BuildStrategy(Enum):
    """How binaries for a target are compiled."""

    NATIVE = "cargo"
    CROSS = "cross"

    def __str__(self) -> str:
        return self.value

    @property
    def program(self) -> str:
        return self.value


# Architecture prefix -> strategy. First match wins; unmatched is native.
_STRATEGY_BY_ARCH_PREFIX: tuple[tuple[str, BuildStrategy], ...] = (
    ("aarch64", BuildStrategy.CROSS),
    ("armv7", BuildStrategy.CROSS),
    ("arm", BuildStrategy.CROSS),
)

DEFAULT_TRIPLES: tuple[str, ...] = (
    "x86_64-pc-windows-msvc",
    "x86_64-apple-darwin",
    "x86_64-unknown-linux-musl",
    "arm-unknown-linux-musleabi",
    "armv7-unknown-linux-musleabihf",
    "aarch64-unknown-linux-musl",
)


def strategy_for(triple: str) -> BuildStrategy:
    arch = triple.split("-", 1)[0]
    for prefix, strategy in _STRATEGY_BY_ARCH_PREFIX:
        if arch.startswith(prefix):
            return strategy
    return BuildStrategy.NATIVE


@dataclass(frozen=True, slots=True)
class Target:
    """One supported platform, identified by its target triple."""

    triple: str

    def __str__(self) -> str:
        return self.triple

    @property
    def arch(self) -> str:
        return self.triple.split("-", 1)[0]

    @property
    def is_windows(self) -> bool:
        return "windows" in self.triple

    @property
    def is_musl(self) -> bool:
        return "musl" in self.triple.rsplit("-", 1)[-1]

    @property
    def strategy(self) -> BuildStrategy:
        return strategy_for(self.triple)

    @property
    def exe_suffix(self) -> str:
        return ".exe" if self.is_windows else ""

    def exe_name(self, binary: str) -> str:
        """Executable file name, e.g. exe_name("safe") -> "safe.exe" on Windows."""
        return f"{binary}{self.exe_suffix}"

    @property
    def needs_musl_tools(self) -> bool:
        """Native musl builds link with the host's musl-gcc."""
        return self.is_musl and self.strategy is BuildStrategy.NATIVE


class TargetMatrix:
    """Immutable, ordered set of supported targets."""

    def __init__(self, triples: Iterable[str]) -> None:
        ordered: list[Target] = []
        seen: set[str] = set()
        for triple in triples:
            if triple in seen:
                raise ValueError(f"duplicate target triple: {triple}")
            seen.add(triple)
            ordered.append(Target(triple))
        self._targets = tuple(ordered)
        self._by_triple = {t.triple: t for t in self._targets}

    def __len__(self) -> int:
        return len(self._targets)

    def __iter__(self):
        return iter(self._targets)

    def all(self) -> tuple[Target, ...]:
        """All targets in declaration order."""
        return self._targets

    def triples(self) -> tuple[str, ...]:
        return tuple(t.triple for t in self._targets)

    def is_supported(self, platform: str) -> bool:
        return platform in self._by_triple

    def get(self, platform: str) -> Result[Target, UnsupportedPlatform]:
        target = self._by_triple.get(platform)
        if target is None:
            return Err(UnsupportedPlatform(platform=platform, supported=self.triples()))
        return Ok(target)


def default_target_matrix() -> TargetMatrix:
    return TargetMatrix(DEFAULT_TRIPLES)
