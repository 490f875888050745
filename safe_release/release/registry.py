"""Binary registry: what we build, where its version lives, where it ships.

The compiled binary name, the crate (component) name used in release
commits, the crate directory holding its Cargo.toml and the bucket name all
differ in places (``safe`` lives in ``sn_cli``; the ``sn-node-manager``
crate sits in ``sn_node_manager/``). They are listed explicitly here and
never derived from one another.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from safe_release.core.result import Err, Ok, Result
from safe_release.release.errors import UnknownBinary

__all__ = [
    "BinaryRegistry",
    "BinarySpec",
    "DEFAULT_BINARIES",
    "DEFAULT_RELEASE_HOST_COMPONENTS",
    "default_registry",
]


@dataclass(frozen=True, slots=True)
class BinarySpec:
    """Everything the pipeline knows about one binary.

    Attributes:
        name: compiled binary name (``cargo build --bin <name>``)
        component: crate name, as it appears in release commits and tags
        crate_dir: directory (relative to the workspace) holding its Cargo.toml
        bucket: object storage bucket receiving its archives
        features: cargo features required to build it
        publishable: explicitly released; unmarked binaries are package-only
    """

    name: str
    component: str
    crate_dir: str
    bucket: str
    features: tuple[str, ...] = ()
    publishable: bool = False


DEFAULT_BINARIES: tuple[BinarySpec, ...] = (
    BinarySpec("faucet", "sn_faucet", "sn_faucet", "sn-faucet", ("distribution",), True),
    BinarySpec("nat-detection", "nat-detection", "nat-detection", "nat-detection", (), True),
    BinarySpec("node-launchpad", "node-launchpad", "node-launchpad", "node-launchpad", (), True),
    BinarySpec(
        "safe", "sn_cli", "sn_cli", "sn-cli", ("network-contacts", "distribution"), True
    ),
    BinarySpec("safenode", "sn_node", "sn_node", "sn-node", ("network-contacts",), True),
    BinarySpec(
        "safenode-manager", "sn-node-manager", "sn_node_manager", "sn-node-manager", (), True
    ),
    # Shipped inside the node manager release; packaged but never published on its own.
    BinarySpec("safenodemand", "sn-node-manager", "sn_node_manager", "sn-node-manager"),
    BinarySpec(
        "safenode_rpc_client",
        "sn_node_rpc_client",
        "sn_node_rpc_client",
        "sn-node-rpc-client",
        (),
        True,
    ),
    BinarySpec("sn_auditor", "sn_auditor", "sn_auditor", "sn-auditor", (), True),
)

# Components whose binaries are attached to their GitHub release. Kept apart
# from `publishable`: every publishable binary goes to its bucket, only these
# also get release assets.
DEFAULT_RELEASE_HOST_COMPONENTS: frozenset[str] = frozenset(
    {"node-launchpad", "sn_cli", "sn_node", "sn-node-manager", "sn_auditor"}
)


class BinaryRegistry:
    """Immutable lookup table over BinarySpec entries."""

    def __init__(self, specs: Iterable[BinarySpec]) -> None:
        ordered = tuple(specs)
        by_name: dict[str, BinarySpec] = {}
        by_component: dict[str, BinarySpec] = {}
        for spec in ordered:
            if spec.name in by_name:
                raise ValueError(f"duplicate binary name: {spec.name}")
            by_name[spec.name] = spec
            if not spec.publishable:
                continue
            other = by_component.get(spec.component)
            if other is not None:
                raise ValueError(
                    f"component {spec.component} has more than one publishable binary "
                    f"({other.name}, {spec.name})"
                )
            by_component[spec.component] = spec
        self._specs = ordered
        self._by_name = by_name
        self._publishable_by_component = by_component

    def __iter__(self):
        return iter(self._specs)

    def names(self) -> tuple[str, ...]:
        """All registered binary names, in build order."""
        return tuple(spec.name for spec in self._specs)

    def resolve(self, binary: str) -> Result[BinarySpec, UnknownBinary]:
        spec = self._by_name.get(binary)
        if spec is None:
            return Err(UnknownBinary(name=binary, supported=self.names()))
        return Ok(spec)

    def publishable(self) -> frozenset[str]:
        return frozenset(spec.name for spec in self._specs if spec.publishable)

    def publishable_for_component(self, component: str) -> BinarySpec | None:
        """The publishable binary built from component, if any."""
        return self._publishable_by_component.get(component)


def default_registry() -> BinaryRegistry:
    return BinaryRegistry(DEFAULT_BINARIES)
