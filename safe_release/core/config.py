"""Typed configuration loading and access.

This module provides dataclasses for the optional ``release.toml`` at the
workspace root. Every field has a default so a bare checkout works without
any configuration file.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "Config",
    "ConfigError",
    "PathsConfig",
    "ReleaseHostConfig",
    "StorageConfig",
    "load_config",
    "DEFAULT_RELEASE_REPO",
]

DEFAULT_RELEASE_REPO = "maidsafe/safe_network"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Directories relative to the workspace root."""

    artifacts: str = "artifacts"
    deploy: str = "deploy"
    target: str = "target"


@dataclass(frozen=True, slots=True)
class ReleaseHostConfig:
    """GitHub release destination.

    ``components`` overrides the built-in allow-list of components that get
    release-asset uploads. None means "use the registry default".
    """

    repo: str = DEFAULT_RELEASE_REPO
    components: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Object storage destination."""

    region: str | None = None
    endpoint_url: str | None = None
    public_read: bool = True


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    release_host: ReleaseHostConfig = field(default_factory=ReleaseHostConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: if ``release_host.components`` is not a list of strings.
        """
        paths: StrDict = get_table(data, "paths") or {}
        release_host: StrDict = get_table(data, "release_host") or {}
        storage: StrDict = get_table(data, "storage") or {}

        components: tuple[str, ...] | None = None
        if "components" in release_host:
            items = get_str_list(release_host, "components")
            if items is None:
                raise ValueError("release_host.components must be a list of component names")
            components = tuple(items)

        public_read = get_bool(storage, "public_read")

        return cls(
            paths=PathsConfig(
                artifacts=get_str(paths, "artifacts") or "artifacts",
                deploy=get_str(paths, "deploy") or "deploy",
                target=get_str(paths, "target") or "target",
            ),
            release_host=ReleaseHostConfig(
                repo=get_str(release_host, "repo") or DEFAULT_RELEASE_REPO,
                components=components,
            ),
            storage=StorageConfig(
                region=get_str(storage, "region"),
                endpoint_url=get_str(storage, "endpoint_url"),
                public_read=True if public_read is None else public_read,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data = as_str_dict(tomllib.loads(path.read_bytes().decode("utf-8")))
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
