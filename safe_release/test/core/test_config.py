"""Tests for safe_release.core.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from safe_release.core.config import (
    DEFAULT_RELEASE_REPO,
    Config,
    ConfigError,
    PathsConfig,
    load_config,
)
from safe_release.core.result import Err, Ok


class TestDefaults:
    def test_paths(self) -> None:
        paths = PathsConfig()
        assert (paths.artifacts, paths.deploy, paths.target) == ("artifacts", "deploy", "target")

    def test_release_host(self) -> None:
        config = Config()
        assert config.release_host.repo == DEFAULT_RELEASE_REPO
        assert config.release_host.components is None

    def test_storage_is_public_by_default(self) -> None:
        assert Config().storage.public_read is True

    def test_frozen(self) -> None:
        config = Config()
        with pytest.raises(AttributeError):
            config.paths = PathsConfig()  # type: ignore[misc]


class TestFromDict:
    def test_empty(self) -> None:
        assert Config.from_dict({}) == Config()

    def test_overrides(self) -> None:
        config = Config.from_dict(
            {
                "paths": {"deploy": "out/deploy"},
                "release_host": {"repo": "example/fork", "components": ["sn_node"]},
                "storage": {"region": "eu-west-2", "public_read": False},
            }
        )
        assert config.paths.deploy == "out/deploy"
        assert config.paths.artifacts == "artifacts"
        assert config.release_host.repo == "example/fork"
        assert config.release_host.components == ("sn_node",)
        assert config.storage.region == "eu-west-2"
        assert config.storage.public_read is False

    def test_empty_components_list_disables_release_assets(self) -> None:
        config = Config.from_dict({"release_host": {"components": []}})
        assert config.release_host.components == ()

    def test_invalid_components(self) -> None:
        with pytest.raises(ValueError):
            Config.from_dict({"release_host": {"components": "sn_node"}})


class TestLoadConfig:
    def test_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "release.toml"
        path.write_text('[release_host]\nrepo = "example/fork"\n', encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.release_host.repo == "example/fork"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "release.toml")
        assert isinstance(result, Err)
        assert "not found" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "release.toml"
        path.write_text("[paths\n", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert isinstance(result.error, ConfigError)
        assert result.error.path == path

    def test_invalid_structure(self, tmp_path: Path) -> None:
        path = tmp_path / "release.toml"
        path.write_text("[release_host]\ncomponents = [1, 2]\n", encoding="utf-8")

        result = load_config(path)

        assert isinstance(result, Err)
        assert "Invalid config structure" in result.error.message
