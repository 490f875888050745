from __future__ import annotations

from pathlib import Path

import pytest

from safe_release.core.config import Config
from safe_release.core.result import Err, Ok
from safe_release.core.workspace import (
    ReleasePaths,
    Workspace,
    detect_workspace,
    is_workspace_root,
)


def _make_workspace(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "Cargo.toml").write_text('[workspace]\nmembers = ["sn_node"]\n', encoding="utf-8")
    return root


def test_is_workspace_root(tmp_path: Path) -> None:
    assert not is_workspace_root(tmp_path)
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "x"\n', encoding="utf-8")
    assert not is_workspace_root(tmp_path)
    _make_workspace(tmp_path)
    assert is_workspace_root(tmp_path)


def test_detect_walks_upward(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("WORKSPACE_ROOT", raising=False)
    root = _make_workspace(tmp_path / "repo")
    crate = root / "sn_node" / "src"
    crate.mkdir(parents=True)
    (root / "sn_node" / "Cargo.toml").write_text('[package]\nname = "sn_node"\n', encoding="utf-8")

    result = detect_workspace(crate)

    assert isinstance(result, Ok)
    assert result.value.root == root.resolve()


def test_detect_env_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WORKSPACE_ROOT", str(tmp_path))
    result = detect_workspace()
    assert isinstance(result, Ok)
    assert result.value.root == tmp_path.resolve()


def test_detect_fails_outside_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("WORKSPACE_ROOT", raising=False)
    result = detect_workspace(tmp_path)
    assert isinstance(result, Err)
    assert "Cargo workspace" in result.error.message


def test_release_paths_layout(tmp_path: Path) -> None:
    paths = ReleasePaths.from_workspace(Workspace(root=tmp_path), Config())

    assert paths.staging_dir("x86_64-apple-darwin") == (
        tmp_path / "artifacts" / "x86_64-apple-darwin" / "release"
    )
    assert paths.toolchain_output_dir("x86_64-apple-darwin") == (
        tmp_path / "target" / "x86_64-apple-darwin" / "release"
    )
    assert paths.deploy_dir_for("safe") == tmp_path / "deploy" / "safe"
