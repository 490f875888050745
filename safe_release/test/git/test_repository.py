from __future__ import annotations

from pathlib import Path

import pytest

from safe_release.core.result import Err, Ok
from safe_release.git import repository as repo_mod
from safe_release.git.repository import Repository
from safe_release.platform.process import ProcessError


def test_commit_message_strips_output(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
        del timeout
        assert cwd == tmp_path
        return Ok("chore(release): sn_node-v1.0.0\n\nbody\n\n")

    monkeypatch.setattr(repo_mod, "run_process", fake_run)

    result = Repository(tmp_path).commit_message()
    assert result == Ok("chore(release): sn_node-v1.0.0\n\nbody")


def test_commit_message_error(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
        del cwd, timeout
        return Err(ProcessError(tuple(cmd), 128, "", "fatal: not a git repository\n"))

    monkeypatch.setattr(repo_mod, "run_process", fake_run)

    result = Repository(tmp_path).commit_message("v1")
    assert isinstance(result, Err)
    assert result.error.message == "fatal: not a git repository"
    assert result.error.returncode == 128
