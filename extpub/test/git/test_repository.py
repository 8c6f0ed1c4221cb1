"""Tests for extpub.git.repository module."""

from __future__ import annotations

from pathlib import Path

import pytest

from extpub.core.result import Err, Ok
from extpub.git import repository as repository_module
from extpub.git.repository import Repository, normalize_remote_url
from extpub.platform.process import ProcessError


class TestNormalizeRemoteUrl:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("git@github.com:acme/widgets.git", "https://github.com/acme/widgets"),
            ("https://github.com/acme/widgets.git", "https://github.com/acme/widgets"),
            ("https://github.com/acme/widgets", "https://github.com/acme/widgets"),
        ],
    )
    def test_normalize(self, url: str, expected: str) -> None:
        assert normalize_remote_url(url) == expected


class TestRepository:
    def test_remote_url(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[list[str]] = []

        def fake_run(cmd: list[str], cwd: Path, *, timeout: float | None = None) -> Ok[str]:
            calls.append(cmd)
            return Ok("git@github.com:acme/widgets.git\n")

        monkeypatch.setattr(repository_module, "run_process", fake_run)
        assert Repository(tmp_path).remote_url() == Ok("https://github.com/acme/widgets")
        assert calls == [["git", "remote", "get-url", "origin"]]

    def test_empty_remote_url(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(repository_module, "run_process", lambda cmd, cwd, timeout=None: Ok("\n"))
        result = Repository(tmp_path).remote_url()
        assert isinstance(result, Err)
        assert "empty url" in result.error.message

    def test_git_failure(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        error = ProcessError(
            command=("git", "rev-parse", "HEAD"),
            returncode=128,
            stdout="",
            stderr="fatal: not a git repository\n",
        )
        monkeypatch.setattr(repository_module, "run_process", lambda cmd, cwd, timeout=None: Err(error))
        result = Repository(tmp_path).head_commit()
        assert isinstance(result, Err)
        assert result.error.message == "fatal: not a git repository"
        assert result.error.returncode == 128

    def test_head_commit(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(repository_module, "run_process", lambda cmd, cwd, timeout=None: Ok("abc123\n"))
        assert Repository(tmp_path).head_commit() == Ok("abc123")
