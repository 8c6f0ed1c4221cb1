"""Tests for extpub.publish.checks module."""

from __future__ import annotations

from pathlib import Path

import pytest

from extpub.build.execution import TaskOutcome, execute
from extpub.build.project import Build
from extpub.output.console import MockConsole
from extpub.publish.checks import CheckSigningKeyTask, CheckVersionTask, version_problem


@pytest.mark.parametrize("version", ["1.2.3", "0.1.0-rc2", "1.2.3-4-gabc1234", "2.0.0-rc1-12-g0f0f0f0"])
def test_releasable_versions(version: str) -> None:
    assert version_problem(version) is None


@pytest.mark.parametrize(
    ("version", "problem"),
    [
        ("unspecified", "unspecified"),
        ("1.2.3.dirty", "dirty working tree"),
        ("1.2.3-4-gabc1234.dirty", "dirty working tree"),
        ("1.2", "not of the form"),
        ("1.2.3-SNAPSHOT", "not of the form"),
    ],
)
def test_unreleasable_versions(version: str, problem: str) -> None:
    result = version_problem(version)
    assert result is not None
    assert problem in result


def _build(tmp_path: Path, environ: dict[str, str], version: str = "1.2.3") -> tuple[Build, MockConsole]:
    console = MockConsole()
    build = Build(tmp_path, "acme", environ=environ, console=console)
    build.root.version = version
    build.root.tasks.register("checkSigningKey", CheckSigningKeyTask)
    build.root.tasks.register("checkVersion", CheckVersionTask)
    return build, console


class TestCheckSigningKey:
    def test_names_missing_variables(self, tmp_path: Path) -> None:
        build, _ = _build(tmp_path, {"GPG_SIGNING_KEY_ID": "ABCD1234"})
        report = execute(build, ["checkSigningKey"])
        assert report.failure is not None
        assert "GPG_SIGNING_KEY, GPG_SIGNING_KEY_PASSWORD" in (report.failure.message or "")
        assert "GPG_SIGNING_KEY_ID" not in (report.failure.message or "")

    def test_passes_with_key(self, tmp_path: Path) -> None:
        environ = {
            "GPG_SIGNING_KEY_ID": "ABCD1234",
            "GPG_SIGNING_KEY": "key",
            "GPG_SIGNING_KEY_PASSWORD": "secret",
        }
        build, console = _build(tmp_path, environ)
        report = execute(build, ["checkSigningKey"])
        assert report.outcome(":checkSigningKey") is TaskOutcome.EXECUTED
        assert "OK Signing key is available" in console.messages
        assert "secret" not in console.text


class TestCheckVersion:
    def test_fails_for_dirty_version(self, tmp_path: Path) -> None:
        build, console = _build(tmp_path, {}, version="1.2.3.dirty")
        report = execute(build, ["checkVersion"])
        assert report.failure is not None
        assert report.failure.message is not None
        assert report.failure.message.startswith("Cannot publish: version 1.2.3.dirty")
        assert "hint: publish from a clean checkout" in report.failure.message
        assert console.has_error()

    def test_passes(self, tmp_path: Path) -> None:
        build, console = _build(tmp_path, {})
        assert execute(build, ["checkVersion"]).success
        assert "OK Version 1.2.3 can be released" in console.messages
