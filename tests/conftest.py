"""Shared fixtures for build-provenance tests."""

import subprocess

import pytest

from build_provenance.runner import GitRunner


@pytest.fixture
def fake_git(monkeypatch, tmp_path):
    """Point git at tmp_path and answer commands from a dict.

    Call the fixture with a dict keyed by the git arguments joined by spaces
    (after `-C <dir>`), valued by stdout strings. Returns the GitRunner and
    the list of recorded calls.
    """
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'demo'\nversion = '1.0.0'\n")
    monkeypatch.setattr("build_provenance.status.log", lambda *args, **kwargs: None)
    monkeypatch.setattr("build_provenance.metadata.log", lambda *args, **kwargs: None)

    def _install(responses):
        calls = []

        def _run_cmd(cmd, cwd=None):
            key = " ".join(cmd[3:])
            calls.append(key)
            return subprocess.CompletedProcess(cmd, 0, stdout=responses[key].encode("utf-8"), stderr=b"")

        monkeypatch.setattr("build_provenance.runner.run_cmd", _run_cmd)
        return GitRunner(str(tmp_path)), calls

    return _install
