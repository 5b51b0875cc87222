"""
Shared fixtures: throwaway git repositories under tmp_path.
"""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git(*args, cwd):
    """Run git and return stdout, failing the test on error."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, f"git {' '.join(args)} failed: {result.stderr}"
    return result.stdout.strip()


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Isolate git from the user's configuration and allow file:// clones."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_CONFIG_COUNT", "2")
    monkeypatch.setenv("GIT_CONFIG_KEY_0", "protocol.file.allow")
    monkeypatch.setenv("GIT_CONFIG_VALUE_0", "always")
    monkeypatch.setenv("GIT_CONFIG_KEY_1", "init.defaultBranch")
    monkeypatch.setenv("GIT_CONFIG_VALUE_1", "master")
    for key in [k for k in os.environ if k.startswith("SUBSYNC_")]:
        monkeypatch.delenv(key)
    return tmp_path


@pytest.fixture
def make_remote(git_env):
    """Factory for source repositories with one commit each."""
    remotes = git_env / "remotes"

    def _make(name):
        path = remotes / name
        path.mkdir(parents=True)
        git("init", "-q", cwd=path)
        (path / "README.md").write_text(f"# {name}\n")
        git("add", "README.md", cwd=path)
        git("commit", "-q", "-m", "initial", cwd=path)
        return path

    return _make


@pytest.fixture
def parent_repo(git_env):
    """An empty parent repository."""
    path = git_env / "parent"
    path.mkdir()
    git("init", "-q", cwd=path)
    return path


def commit_file(repo: Path, name: str, content: str) -> str:
    """Commit one file to ``repo`` and return the new HEAD."""
    (repo / name).write_text(content)
    git("add", name, cwd=repo)
    git("commit", "-q", "-m", f"update {name}", cwd=repo)
    return git("rev-parse", "HEAD", cwd=repo)
