"""Shared pytest fixtures for all tests."""
import shutil
import subprocess

import pytest

from mcp_git_command.config import ServerConfig
from mcp_git_command.mcp import tools

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


def git(repo, *args):
    """Run git in repo and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=str(repo),
        capture_output=True,
        text=True,
        check=True
    )
    return result.stdout


@pytest.fixture
def git_repo(tmp_path):
    """Create an empty git repository with a local identity."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")

    repo_dir = tmp_path / "repo"
    repo_dir.mkdir()
    git(repo_dir, "init")
    git(repo_dir, "config", "user.email", "test@example.com")
    git(repo_dir, "config", "user.name", "Test User")
    git(repo_dir, "config", "commit.gpgsign", "false")
    return repo_dir


@pytest.fixture(autouse=True)
def default_config():
    """Give every test a fresh default configuration."""
    tools.set_config(ServerConfig())
    yield
    tools.set_config(ServerConfig())
