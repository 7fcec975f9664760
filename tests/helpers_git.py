"""Helpers for synthetic git-repo integration tests."""

import shutil
import subprocess
from pathlib import Path

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git(repo: Path, *args: str) -> str:
  completed = subprocess.run(
    ["git", *args],
    cwd=repo,
    check=True,
    capture_output=True,
    text=True,
  )
  return completed.stdout


def init_repo(tmp_path: Path) -> Path:
  """Create a repository on branch `main` with no commits."""
  repo = tmp_path / "repo"
  repo.mkdir()
  git(repo, "init", "-q")
  git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
  git(repo, "config", "user.email", "test@example.com")
  git(repo, "config", "user.name", "Test")
  git(repo, "config", "commit.gpgsign", "false")
  return repo


def write_file(repo: Path, rel_path: str, content: str | bytes) -> None:
  target = repo / rel_path
  target.parent.mkdir(parents=True, exist_ok=True)
  if isinstance(content, bytes):
    target.write_bytes(content)
  else:
    target.write_text(content, encoding="utf-8")


def commit_all(repo: Path, message: str) -> None:
  git(repo, "add", "-A")
  git(repo, "commit", "-q", "-m", message)
