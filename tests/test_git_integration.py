"""Integration tests using synthetic git repositories."""

from pathlib import Path

import pytest
from velvet.git import BackendUnavailable, build_change_set, load_change_set

from tests.helpers_git import commit_all, git, init_repo, requires_git, write_file

pytestmark = requires_git


@pytest.fixture
def repo(tmp_path: Path) -> Path:
  repo = init_repo(tmp_path)
  write_file(repo, "keep.py", "a = 1\nb = 2\n")
  write_file(repo, "remove.py", "x = 1\ny = 2\n")
  write_file(repo, "docs/rename_me.md", "same\ncontent\n")
  write_file(repo, "logo.bin", b"\x00\x01\x02binary")
  commit_all(repo, "Initial commit")
  git(repo, "checkout", "-q", "-b", "feature")
  return repo


def test_classifies_real_changes(repo: Path) -> None:
  write_file(repo, "src/new.py", "print('hi')\n")
  write_file(repo, "keep.py", "a = 1\nb = 3\n")
  (repo / "remove.py").unlink()
  git(repo, "mv", "docs/rename_me.md", "docs/renamed.md")
  write_file(repo, "logo.bin", b"\x00\x01\x03binary")
  commit_all(repo, "Feature work")

  changes = build_change_set("main", repo=repo)

  assert changes.created_files == ("src/new.py",)
  assert changes.modified_files == ("keep.py",)
  assert changes.deleted_files == ("remove.py",)
  assert changes.unclassified_files == ("docs/renamed.md",)
  assert changes.binary_files == ("logo.bin",)
  assert changes.file_match("src/**/*.py").created == ("src/new.py",)


def test_commits_are_oldest_first(repo: Path) -> None:
  write_file(repo, "one.py", "1\n")
  commit_all(repo, "First change")
  write_file(repo, "two.py", "2\n")
  commit_all(repo, "Second change")

  changes = build_change_set("main", repo=repo)

  assert [c.message for c in changes.commits] == ["First change", "Second change"]
  assert all(c.author == "Test" for c in changes.commits)
  assert changes.commits[0].timestamp.tzinfo is not None


def test_file_diff_returns_text(repo: Path) -> None:
  write_file(repo, "keep.py", "a = 1\nb = 3\n")
  commit_all(repo, "Tweak")

  changes = build_change_set("main", repo=repo)

  assert "+b = 3" in changes.file_diff("keep.py")


def test_missing_base_raises(repo: Path) -> None:
  with pytest.raises(BackendUnavailable):
    build_change_set("does-not-exist", repo=repo)


def test_missing_base_degrades(repo: Path) -> None:
  changes = load_change_set("does-not-exist", repo=repo)
  assert changes.is_empty
