"""Git subprocess backend for diff statistics and commit history."""

import subprocess
from datetime import datetime
from pathlib import Path

from velvet.models import Commit, FileDiff


class BackendUnavailable(Exception):
  """The version-control backend could not be queried."""


# Field and record separators for `git log --format`
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = _FIELD_SEP.join(["%H", "%an", "%aI", "%B"]) + _RECORD_SEP


def _sanitize_error(stderr: str) -> str:
  """Remove potentially sensitive path information from error messages."""
  lines = stderr.strip().split("\n")
  sanitized = []
  for line in lines:
    if "fatal:" in line or "error:" in line:
      sanitized.append(line.split("/")[-1] if "/" in line else line)
    else:
      sanitized.append(line)
  return "\n".join(sanitized)


def run_git(*args: str, cwd: Path | None = None) -> str:
  """Run a git command and return stdout."""
  try:
    result = subprocess.run(
      ["git", *args],
      capture_output=True,
      text=True,
      check=True,
      cwd=cwd,
    )
    return result.stdout
  except subprocess.CalledProcessError as e:
    sanitized = _sanitize_error(e.stderr or "")
    raise BackendUnavailable(f"git {' '.join(args)} failed: {sanitized}") from e
  except FileNotFoundError as e:
    raise BackendUnavailable("git executable not found") from e


def parse_numstat(output: str) -> tuple[list[FileDiff], list[str]]:
  """Parse `git diff --numstat -z` output.

  Returns:
    Tuple of (file_diffs, binary_paths). Renamed entries are reported
    under their new path.
  """
  diffs: list[FileDiff] = []
  binary: list[str] = []
  tokens = output.split("\0")
  i = 0

  while i < len(tokens):
    token = tokens[i]
    i += 1
    if not token.strip():
      continue

    added, deleted, path = token.split("\t", 2)
    if not path:
      # Rename or copy: the next two tokens are the old and new paths
      path = tokens[i + 1]
      i += 2

    if added == "-" or deleted == "-":
      binary.append(path)
      continue

    lines_added = int(added)
    lines_deleted = int(deleted)
    diffs.append(FileDiff(
      path=path,
      lines_added=lines_added,
      lines_deleted=lines_deleted,
      total_changes=lines_added + lines_deleted,
    ))

  return diffs, binary


def parse_log(output: str) -> list[Commit]:
  """Parse `git log` output produced with the record format above."""
  commits: list[Commit] = []
  for record in output.split(_RECORD_SEP):
    record = record.strip("\n")
    if not record:
      continue
    sha, author, date, message = record.split(_FIELD_SEP, 3)
    commits.append(Commit(
      id=sha,
      author=author,
      timestamp=datetime.fromisoformat(date),
      message=message.strip(),
    ))
  return commits


class GitBackend:
  """Reads diff statistics and history from a local repository."""

  def __init__(self, repo: Path | None = None):
    self.repo = repo

  def diff_stats(self, base: str, head: str = "HEAD") -> tuple[list[FileDiff], list[str]]:
    output = run_git("diff", "--numstat", "-z", "--no-color", base, head, cwd=self.repo)
    return parse_numstat(output)

  def commits(self, base: str, head: str = "HEAD") -> list[Commit]:
    output = run_git(
      "log", "--reverse", f"--format={_LOG_FORMAT}", f"{base}..{head}",
      cwd=self.repo,
    )
    return parse_log(output)

  def file_diff(self, base: str, path: str, head: str = "HEAD") -> str:
    return run_git("diff", "--no-color", base, head, "--", path, cwd=self.repo)
