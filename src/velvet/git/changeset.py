"""Change model built from git diff statistics."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from wcmatch import glob

from velvet.git.backend import BackendUnavailable, GitBackend
from velvet.models import ChangeKind, Commit, FileDiff

logger = logging.getLogger(__name__)

GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE

Patterns = str | Sequence[str]


def _as_patterns(patterns: Patterns) -> list[str]:
  if isinstance(patterns, str):
    return [patterns]
  return list(patterns)


def match_paths(paths: Sequence[str], patterns: Patterns) -> tuple[str, ...]:
  """Return the paths matching any of the glob patterns, in input order."""
  compiled = _as_patterns(patterns)
  if not compiled:
    return ()
  return tuple(p for p in paths if glob.globmatch(p, compiled, flags=GLOB_FLAGS))


@dataclass(frozen=True)
class FileMatch:
  """Changed files matching one or more glob patterns."""

  edited: tuple[str, ...]
  created: tuple[str, ...]
  deleted: tuple[str, ...]
  _universe: tuple[str, ...] = field(default=(), repr=False)

  def get_all(self) -> list[str]:
    """Matched edited files followed by matched created files."""
    return [*self.edited, *self.created]

  def matches(self, patterns: Patterns) -> bool:
    """Check the patterns against every changed file, not just this match."""
    return bool(match_paths(self._universe, patterns))

  def __bool__(self) -> bool:
    return bool(self.edited or self.created or self.deleted)


@dataclass(frozen=True)
class ChangeSet:
  """Immutable snapshot of the changes between a base reference and HEAD."""

  base: str
  created_files: tuple[str, ...] = ()
  modified_files: tuple[str, ...] = ()
  deleted_files: tuple[str, ...] = ()
  unclassified_files: tuple[str, ...] = ()
  binary_files: tuple[str, ...] = ()
  commits: tuple[Commit, ...] = ()
  file_diffs: tuple[FileDiff, ...] = ()
  repo: Path | None = field(default=None, compare=False, repr=False)

  @classmethod
  def empty(cls, base: str, repo: Path | None = None) -> "ChangeSet":
    return cls(base=base, repo=repo)

  @classmethod
  def from_diffs(
    cls,
    base: str,
    diffs: Sequence[FileDiff],
    commits: Sequence[Commit] = (),
    binary_files: Sequence[str] = (),
    repo: Path | None = None,
  ) -> "ChangeSet":
    """Classify file diffs into created/modified/deleted buckets."""
    buckets: dict[ChangeKind, list[str]] = {kind: [] for kind in ChangeKind}
    for diff in diffs:
      bucket = buckets[diff.kind]
      if diff.path not in bucket:
        bucket.append(diff.path)

    return cls(
      base=base,
      created_files=tuple(buckets[ChangeKind.CREATED]),
      modified_files=tuple(buckets[ChangeKind.MODIFIED]),
      deleted_files=tuple(buckets[ChangeKind.DELETED]),
      unclassified_files=tuple(buckets[ChangeKind.UNCLASSIFIED]),
      binary_files=tuple(binary_files),
      commits=tuple(commits),
      file_diffs=tuple(diffs),
      repo=repo,
    )

  @property
  def is_empty(self) -> bool:
    return not (self.file_diffs or self.binary_files or self.commits)

  def all_files(self) -> list[str]:
    """Every classified path: modified, created, then deleted."""
    return [*self.modified_files, *self.created_files, *self.deleted_files]

  def changed_files(self) -> list[str]:
    """Modified and created files (files that exist at HEAD)."""
    return [*self.modified_files, *self.created_files]

  def file_match(self, patterns: Patterns) -> FileMatch:
    """Match changed files against one glob or a list of globs (OR)."""
    return FileMatch(
      edited=match_paths(self.modified_files, patterns),
      created=match_paths(self.created_files, patterns),
      deleted=match_paths(self.deleted_files, patterns),
      _universe=tuple(self.all_files()),
    )

  def has_changes(self, patterns: Patterns) -> bool:
    match = self.file_match(patterns)
    return bool(match.edited) or bool(match.created) or bool(match.deleted)

  def diff_for(self, path: str) -> FileDiff | None:
    for diff in self.file_diffs:
      if diff.path == path:
        return diff
    return None

  def file_diff(self, path: str) -> str:
    """Return the textual diff of one file against the base, or ''."""
    try:
      return GitBackend(self.repo).file_diff(self.base, path)
    except BackendUnavailable as e:
      logger.debug("Could not read diff for %s: %s", path, e)
      return ""

  @property
  def stats(self) -> dict[str, int]:
    return {
      "files": len(self.file_diffs),
      "created": len(self.created_files),
      "modified": len(self.modified_files),
      "deleted": len(self.deleted_files),
      "commits": len(self.commits),
      "additions": sum(d.lines_added for d in self.file_diffs),
      "deletions": sum(d.lines_deleted for d in self.file_diffs),
    }


def build_change_set(
  base: str = "main",
  repo: Path | None = None,
  backend: GitBackend | None = None,
) -> ChangeSet:
  """Query git and build a ChangeSet.

  Raises:
    BackendUnavailable: The repository or base reference cannot be read.
  """
  backend = backend or GitBackend(repo)
  diffs, binary = backend.diff_stats(base)
  commits = backend.commits(base)
  return ChangeSet.from_diffs(base, diffs, commits, binary, repo=repo)


def load_change_set(
  base: str = "main",
  repo: Path | None = None,
  backend: GitBackend | None = None,
) -> ChangeSet:
  """Build a ChangeSet, degrading to an empty one when git fails."""
  try:
    return build_change_set(base, repo, backend)
  except BackendUnavailable as e:
    logger.warning("Failed to read git changes against %s: %s", base, e)
    return ChangeSet.empty(base, repo)
