"""Git change model."""

from velvet.git.backend import BackendUnavailable, GitBackend, run_git
from velvet.git.changeset import (
    ChangeSet,
    FileMatch,
    build_change_set,
    load_change_set,
    match_paths,
)

__all__ = [
  "BackendUnavailable",
  "ChangeSet",
  "FileMatch",
  "GitBackend",
  "build_change_set",
  "load_change_set",
  "match_paths",
  "run_git",
]
