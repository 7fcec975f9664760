"""Core domain models exposed to reviewfiles."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Sequence


class Severity(Enum):
  """Finding severity levels."""

  MESSAGE = "message"
  WARNING = "warning"
  FAILURE = "failure"


class ChangeKind(Enum):
  """How a file was touched between the base reference and HEAD."""

  CREATED = "created"
  MODIFIED = "modified"
  DELETED = "deleted"
  UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class Finding:
  """A single observation reported by rule code."""

  severity: Severity
  text: str
  file: str | None = None
  line: int | None = None

  @property
  def location(self) -> str | None:
    """Return `file:line`, `file`, or None when no file was given."""
    if not self.file:
      return None
    if self.line:
      return f"{self.file}:{self.line}"
    return self.file


@dataclass(frozen=True)
class MarkdownBlock:
  """Free-form markdown emitted by rule code."""

  text: str


@dataclass(frozen=True)
class FileDiff:
  """Line statistics for one changed file."""

  path: str
  lines_added: int
  lines_deleted: int
  total_changes: int

  @property
  def kind(self) -> ChangeKind:
    """Classify the file from its line counts."""
    if self.lines_added > 0 and self.lines_deleted == 0:
      return ChangeKind.CREATED
    if self.lines_deleted > 0 and self.lines_added == 0:
      return ChangeKind.DELETED
    if self.lines_added > 0 or self.lines_deleted > 0:
      return ChangeKind.MODIFIED
    return ChangeKind.UNCLASSIFIED


@dataclass(frozen=True)
class Commit:
  """A commit between the base reference and HEAD."""

  id: str
  author: str
  timestamp: datetime
  message: str

  @property
  def subject(self) -> str:
    return self.message.splitlines()[0] if self.message else ""


@dataclass(frozen=True)
class Author:
  """A hosting-platform account."""

  login: str
  avatar_url: str = ""
  profile_url: str = ""


@dataclass(frozen=True)
class BranchRef:
  """A branch name and the commit it points at."""

  name: str
  commit_id: str


@dataclass(frozen=True)
class PullRequest:
  """Pull request metadata snapshot."""

  number: int
  title: str
  body: str | None
  state: str
  url: str
  additions: int
  deletions: int
  changed_file_count: int
  author: Author
  created_at: str
  updated_at: str
  merged_at: str | None
  base: BranchRef
  head: BranchRef
  labels: Sequence[str] = field(default_factory=tuple)
  assignees: Sequence[str] = field(default_factory=tuple)
  draft: bool = False
  mergeable: bool | None = None


@dataclass(frozen=True)
class Review:
  """A submitted pull request review."""

  id: int
  reviewer_login: str
  body: str
  state: str
  submitted_at: str


@dataclass(frozen=True)
class Comment:
  """An issue-level or line-level pull request comment.

  Line-level comments carry `file_path` and, when the API reports one,
  `line_number`.
  """

  id: int
  author_login: str
  body: str
  created_at: str
  file_path: str | None = None
  line_number: int | None = None

  @property
  def is_line_comment(self) -> bool:
    return self.file_path is not None
