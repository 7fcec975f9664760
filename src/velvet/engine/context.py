"""The object handed to a reviewfile's `review` function."""

from dataclasses import dataclass, field
from typing import Mapping

from velvet.git import ChangeSet
from velvet.github import PullRequestContext
from velvet.results import ResultsCollector


@dataclass(frozen=True)
class ReviewContext:
  """Read-only review data plus the four reporting operations.

  `pull_request` is only set when GitHub context was requested and could
  be loaded; check it before use.
  """

  change_set: ChangeSet
  pull_request: PullRequestContext | None = None
  is_github: bool = False
  env: Mapping[str, str] = field(default_factory=dict)
  collector: ResultsCollector = field(default_factory=ResultsCollector, repr=False)

  @property
  def has_pull_request(self) -> bool:
    return self.pull_request is not None

  def message(self, text: str, file: str | None = None, line: int | None = None) -> None:
    self.collector.add_message(text, file, line)

  def warn(self, text: str, file: str | None = None, line: int | None = None) -> None:
    self.collector.add_warning(text, file, line)

  def fail(self, text: str, file: str | None = None, line: int | None = None) -> None:
    self.collector.add_failure(text, file, line)

  def markdown(self, text: str) -> None:
    self.collector.add_markdown(text)
