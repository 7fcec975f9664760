"""Reporting functions for reviewfiles.

Reviewfiles can either call the methods on the context they receive or
import these module-level functions:

  from velvet import fail, warn

  def review(ctx):
    if ctx.change_set.has_changes("migrations/**"):
      warn("Migrations changed, remember to run them in staging")

The functions write into the collector of the evaluation currently
running in this thread or task.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

from velvet.results import ResultsCollector

_active_collector: ContextVar[ResultsCollector | None] = ContextVar(
  "velvet_active_collector", default=None
)


@contextmanager
def collecting(collector: ResultsCollector) -> Iterator[ResultsCollector]:
  """Route the module-level reporting functions into `collector`."""
  token = _active_collector.set(collector)
  try:
    yield collector
  finally:
    _active_collector.reset(token)


def _collector() -> ResultsCollector:
  collector = _active_collector.get()
  if collector is None:
    raise RuntimeError("velvet reporting functions can only be used during an evaluation")
  return collector


def message(text: str, file: str | None = None, line: int | None = None) -> None:
  """Post an informational message."""
  _collector().add_message(text, file, line)


def warn(text: str, file: str | None = None, line: int | None = None) -> None:
  """Post a non-blocking warning."""
  _collector().add_warning(text, file, line)


def fail(text: str, file: str | None = None, line: int | None = None) -> None:
  """Post a blocking failure."""
  _collector().add_failure(text, file, line)


def markdown(text: str) -> None:
  """Post free-form markdown for the report."""
  _collector().add_markdown(text)
