"""Pytest fixtures."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest
from velvet.engine import EvaluationResult, ReviewFileInfo
from velvet.git import ChangeSet
from velvet.models import Commit, FileDiff
from velvet.results import ResultsCollector

from tests.factories import make_diff


@pytest.fixture
def sample_diffs() -> list[FileDiff]:
  return [
    make_diff("a.ts", 10, 0),
    make_diff("b.ts", 0, 5),
    make_diff("c.ts", 3, 2),
  ]


@pytest.fixture
def sample_commit() -> Commit:
  return Commit(
    id="abc123",
    author="Ada",
    timestamp=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    message="Add feature\n\nLonger description",
  )


@pytest.fixture
def sample_change_set(sample_diffs: list[FileDiff], sample_commit: Commit) -> ChangeSet:
  return ChangeSet.from_diffs("main", sample_diffs, [sample_commit])


@pytest.fixture
def make_result(sample_change_set: ChangeSet) -> Callable[[ResultsCollector], EvaluationResult]:
  def _make(collector: ResultsCollector) -> EvaluationResult:
    findings = collector.snapshot()
    return EvaluationResult(
      reviewfile=ReviewFileInfo("reviewfile.py", Path("/repo/reviewfile.py"), True),
      change_set=sample_change_set,
      pull_request=None,
      findings=findings,
      passed=not findings.has_failures(),
      exit_code=findings.exit_code(),
    )

  return _make
