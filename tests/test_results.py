"""Tests for the results collector."""

from hypothesis import given
from hypothesis import strategies as st
from velvet.models import Finding, MarkdownBlock, Severity
from velvet.results import ResultsCollector, ResultsSnapshot


class TestResultsCollector:
  def test_starts_empty(self) -> None:
    collector = ResultsCollector()
    snapshot = collector.snapshot()

    assert snapshot == ResultsSnapshot()
    assert not collector.has_failures()
    assert collector.exit_code() == 0

  def test_add_operations(self) -> None:
    collector = ResultsCollector()
    collector.add_message("Info", "README.md")
    collector.add_warning("Careful", "setup.py", 3)
    collector.add_failure("Broken")
    collector.add_markdown("## Notes")

    snapshot = collector.snapshot()

    assert snapshot.messages == (Finding(Severity.MESSAGE, "Info", "README.md"),)
    assert snapshot.warnings == (Finding(Severity.WARNING, "Careful", "setup.py", 3),)
    assert snapshot.failures == (Finding(Severity.FAILURE, "Broken"),)
    assert snapshot.markdowns == (MarkdownBlock("## Notes"),)
    assert snapshot.total_count == 3

  def test_warnings_do_not_fail(self) -> None:
    collector = ResultsCollector()
    collector.add_message("All good")
    collector.add_warning("Just a warning")

    assert collector.has_warnings()
    assert not collector.has_failures()
    assert collector.exit_code() == 0

  def test_reset_clears_everything(self) -> None:
    collector = ResultsCollector()
    collector.add_message("Old message")
    collector.add_warning("Old warning")
    collector.add_failure("Old failure")
    collector.add_markdown("Old markdown")

    collector.reset()

    assert collector.snapshot() == ResultsSnapshot()

  def test_reset_is_idempotent(self) -> None:
    collector = ResultsCollector()
    collector.add_failure("x")

    collector.reset()
    once = collector.snapshot()
    collector.reset()

    assert collector.snapshot() == once == ResultsSnapshot()

  def test_snapshot_is_detached(self) -> None:
    collector = ResultsCollector()
    collector.add_warning("first")
    snapshot = collector.snapshot()

    collector.add_warning("second")

    assert len(snapshot.warnings) == 1

  @given(st.lists(st.sampled_from(["message", "warning", "failure"]), max_size=30))
  def test_any_failure_sets_exit_code(self, calls: list[str]) -> None:
    collector = ResultsCollector()
    for kind in calls:
      getattr(collector, f"add_{kind}")(kind)

    expected_failure = "failure" in calls
    assert collector.has_failures() is expected_failure
    assert collector.exit_code() == (1 if expected_failure else 0)
    assert collector.snapshot().exit_code() == collector.exit_code()


class TestResultsSnapshot:
  def test_summary(self) -> None:
    collector = ResultsCollector()
    assert collector.snapshot().summary() == "No issues found"

    collector.add_failure("a")
    collector.add_failure("b")
    collector.add_message("c")

    assert collector.snapshot().summary() == "2 failure(s), 1 message(s)"

  def test_by_severity_order(self) -> None:
    collector = ResultsCollector()
    collector.add_message("m")
    collector.add_failure("f")
    collector.add_warning("w")

    order = [severity for severity, _ in collector.snapshot().by_severity()]

    assert order == [Severity.FAILURE, Severity.WARNING, Severity.MESSAGE]

  def test_dict_round_trip(self) -> None:
    collector = ResultsCollector()
    collector.add_message("m", "a.py", 1)
    collector.add_warning("w")
    collector.add_failure("f", "b.py")
    collector.add_markdown("**md**")
    snapshot = collector.snapshot()

    assert ResultsSnapshot.from_dict(snapshot.to_dict()) == snapshot

  def test_location(self) -> None:
    assert Finding(Severity.FAILURE, "x").location is None
    assert Finding(Severity.FAILURE, "x", "a.py").location == "a.py"
    assert Finding(Severity.FAILURE, "x", "a.py", 7).location == "a.py:7"
