"""Tests for output formatters."""

import io
import json

import pytest
from rich.console import Console
from velvet.output.formatter import (
  FOOTER,
  GitHubFormatter,
  JsonFormatter,
  MarkdownFormatter,
  TerminalFormatter,
  get_formatter,
)
from velvet.results import ResultsCollector


@pytest.fixture
def mixed_collector() -> ResultsCollector:
  collector = ResultsCollector()
  collector.add_failure("Missing tests", "src/app.py", 12)
  collector.add_warning("Large PR")
  collector.add_message("Thanks!", "README.md")
  collector.add_markdown("## Extra\n\nDetails")
  return collector


class TestMarkdownFormatter:
  def test_passed_banner(self, make_result) -> None:
    output = MarkdownFormatter().format(make_result(ResultsCollector()))

    assert output.startswith("## 🤖 Code Review Results")
    assert "✅ **Review Passed:** No issues found" in output
    assert output.endswith(f"---\n{FOOTER}")

  def test_warning_banner(self, make_result) -> None:
    collector = ResultsCollector()
    collector.add_warning("Heads up")

    output = MarkdownFormatter().format(make_result(collector))

    assert "⚠️ **Review Passed with Warnings:** 1 warning(s)" in output

  def test_sections_and_locations(self, make_result, mixed_collector: ResultsCollector) -> None:
    output = MarkdownFormatter().format(make_result(mixed_collector))

    assert "❌ **Review Failed:** 1 failure(s), 1 warning(s), 1 message(s)" in output
    assert "### ❌ Failures" in output
    assert "- Missing tests `src/app.py:12`" in output
    assert "### ⚠️ Warnings" in output
    assert "- Large PR\n" in output
    assert "### 💬 Messages" in output
    assert "- Thanks! `README.md`" in output
    assert "## Extra\n\nDetails" in output

  def test_section_order(self, make_result, mixed_collector: ResultsCollector) -> None:
    output = MarkdownFormatter().format(make_result(mixed_collector))

    failures = output.index("### ❌ Failures")
    warnings = output.index("### ⚠️ Warnings")
    messages = output.index("### 💬 Messages")
    assert failures < warnings < messages

  def test_empty_sections_are_omitted(self, make_result) -> None:
    collector = ResultsCollector()
    collector.add_message("only info")

    output = MarkdownFormatter().format(make_result(collector))

    assert "### ❌ Failures" not in output
    assert "### ⚠️ Warnings" not in output
    assert output.count("- ") == 1


class TestJsonFormatter:
  def test_round_trips_counts(self, make_result, mixed_collector: ResultsCollector) -> None:
    data = json.loads(JsonFormatter().format(make_result(mixed_collector)))

    assert data["passed"] is False
    assert data["exit_code"] == 1
    assert len(data["failures"]) == 1
    assert len(data["warnings"]) == 1
    assert len(data["messages"]) == 1
    assert data["failures"][0] == {"text": "Missing tests", "file": "src/app.py", "line": 12}
    assert data["markdowns"] == ["## Extra\n\nDetails"]
    assert data["changes"]["base"] == "main"
    assert data["changes"]["files"] == 3
    assert data["pull_request"] is None


class TestGitHubFormatter:
  def test_workflow_commands(self, make_result, mixed_collector: ResultsCollector) -> None:
    output = GitHubFormatter().format(make_result(mixed_collector))

    assert output.splitlines() == [
      "::error file=src/app.py,line=12::Missing tests",
      "::warning::Large PR",
      "::notice file=README.md::Thanks!",
    ]

  def test_escapes_newlines(self, make_result) -> None:
    collector = ResultsCollector()
    collector.add_failure("100% broken\nsecond line")

    output = GitHubFormatter().format(make_result(collector))

    assert output == "::error::100%25 broken%0Asecond line"


class TestTerminalFormatter:
  def test_prints_sections(self, make_result, mixed_collector: ResultsCollector) -> None:
    buffer = io.StringIO()
    console = Console(file=buffer, width=120, color_system=None)

    returned = TerminalFormatter(console).format(make_result(mixed_collector))
    output = buffer.getvalue()

    assert returned == ""
    assert "Review Results" in output
    assert "Failures (1):" in output
    assert "• Missing tests (src/app.py:12)" in output
    assert "Warnings (1):" in output
    assert "Messages (1):" in output
    assert "Markdown content:" in output
    assert "Summary: 1 failure(s), 1 warning(s), 1 message(s)" in output
    assert "Review failed due to blocking issues" in output

  def test_passing_status(self, make_result) -> None:
    buffer = io.StringIO()
    console = Console(file=buffer, width=120, color_system=None)

    TerminalFormatter(console).format(make_result(ResultsCollector()))

    assert "Review passed successfully!" in buffer.getvalue()
    assert "Failures" not in buffer.getvalue()


class TestGetFormatter:
  @pytest.mark.parametrize(
    ("name", "cls"),
    [
      ("terminal", TerminalFormatter),
      ("json", JsonFormatter),
      ("markdown", MarkdownFormatter),
      ("github", GitHubFormatter),
    ],
  )
  def test_known_formats(self, name: str, cls: type) -> None:
    assert isinstance(get_formatter(name), cls)

  def test_unknown_format(self) -> None:
    with pytest.raises(ValueError, match="Unknown format: xml"):
      get_formatter("xml")
