"""Output formatting for evaluation results."""

import json
from abc import ABC, abstractmethod

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule

from velvet.engine import EvaluationResult
from velvet.models import Finding, Severity
from velvet.results import ResultsSnapshot

FOOTER = "*Generated by velvet*"


def status_message(findings: ResultsSnapshot) -> str:
  """One-line verdict matching the exit code."""
  if findings.has_failures():
    return "Review failed due to blocking issues. Please fix the failures above."
  if findings.has_warnings():
    return "Review passed with warnings. Consider addressing them."
  return "Review passed successfully!"


class OutputFormatter(ABC):
  """Base output formatter."""

  @abstractmethod
  def format(self, result: EvaluationResult) -> str:
    """Format evaluation result for output."""
    ...


class TerminalFormatter(OutputFormatter):
  """Rich terminal output formatter."""

  SECTIONS = {
    Severity.FAILURE: ("Failures", "bold red", "red"),
    Severity.WARNING: ("Warnings", "bold yellow", "yellow"),
    Severity.MESSAGE: ("Messages", "bold blue", "blue"),
  }

  def __init__(self, console: Console | None = None):
    self.console = console or Console()

  def format(self, result: EvaluationResult) -> str:
    self._print_header(result)
    self._print_findings(result.findings)
    self._print_summary(result.findings)
    return ""

  def _print_header(self, result: EvaluationResult) -> None:
    stats = result.change_set.stats
    lines = [
      f"Base: {escape(result.change_set.base)}",
      f"Files: {stats['files']} "
      f"(+{stats['created']} created, ~{stats['modified']} modified, "
      f"-{stats['deleted']} deleted)",
      f"Commits: {stats['commits']}",
    ]
    if result.pull_request is not None:
      pr = result.pull_request.pr
      lines.append(f"PR #{pr.number}: {escape(pr.title)} by {escape(pr.author.login)}")

    self.console.print()
    self.console.print(Panel(
      "\n".join(lines),
      title=f"[bold]Review Results[/bold] ({escape(result.reviewfile.path)})",
      border_style="blue",
    ))

  def _print_findings(self, findings: ResultsSnapshot) -> None:
    for severity, group in findings.by_severity():
      if not group:
        continue
      title, header_style, style = self.SECTIONS[severity]
      self.console.print(f"\n[{header_style}]{title} ({len(group)}):[/{header_style}]")
      for finding in group:
        self.console.print(f"[{style}]  • {escape(finding.text)}[/{style}]{self._location(finding)}")

    if findings.markdowns:
      self.console.print("\n[bold blue]Markdown content:[/bold blue]")
      for block in findings.markdowns:
        self.console.print(escape(block.text), style="dim")

  def _print_summary(self, findings: ResultsSnapshot) -> None:
    self.console.print()
    self.console.print(Rule(style="dim"))
    self.console.print(f"[bold]Summary:[/bold] {findings.summary()}")

    if findings.has_failures():
      style = "red"
    elif findings.has_warnings():
      style = "yellow"
    else:
      style = "green"
    self.console.print(f"\n[{style}]{status_message(findings)}[/{style}]")

  def _location(self, finding: Finding) -> str:
    if finding.location is None:
      return ""
    return f" [dim]({escape(finding.location)})[/dim]"


class JsonFormatter(OutputFormatter):
  """JSON output formatter."""

  def format(self, result: EvaluationResult) -> str:
    pr = result.pull_request.pr if result.pull_request is not None else None
    data = {
      "passed": result.passed,
      "exit_code": result.exit_code,
      "summary": result.findings.summary(),
      "reviewfile": result.reviewfile.path,
      "changes": {"base": result.change_set.base, **result.change_set.stats},
      "pull_request": (
        {"number": pr.number, "title": pr.title, "url": pr.url} if pr else None
      ),
      **result.findings.to_dict(),
    }
    return json.dumps(data, indent=2)


class MarkdownFormatter(OutputFormatter):
  """Markdown output formatter, suitable for a single PR comment."""

  HEADINGS = {
    Severity.FAILURE: "### ❌ Failures",
    Severity.WARNING: "### ⚠️ Warnings",
    Severity.MESSAGE: "### 💬 Messages",
  }

  def format(self, result: EvaluationResult) -> str:
    findings = result.findings
    lines = ["## 🤖 Code Review Results", "", self._banner(findings), ""]

    for severity, group in findings.by_severity():
      if not group:
        continue
      lines.extend([self.HEADINGS[severity], ""])
      for finding in group:
        lines.append(f"- {finding.text}{self._location(finding)}")
      lines.append("")

    if findings.markdowns:
      lines.extend(["---", ""])
      lines.append("\n\n".join(block.text for block in findings.markdowns))
      lines.append("")

    lines.extend(["---", FOOTER])
    return "\n".join(lines)

  def _banner(self, findings: ResultsSnapshot) -> str:
    summary = findings.summary()
    if findings.has_failures():
      return f"❌ **Review Failed:** {summary}"
    if findings.has_warnings():
      return f"⚠️ **Review Passed with Warnings:** {summary}"
    return f"✅ **Review Passed:** {summary}"

  def _location(self, finding: Finding) -> str:
    if finding.location is None:
      return ""
    return f" `{finding.location}`"


class GitHubFormatter(OutputFormatter):
  """GitHub Actions workflow command formatter for PR annotations."""

  LEVELS = {
    Severity.FAILURE: "error",
    Severity.WARNING: "warning",
    Severity.MESSAGE: "notice",
  }

  def format(self, result: EvaluationResult) -> str:
    lines = []
    for severity, group in result.findings.by_severity():
      level = self.LEVELS[severity]
      for finding in group:
        location = ""
        if finding.file:
          location = f" file={finding.file}"
          if finding.line:
            location += f",line={finding.line}"
        text = finding.text.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        lines.append(f"::{level}{location}::{text}")
    return "\n".join(lines)


def get_formatter(format_type: str, console: Console | None = None) -> OutputFormatter:
  """Get formatter by type name."""
  if format_type == "terminal":
    return TerminalFormatter(console)

  formatters = {
    "json": JsonFormatter,
    "markdown": MarkdownFormatter,
    "github": GitHubFormatter,
  }
  formatter_class = formatters.get(format_type)
  if not formatter_class:
    raise ValueError(f"Unknown format: {format_type}")
  return formatter_class()
