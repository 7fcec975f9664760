"""Accumulates findings reported by a reviewfile."""

from dataclasses import dataclass
from typing import Any, Mapping

from velvet.models import Finding, MarkdownBlock, Severity


@dataclass(frozen=True)
class ResultsSnapshot:
  """Immutable view of collected findings."""

  messages: tuple[Finding, ...] = ()
  warnings: tuple[Finding, ...] = ()
  failures: tuple[Finding, ...] = ()
  markdowns: tuple[MarkdownBlock, ...] = ()

  def has_failures(self) -> bool:
    return bool(self.failures)

  def has_warnings(self) -> bool:
    return bool(self.warnings)

  def exit_code(self) -> int:
    return 1 if self.has_failures() else 0

  @property
  def total_count(self) -> int:
    """Number of findings; markdown blocks are not counted."""
    return len(self.messages) + len(self.warnings) + len(self.failures)

  def by_severity(self) -> list[tuple[Severity, tuple[Finding, ...]]]:
    """Findings grouped in report order: failures, warnings, messages."""
    return [
      (Severity.FAILURE, self.failures),
      (Severity.WARNING, self.warnings),
      (Severity.MESSAGE, self.messages),
    ]

  def summary(self) -> str:
    parts = []
    if self.failures:
      parts.append(f"{len(self.failures)} failure(s)")
    if self.warnings:
      parts.append(f"{len(self.warnings)} warning(s)")
    if self.messages:
      parts.append(f"{len(self.messages)} message(s)")
    return ", ".join(parts) if parts else "No issues found"

  def to_dict(self) -> dict[str, Any]:
    def encode(findings: tuple[Finding, ...]) -> list[dict[str, Any]]:
      return [{"text": f.text, "file": f.file, "line": f.line} for f in findings]

    return {
      "failures": encode(self.failures),
      "warnings": encode(self.warnings),
      "messages": encode(self.messages),
      "markdowns": [block.text for block in self.markdowns],
    }

  @classmethod
  def from_dict(cls, data: Mapping[str, Any]) -> "ResultsSnapshot":
    def decode(key: str, severity: Severity) -> tuple[Finding, ...]:
      return tuple(
        Finding(
          severity=severity,
          text=item["text"],
          file=item.get("file"),
          line=item.get("line"),
        )
        for item in data.get(key, [])
      )

    return cls(
      messages=decode("messages", Severity.MESSAGE),
      warnings=decode("warnings", Severity.WARNING),
      failures=decode("failures", Severity.FAILURE),
      markdowns=tuple(MarkdownBlock(text) for text in data.get("markdowns", [])),
    )


class ResultsCollector:
  """Mutable sink for one evaluation's findings.

  A collector belongs to a single evaluation. The evaluator resets it
  before running the reviewfile and hands a snapshot to the caller.
  """

  def __init__(self) -> None:
    self._messages: list[Finding] = []
    self._warnings: list[Finding] = []
    self._failures: list[Finding] = []
    self._markdowns: list[MarkdownBlock] = []

  def reset(self) -> None:
    self._messages.clear()
    self._warnings.clear()
    self._failures.clear()
    self._markdowns.clear()

  def add_message(self, text: str, file: str | None = None, line: int | None = None) -> None:
    self._messages.append(Finding(Severity.MESSAGE, str(text), file, line))

  def add_warning(self, text: str, file: str | None = None, line: int | None = None) -> None:
    self._warnings.append(Finding(Severity.WARNING, str(text), file, line))

  def add_failure(self, text: str, file: str | None = None, line: int | None = None) -> None:
    self._failures.append(Finding(Severity.FAILURE, str(text), file, line))

  def add_markdown(self, text: str) -> None:
    self._markdowns.append(MarkdownBlock(str(text)))

  def has_failures(self) -> bool:
    return bool(self._failures)

  def has_warnings(self) -> bool:
    return bool(self._warnings)

  def exit_code(self) -> int:
    return 1 if self._failures else 0

  def snapshot(self) -> ResultsSnapshot:
    return ResultsSnapshot(
      messages=tuple(self._messages),
      warnings=tuple(self._warnings),
      failures=tuple(self._failures),
      markdowns=tuple(self._markdowns),
    )
