"""Output formatting."""

from velvet.output.formatter import (
    GitHubFormatter,
    JsonFormatter,
    MarkdownFormatter,
    OutputFormatter,
    TerminalFormatter,
    get_formatter,
    status_message,
)

__all__ = [
  "OutputFormatter",
  "TerminalFormatter",
  "JsonFormatter",
  "MarkdownFormatter",
  "GitHubFormatter",
  "get_formatter",
  "status_message",
]
