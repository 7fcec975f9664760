"""Scriptable code review rules for git changes and pull requests."""

from velvet.dsl import fail, markdown, message, warn

__version__ = "0.1.0"

__all__ = ["__version__", "fail", "markdown", "message", "warn"]
