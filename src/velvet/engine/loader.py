"""Reviewfile discovery and loading."""

import importlib.util
import inspect
import itertools
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Awaitable, Callable

ENTRY_POINT = "review"

REVIEWFILE_CANDIDATES = ["reviewfile.py", ".reviewfile.py", "review/reviewfile.py"]

RuleFunction = Callable[[Any], "Awaitable[None] | None"]

_module_counter = itertools.count()


class RuleFileNotFound(Exception):
  """The reviewfile does not exist or cannot be read."""


class InvalidRuleModule(Exception):
  """The reviewfile could not be turned into a rule function."""


class RuleModuleNotFound(InvalidRuleModule):
  """The reviewfile, or a module it imports, could not be found."""


class RuleSyntaxError(InvalidRuleModule):
  """The reviewfile does not compile."""


class RuleShapeError(InvalidRuleModule):
  """The reviewfile loaded but does not expose a usable entry point."""


@dataclass(frozen=True)
class ReviewFileInfo:
  """Where a reviewfile was looked for and whether it is there."""

  path: str
  absolute_path: Path
  exists: bool


def locate_rule_file(
  provided_path: str | Path | None = None,
  project_root: Path | None = None,
) -> ReviewFileInfo:
  """Resolve the reviewfile path.

  An explicit path is used as-is (relative to the project root). Otherwise
  the default candidates are probed in order and the first existing one
  wins; if none exists the first candidate is returned with exists=False.
  """
  root = project_root or Path.cwd()

  if provided_path:
    path = Path(provided_path)
    absolute = path if path.is_absolute() else root / path
    return ReviewFileInfo(str(provided_path), absolute, absolute.is_file())

  for candidate in REVIEWFILE_CANDIDATES:
    absolute = root / candidate
    if absolute.is_file():
      return ReviewFileInfo(candidate, absolute, True)

  default = REVIEWFILE_CANDIDATES[0]
  return ReviewFileInfo(default, root / default, False)


def validate_rule_file(info: ReviewFileInfo) -> None:
  """Check that the reviewfile exists and is readable.

  Raises:
    RuleFileNotFound: The file is missing or unreadable.
  """
  if not info.exists:
    raise RuleFileNotFound(
      f"Reviewfile not found: {info.path}\n\n"
      "Create a reviewfile.py that defines your review rules:\n\n"
      f"{example_reviewfile()}"
    )

  if not os.access(info.absolute_path, os.R_OK):
    raise RuleFileNotFound(
      f"Reviewfile is not readable: {info.path}\n"
      "Please check file permissions."
    )


def _import_file(path: Path) -> ModuleType:
  module_name = f"_velvet_reviewfile_{next(_module_counter)}"
  spec = importlib.util.spec_from_file_location(module_name, path)
  if spec is None or spec.loader is None:
    raise RuleModuleNotFound(f"Failed to load reviewfile: {path}")

  module = importlib.util.module_from_spec(spec)
  # Only registered while the module body runs
  sys.modules[module_name] = module
  try:
    spec.loader.exec_module(module)
  finally:
    sys.modules.pop(module_name, None)
  return module


def _check_shape(entry: object, path: Path) -> RuleFunction:
  if entry is None:
    raise RuleShapeError(
      f"Reviewfile {path} must define a `{ENTRY_POINT}` function.\n\n"
      "Example:\n"
      f"  def {ENTRY_POINT}(ctx):\n"
      '    ctx.warn("Example warning")'
    )
  if not callable(entry):
    raise RuleShapeError(
      f"`{ENTRY_POINT}` in {path} must be a function, got {type(entry).__name__}"
    )

  try:
    signature = inspect.signature(entry)
  except (TypeError, ValueError):
    return entry

  try:
    signature.bind(object())
  except TypeError:
    raise RuleShapeError(
      f"`{ENTRY_POINT}` in {path} must accept exactly one argument (the review context)"
    ) from None
  return entry


def load_rule_function(path: Path) -> RuleFunction:
  """Import a reviewfile and return its entry point.

  Raises:
    RuleModuleNotFound: The file or one of its imports is missing.
    RuleSyntaxError: The file has a syntax error.
    RuleShapeError: `review` is missing, not callable or has the wrong arity.
    InvalidRuleModule: Importing the module raised any other error.
  """
  try:
    module = _import_file(path)
  except FileNotFoundError as e:
    raise RuleModuleNotFound(
      f"Failed to load reviewfile: {path}\nFile not found or could not be imported."
    ) from e
  except ModuleNotFoundError as e:
    raise RuleModuleNotFound(
      f"Failed to load reviewfile: {path}\nCould not import '{e.name}'."
    ) from e
  except SyntaxError as e:
    raise RuleSyntaxError(
      f"Failed to parse reviewfile: {path}\n"
      f"Syntax error at line {e.lineno}: {e.msg}"
    ) from e
  except Exception as e:
    raise InvalidRuleModule(
      f"Failed to import reviewfile: {path}\n{type(e).__name__}: {e}"
    ) from e

  return _check_shape(getattr(module, ENTRY_POINT, None), path)


def example_reviewfile() -> str:
  """Return a starter reviewfile."""
  return '''import re

from velvet import fail, markdown, message, warn


def review(ctx):
  git = ctx.change_set

  if git.file_match("pyproject.toml").edited:
    warn("pyproject.toml was modified. Did you update the changelog?")

  if ctx.pull_request and not ctx.pull_request.title_matches(re.compile(r"^[A-Z]+-\\d+:")):
    fail("PR title must start with a ticket number (e.g., PROJ-123: Description)")

  if len(git.file_diffs) > 50:
    warn("This PR is quite large. Consider breaking it into smaller PRs.")

  new_code = git.file_match("src/**/*.py").created
  new_tests = git.file_match("tests/**/test_*.py").created
  if new_code and not new_tests:
    warn("New code was added but no tests were found.")

  message(f"Reviewing {len(git.commits)} commit(s)")
  markdown(f"**Files changed:** {len(git.file_diffs)}")
'''
