"""Evaluation pipeline: locate, build context, run the reviewfile, collect."""

import asyncio
import inspect
import logging
import os
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping

from velvet.dsl import collecting
from velvet.engine.context import ReviewContext
from velvet.engine.loader import (
    ReviewFileInfo,
    RuleFunction,
    load_rule_function,
    locate_rule_file,
    validate_rule_file,
)
from velvet.git import ChangeSet, load_change_set
from velvet.github import (
    GitHubClient,
    GitHubTarget,
    MissingContext,
    PullRequestContext,
    UpstreamError,
    is_github_environment,
    load_pull_request_context,
    resolve_target,
)
from velvet.results import ResultsCollector, ResultsSnapshot

logger = logging.getLogger(__name__)

ChangeSetLoader = Callable[[str, Path], ChangeSet]
PullRequestLoader = Callable[[GitHubTarget], PullRequestContext]


@dataclass(frozen=True)
class EvaluatorOptions:
  """Inputs for one evaluation."""

  reviewfile: str | Path | None = None
  base: str = "main"
  enable_github: bool = True
  project_root: Path | None = None
  owner: str | None = None
  repo: str | None = None
  pr_number: int | None = None
  env: Mapping[str, str] | None = None

  @property
  def has_explicit_target(self) -> bool:
    return bool(self.owner and self.repo and self.pr_number is not None)


@dataclass(frozen=True)
class EvaluationResult:
  """Terminal result of one evaluation."""

  reviewfile: ReviewFileInfo
  change_set: ChangeSet
  pull_request: PullRequestContext | None
  findings: ResultsSnapshot
  passed: bool
  exit_code: int


@dataclass(frozen=True)
class RuleSucceeded:
  """The review function returned normally."""


@dataclass(frozen=True)
class RuleFailed:
  """The review function raised; carries its message and traceback."""

  message: str
  trace: str = ""

  def describe(self) -> str:
    text = f"Review execution failed: {self.message}"
    if self.trace:
      text += f"\n\nTraceback:\n{self.trace.rstrip()}"
    return text


RuleOutcome = RuleSucceeded | RuleFailed


ASYNC_IN_RUNNING_LOOP = (
  "An async reviewfile cannot be driven by evaluate() while an event loop is "
  "running in this thread; use `await Evaluator.evaluate_async()` instead"
)


def _failed(error: BaseException) -> RuleFailed:
  return RuleFailed(f"{type(error).__name__}: {error}", traceback.format_exc())


def _loop_is_running() -> bool:
  try:
    asyncio.get_running_loop()
  except RuntimeError:
    return False
  return True


async def _settle(awaitable: Awaitable[Any]) -> RuleOutcome:
  try:
    await awaitable
  except (Exception, SystemExit) as e:
    return _failed(e)
  return RuleSucceeded()


def invoke_rule(rule: RuleFunction, context: ReviewContext) -> RuleOutcome:
  """Run the review function once, driving it to completion if async.

  Errors raised by the function are returned as RuleFailed, never raised.

  Raises:
    RuntimeError: The function is async and this thread already runs an
      event loop. Use invoke_rule_async from there.
  """
  try:
    outcome = rule(context)
  except (Exception, SystemExit) as e:
    return _failed(e)

  if not inspect.isawaitable(outcome):
    return RuleSucceeded()
  if _loop_is_running():
    if inspect.iscoroutine(outcome):
      outcome.close()
    raise RuntimeError(ASYNC_IN_RUNNING_LOOP)
  return asyncio.run(_settle(outcome))


async def invoke_rule_async(rule: RuleFunction, context: ReviewContext) -> RuleOutcome:
  """Like invoke_rule, but awaits an async function on the running loop."""
  try:
    outcome = rule(context)
  except (Exception, SystemExit) as e:
    return _failed(e)

  if inspect.isawaitable(outcome):
    return await _settle(outcome)
  return RuleSucceeded()


class Evaluator:
  """Runs a reviewfile against the current changes.

  Example:
    result = Evaluator(EvaluatorOptions(base="develop")).evaluate()
    sys.exit(result.exit_code)
  """

  def __init__(
    self,
    options: EvaluatorOptions | None = None,
    collector: ResultsCollector | None = None,
    change_set_loader: ChangeSetLoader | None = None,
    pull_request_loader: PullRequestLoader | None = None,
  ):
    self.options = options or EvaluatorOptions()
    self.collector = collector or ResultsCollector()
    self._env: Mapping[str, str] = (
      self.options.env if self.options.env is not None else dict(os.environ)
    )
    self._load_change_set = change_set_loader or load_change_set
    self._load_pull_request = pull_request_loader or self._fetch_pull_request

  @property
  def project_root(self) -> Path:
    return self.options.project_root or Path.cwd()

  def evaluate(self) -> EvaluationResult:
    """Run the complete evaluation.

    Raises:
      RuleFileNotFound: No reviewfile at the resolved path.
      InvalidRuleModule: The reviewfile could not be loaded.
      RuntimeError: The reviewfile is async and an event loop is already
        running; use evaluate_async instead.
    """
    info, context = self._prepare()
    with collecting(self.collector):
      rule = load_rule_function(info.absolute_path)
      outcome = invoke_rule(rule, context)
    return self._finish(info, context, outcome)

  async def evaluate_async(self) -> EvaluationResult:
    """Run the complete evaluation from inside a running event loop.

    An async `review` is awaited on the caller's loop. Git and GitHub
    reads still block.
    """
    info, context = self._prepare()
    with collecting(self.collector):
      rule = load_rule_function(info.absolute_path)
      outcome = await invoke_rule_async(rule, context)
    return self._finish(info, context, outcome)

  def _prepare(self) -> tuple[ReviewFileInfo, ReviewContext]:
    self.collector.reset()

    info = locate_rule_file(self.options.reviewfile, self.project_root)
    validate_rule_file(info)

    change_set = self._load_change_set(self.options.base, self.project_root)

    is_github = is_github_environment(self._env) or self.options.has_explicit_target
    pull_request = None
    if self.options.enable_github and is_github:
      pull_request = self._try_load_pull_request()

    context = ReviewContext(
      change_set=change_set,
      pull_request=pull_request,
      is_github=is_github,
      env=self._env,
      collector=self.collector,
    )
    return info, context

  def _finish(
    self,
    info: ReviewFileInfo,
    context: ReviewContext,
    outcome: RuleOutcome,
  ) -> EvaluationResult:
    if isinstance(outcome, RuleFailed):
      logger.debug("Reviewfile raised: %s", outcome.message)
      self.collector.add_failure(outcome.describe())

    findings = self.collector.snapshot()
    return EvaluationResult(
      reviewfile=info,
      change_set=context.change_set,
      pull_request=context.pull_request,
      findings=findings,
      passed=not findings.has_failures(),
      exit_code=findings.exit_code(),
    )

  def _try_load_pull_request(self) -> PullRequestContext | None:
    try:
      target = resolve_target(
        self._env,
        owner=self.options.owner,
        repo=self.options.repo,
        number=self.options.pr_number,
      )
      return self._load_pull_request(target)
    except (MissingContext, UpstreamError) as e:
      logger.warning("Failed to initialize GitHub context: %s", e)
      return None

  def _fetch_pull_request(self, target: GitHubTarget) -> PullRequestContext:
    with GitHubClient(
      target.owner,
      target.repo,
      token=self._env.get("GITHUB_TOKEN", ""),
      api_url=self._env.get("GITHUB_API_URL") or GitHubClient.DEFAULT_API_URL,
    ) as client:
      return load_pull_request_context(target, client)


def run_evaluation(options: EvaluatorOptions | None = None) -> EvaluationResult:
  """Convenience wrapper around Evaluator(options).evaluate()."""
  return Evaluator(options).evaluate()
