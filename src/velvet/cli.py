"""CLI interface using Typer."""

import logging
import os
import traceback
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from velvet import __version__
from velvet.config import ConfigError, Settings, load_config
from velvet.engine import (
    EvaluationResult,
    EvaluatorOptions,
    InvalidRuleModule,
    RuleFileNotFound,
    RuleModuleNotFound,
    RuleShapeError,
    RuleSyntaxError,
    run_evaluation,
)
from velvet.github import GitHubClient, GitHubTarget, MissingContext, UpstreamError, resolve_target
from velvet.output import MarkdownFormatter, get_formatter

app = typer.Typer(
  name="velvet",
  help="Scriptable code review rules for git changes and pull requests",
  no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def _is_debug() -> bool:
  return os.environ.get("VELVET_DEBUG", "").lower() in ("1", "true", "yes")


def _configure_logging(verbose: bool) -> None:
  logging.basicConfig(
    level=logging.DEBUG if verbose else logging.WARNING,
    format="%(message)s",
    handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
    force=True,
  )


def version_callback(value: bool) -> None:
  if value:
    console.print(f"velvet {__version__}")
    raise typer.Exit()


@app.callback()
def main(
  version: bool = typer.Option(None, "--version", callback=version_callback, is_eager=True),
) -> None:
  """Run a reviewfile against your git changes."""


def _load_settings(config: Path | None) -> Settings:
  try:
    return load_config(config)
  except (ConfigError, FileNotFoundError) as e:
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    raise typer.Exit(1) from None


def _hint_for(error: Exception) -> str | None:
  if isinstance(error, RuleFileNotFound):
    return "Create a reviewfile.py in the project root, or pass --reviewfile."
  if isinstance(error, RuleSyntaxError):
    return "Fix the syntax error in your reviewfile and try again."
  if isinstance(error, RuleModuleNotFound):
    return "Check that the reviewfile path and its imports are correct."
  if isinstance(error, RuleShapeError):
    return "A reviewfile must define `def review(ctx): ...`."
  if isinstance(error, MissingContext):
    return "In GitHub Actions set GITHUB_TOKEN; elsewhere pass --owner, --repo and --pr."
  return None


def _evaluate(options: EvaluatorOptions, show_traceback: bool) -> EvaluationResult:
  try:
    return run_evaluation(options)
  except (RuleFileNotFound, InvalidRuleModule) as e:
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    hint = _hint_for(e)
    if hint:
      console.print(f"\n[yellow]Tip:[/yellow] {hint}")
    if show_traceback:
      console.print("\n[dim]Traceback:[/dim]")
      console.print(traceback.format_exc(), markup=False)
    raise typer.Exit(1) from None
  except Exception as e:
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    if show_traceback:
      console.print("\n[dim]Traceback:[/dim]")
      console.print(traceback.format_exc(), markup=False)
    raise typer.Exit(1) from None


def _print_result(result: EvaluationResult, format_type: str) -> None:
  try:
    formatter = get_formatter(format_type, console)
  except ValueError as e:
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    raise typer.Exit(1) from None

  output = formatter.format(result)
  if output:
    console.print(output, markup=False, highlight=False, soft_wrap=True)


def _print_verbose(result: EvaluationResult) -> None:
  changes = result.change_set
  err_console.print(f"[dim]Reviewfile: {result.reviewfile.absolute_path}[/dim]")
  err_console.print(f"[dim]Base: {changes.base}[/dim]")
  for label, files in (
    ("Modified", changes.modified_files),
    ("Created", changes.created_files),
    ("Deleted", changes.deleted_files),
  ):
    err_console.print(f"[dim]{label} files: {len(files)}[/dim]")
    for path in files:
      err_console.print(f"[dim]   - {path}[/dim]")
  err_console.print(f"[dim]Commits: {len(changes.commits)}[/dim]")

  if result.pull_request is not None:
    pr = result.pull_request.pr
    err_console.print(f"[dim]PR: {pr.url}[/dim]")
    err_console.print(f"[dim]Title: {pr.title}[/dim]")
    err_console.print(f"[dim]Author: {pr.author.login}[/dim]")
    err_console.print(f"[dim]+{pr.additions} -{pr.deletions} changes[/dim]")


@app.command()
def local(
  base: str = typer.Option(None, "--base", "-b", help="Base branch to compare against"),
  reviewfile: Path = typer.Option(None, "--reviewfile", "-r", help="Path to reviewfile"),
  format_type: str = typer.Option(
    None, "--format", help="Output format: terminal, json, markdown, github"
  ),
  config: Path = typer.Option(None, "--config", "-c", help="Config file path"),
  verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
) -> None:
  """Run the reviewfile against local git changes, without GitHub.

  Exits with code 1 when the review reports any failure.
  """
  show_traceback = verbose or _is_debug()
  _configure_logging(show_traceback)
  settings = _load_settings(config)

  options = EvaluatorOptions(
    reviewfile=reviewfile or settings.reviewfile,
    base=base or settings.base,
    enable_github=False,
  )
  result = _evaluate(options, show_traceback)

  if verbose:
    _print_verbose(result)
  _print_result(result, format_type or settings.format)
  raise typer.Exit(result.exit_code)


@app.command()
def run(
  owner: str = typer.Option(None, "--owner", help="GitHub repository owner"),
  repo: str = typer.Option(None, "--repo", help="GitHub repository name"),
  pr: int = typer.Option(None, "--pr", help="Pull request number"),
  base: str = typer.Option(None, "--base", "-b", help="Base branch to compare against"),
  reviewfile: Path = typer.Option(None, "--reviewfile", "-r", help="Path to reviewfile"),
  format_type: str = typer.Option(
    None, "--format", help="Output format: terminal, json, markdown, github"
  ),
  post: Optional[bool] = typer.Option(
    None, "--post/--no-post", help="Post results as a PR comment (requires GITHUB_TOKEN)"
  ),
  dry_run: bool = typer.Option(False, "--dry-run", help="Show the comment without posting"),
  config: Path = typer.Option(None, "--config", "-c", help="Config file path"),
  verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
) -> None:
  """Run the reviewfile for a GitHub pull request (use in CI)."""
  show_traceback = verbose or _is_debug()
  _configure_logging(show_traceback)
  settings = _load_settings(config)

  try:
    target = resolve_target(os.environ, owner=owner, repo=repo, number=pr)
  except MissingContext as e:
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    console.print(f"\n[yellow]Tip:[/yellow] {_hint_for(e)}")
    raise typer.Exit(1) from None

  token = os.environ.get("GITHUB_TOKEN")
  should_post = settings.post if post is None else post
  if should_post and not token and not dry_run:
    err_console.print(
      "[yellow]Warning:[/yellow] GITHUB_TOKEN not set. Results will only be printed locally."
    )
    should_post = False

  options = EvaluatorOptions(
    reviewfile=reviewfile or settings.reviewfile,
    base=base or settings.base,
    enable_github=settings.github,
    owner=target.owner,
    repo=target.repo,
    pr_number=target.number,
  )
  result = _evaluate(options, show_traceback)

  if verbose:
    _print_verbose(result)
  _print_result(result, format_type or settings.format)

  comment = MarkdownFormatter().format(result)
  if dry_run:
    console.print("\n[blue]Dry run - comment that would be posted:[/blue]")
    console.print(comment, markup=False, highlight=False, soft_wrap=True)
  elif should_post:
    _post_comment(target, token, comment)

  raise typer.Exit(result.exit_code)


def _post_comment(target: GitHubTarget, token: str | None, body: str) -> None:
  """Post the markdown report; failures only produce a warning."""
  try:
    with GitHubClient(target.owner, target.repo, token=token) as client:
      client.post_comment(target.number, body)
    err_console.print(f"[green]Posted comment to {target}[/green]")
  except UpstreamError as e:
    err_console.print(f"[yellow]Warning:[/yellow] Failed to post comment to GitHub: {escape(str(e))}")


if __name__ == "__main__":
  app()
