"""GitHub pull request adapter."""

from velvet.github.client import GitHubClient, MissingContext, UpstreamError
from velvet.github.context import (
    GitHubTarget,
    PullRequestContext,
    TitleLiteral,
    TitleRegex,
    is_github_environment,
    load_pull_request_context,
    resolve_target,
)

__all__ = [
  "GitHubClient",
  "GitHubTarget",
  "MissingContext",
  "PullRequestContext",
  "TitleLiteral",
  "TitleRegex",
  "UpstreamError",
  "is_github_environment",
  "load_pull_request_context",
  "resolve_target",
]
