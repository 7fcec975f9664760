"""Pull request context for reviewfiles."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from velvet.github.client import GitHubClient, MissingContext, UpstreamError
from velvet.models import Author, BranchRef, Comment, PullRequest, Review

logger = logging.getLogger(__name__)

_PULL_REF = re.compile(r"refs/pull/(\d+)/")


@dataclass(frozen=True)
class GitHubTarget:
  """Identifies one pull request."""

  owner: str
  repo: str
  number: int

  def __str__(self) -> str:
    return f"{self.owner}/{self.repo}#{self.number}"


@dataclass(frozen=True)
class TitleLiteral:
  """Case-sensitive substring match."""

  text: str

  def test(self, title: str) -> bool:
    return self.text in title


@dataclass(frozen=True)
class TitleRegex:
  """Regular expression search."""

  pattern: re.Pattern[str]

  def test(self, title: str) -> bool:
    return self.pattern.search(title) is not None


TitlePattern = TitleLiteral | TitleRegex


def as_title_pattern(pattern: "str | re.Pattern[str] | TitlePattern") -> TitlePattern:
  """Convert a plain string or compiled regex into a TitlePattern."""
  if isinstance(pattern, (TitleLiteral, TitleRegex)):
    return pattern
  if isinstance(pattern, re.Pattern):
    return TitleRegex(pattern)
  return TitleLiteral(pattern)


def is_github_environment(env: Mapping[str, str]) -> bool:
  """Check if running inside GitHub Actions with a repository set."""
  return bool(env.get("GITHUB_ACTIONS") and env.get("GITHUB_REPOSITORY"))


def resolve_target(
  env: Mapping[str, str],
  owner: str | None = None,
  repo: str | None = None,
  number: int | None = None,
) -> GitHubTarget:
  """Resolve the pull request from explicit values, then the environment.

  Raises:
    MissingContext: Repository identity or PR number is unavailable.
  """
  repository = env.get("GITHUB_REPOSITORY", "")
  if "/" in repository:
    env_owner, env_repo = repository.split("/", 1)
  else:
    env_owner, env_repo = None, None

  owner = owner or env_owner
  repo = repo or env_repo

  if number is None:
    raw = env.get("GITHUB_PR_NUMBER") or _number_from_ref(env.get("GITHUB_REF"))
    if raw:
      try:
        number = int(raw)
      except ValueError:
        raise MissingContext(f"Invalid pull request number: {raw!r}") from None

  if not owner or not repo or number is None:
    raise MissingContext(
      "Missing GitHub context. Provide --owner, --repo and --pr, or set "
      "GITHUB_REPOSITORY and GITHUB_PR_NUMBER"
    )

  return GitHubTarget(owner=owner, repo=repo, number=number)


def _number_from_ref(ref: str | None) -> str | None:
  if not ref:
    return None
  match = _PULL_REF.search(ref)
  return match.group(1) if match else None


@dataclass(frozen=True)
class PullRequestContext:
  """Read-only pull request snapshot with reviews and comments."""

  pr: PullRequest
  reviews: Sequence[Review]
  comments: Sequence[Comment]

  def title_matches(self, pattern: "str | re.Pattern[str] | TitlePattern") -> bool:
    """Match the title against a literal substring or a regex."""
    return as_title_pattern(pattern).test(self.pr.title)

  def has_label(self, label: str) -> bool:
    return label in self.pr.labels

  def assignee_logins(self) -> list[str]:
    return list(self.pr.assignees)

  def is_draft(self) -> bool:
    return self.pr.draft

  def is_mergeable(self) -> bool:
    return self.pr.mergeable is True


def _login(user: Mapping[str, Any] | None) -> str:
  return (user or {}).get("login") or "unknown"


def parse_pull_request(data: Mapping[str, Any]) -> PullRequest:
  """Convert a `GET /pulls/{n}` payload into a PullRequest."""
  user = data.get("user") or {}
  return PullRequest(
    number=data["number"],
    title=data.get("title") or "",
    body=data.get("body"),
    state=data.get("state", ""),
    url=data.get("html_url", ""),
    additions=data.get("additions", 0),
    deletions=data.get("deletions", 0),
    changed_file_count=data.get("changed_files", 0),
    author=Author(
      login=_login(user),
      avatar_url=user.get("avatar_url") or "",
      profile_url=user.get("html_url") or "",
    ),
    created_at=data.get("created_at", ""),
    updated_at=data.get("updated_at", ""),
    merged_at=data.get("merged_at"),
    base=BranchRef(name=data["base"]["ref"], commit_id=data["base"]["sha"]),
    head=BranchRef(name=data["head"]["ref"], commit_id=data["head"]["sha"]),
    labels=tuple(label["name"] for label in data.get("labels") or []),
    assignees=tuple(_login(a) for a in data.get("assignees") or []),
    draft=bool(data.get("draft", False)),
    mergeable=data.get("mergeable"),
  )


def parse_reviews(items: Sequence[Mapping[str, Any]]) -> list[Review]:
  return [
    Review(
      id=item["id"],
      reviewer_login=_login(item.get("user")),
      body=item.get("body") or "",
      state=item.get("state", ""),
      submitted_at=item.get("submitted_at") or "",
    )
    for item in items
  ]


def parse_comments(
  issue_comments: Sequence[Mapping[str, Any]],
  review_comments: Sequence[Mapping[str, Any]],
) -> list[Comment]:
  """Merge issue comments and line comments, issue comments first."""
  comments = [
    Comment(
      id=item["id"],
      author_login=_login(item.get("user")),
      body=item.get("body") or "",
      created_at=item.get("created_at", ""),
    )
    for item in issue_comments
  ]
  comments.extend(
    Comment(
      id=item["id"],
      author_login=_login(item.get("user")),
      body=item.get("body") or "",
      created_at=item.get("created_at", ""),
      file_path=item.get("path"),
      line_number=item.get("line") or None,
    )
    for item in review_comments
  )
  return comments


def load_pull_request_context(
  target: GitHubTarget,
  client: GitHubClient | None = None,
) -> PullRequestContext:
  """Fetch PR metadata, reviews and comments.

  Any failed fetch fails the whole call; no partial context is returned.

  Raises:
    UpstreamError: The API was unreachable or returned an error.
  """
  owns_client = client is None
  client = client or GitHubClient(target.owner, target.repo)
  try:
    logger.debug("Fetching pull request %s", target)
    pr = parse_pull_request(client.get_pull_request(target.number))
    reviews = parse_reviews(client.list_reviews(target.number))
    comments = parse_comments(
      client.list_issue_comments(target.number),
      client.list_review_comments(target.number),
    )
  except (KeyError, TypeError) as e:
    raise UpstreamError(f"Unexpected GitHub API payload for {target}: {e}") from e
  finally:
    if owns_client:
      client.close()

  return PullRequestContext(pr=pr, reviews=tuple(reviews), comments=tuple(comments))
