"""Minimal GitHub REST client."""

import logging
import os
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class MissingContext(Exception):
  """Repository identity or pull request number could not be resolved."""


class UpstreamError(Exception):
  """The hosting API was unreachable or returned an error status."""


class GitHubClient:
  """Thin wrapper around the GitHub REST API for one repository."""

  DEFAULT_API_URL = "https://api.github.com"
  DEFAULT_TIMEOUT = 30.0
  PER_PAGE = 100

  def __init__(
    self,
    owner: str,
    repo: str,
    token: str | None = None,
    api_url: str | None = None,
    transport: httpx.BaseTransport | None = None,
  ):
    self.owner = owner
    self.repo = repo
    self._token = token if token is not None else os.environ.get("GITHUB_TOKEN")
    base_url = api_url or os.environ.get("GITHUB_API_URL", self.DEFAULT_API_URL)

    headers = {
      "Accept": "application/vnd.github+json",
      "X-GitHub-Api-Version": "2022-11-28",
    }
    if self._token:
      headers["Authorization"] = f"Bearer {self._token}"

    self._client = httpx.Client(
      base_url=base_url.rstrip("/"),
      headers=headers,
      timeout=self.DEFAULT_TIMEOUT,
      transport=transport,
    )

  @property
  def has_token(self) -> bool:
    return bool(self._token)

  def close(self) -> None:
    self._client.close()

  def __enter__(self) -> "GitHubClient":
    return self

  def __exit__(self, *exc_info: object) -> None:
    self.close()

  def _repo_path(self, suffix: str) -> str:
    return f"/repos/{self.owner}/{self.repo}/{suffix}"

  def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
    try:
      response = self._client.request(method, url, **kwargs)
      response.raise_for_status()
      return response
    except httpx.HTTPStatusError as e:
      status = e.response.status_code
      raise UpstreamError(f"GitHub API {method} {url} returned {status}") from e
    except httpx.RequestError as e:
      raise UpstreamError(f"GitHub API {method} {url} failed: {e}") from e

  def _decode(self, response: httpx.Response) -> Any:
    try:
      return response.json()
    except ValueError as e:
      request = response.request
      raise UpstreamError(
        f"GitHub API {request.method} {request.url} returned invalid JSON"
      ) from e

  def _get_json(self, suffix: str) -> Any:
    return self._decode(self._request("GET", self._repo_path(suffix)))

  def _get_paginated(self, suffix: str) -> list[dict[str, Any]]:
    """Follow `Link: rel="next"` headers and concatenate the pages."""
    items: list[dict[str, Any]] = []
    url: str | None = self._repo_path(suffix)
    params: dict[str, Any] | None = {"per_page": self.PER_PAGE}

    while url:
      response = self._request("GET", url, params=params)
      items.extend(self._decode(response))
      url = response.links.get("next", {}).get("url")
      # The next link already carries its query string
      params = None

    return items

  def get_pull_request(self, number: int) -> dict[str, Any]:
    return self._get_json(f"pulls/{number}")

  def list_reviews(self, number: int) -> list[dict[str, Any]]:
    return self._get_paginated(f"pulls/{number}/reviews")

  def list_issue_comments(self, number: int) -> list[dict[str, Any]]:
    return self._get_paginated(f"issues/{number}/comments")

  def list_review_comments(self, number: int) -> list[dict[str, Any]]:
    return self._get_paginated(f"pulls/{number}/comments")

  def post_comment(self, number: int, body: str) -> dict[str, Any]:
    """Post an issue-level comment on the pull request."""
    logger.debug("Posting comment to %s/%s#%d", self.owner, self.repo, number)
    response = self._request(
      "POST", self._repo_path(f"issues/{number}/comments"), json={"body": body},
    )
    return self._decode(response)
