"""Minimal GitHub API client for reuse tracking."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from lessonbook.exceptions import GitHubAuthError, GitHubConnectionError

logger = logging.getLogger(__name__)

REUSE_MARKER = "Used Micro-Lesson"
_PAGE_SIZE = 100


class GitHubClient:
    """Reads merged pull requests that reference micro-lessons."""

    def __init__(
        self,
        repository: str,
        token: Optional[str] = None,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
    ) -> None:
        if not repository or "/" not in repository:
            raise ValueError(f"repository must look like 'owner/name', got {repository!r}")
        self.repository = repository
        self._api_url = api_url.rstrip("/")
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(base_url=self._api_url, headers=headers, timeout=timeout)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Make an HTTP request with unified error handling."""
        try:
            resp = self._client.request(method, path, params=params)
        except httpx.ConnectError as exc:
            raise GitHubConnectionError(f"Cannot connect to {self._api_url}: {exc}") from exc
        except httpx.TimeoutException as exc:
            raise GitHubConnectionError(f"Request timed out: {exc}") from exc

        if resp.status_code in (401, 403):
            raise GitHubAuthError(f"Authentication failed ({resp.status_code}): {resp.text}")
        resp.raise_for_status()
        return resp

    def merged_pull_request_bodies(self, limit: int = 200) -> List[str]:
        """Bodies of up to *limit* merged PRs that mention the reuse marker."""
        query = f'repo:{self.repository} is:pr is:merged "{REUSE_MARKER}"'
        bodies: List[str] = []
        page = 1
        while len(bodies) < limit:
            per_page = min(_PAGE_SIZE, limit - len(bodies))
            resp = self._request(
                "GET",
                "/search/issues",
                params={"q": query, "per_page": per_page, "page": page},
            )
            items = resp.json().get("items", [])
            bodies.extend(item.get("body") or "" for item in items)
            if len(items) < per_page:
                break
            page += 1
        logger.debug("Fetched %d merged PR bodies", len(bodies), extra={"count": len(bodies)})
        return bodies[:limit]

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
