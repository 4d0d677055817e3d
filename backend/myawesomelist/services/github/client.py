"""
GitHub REST client.

Fetches README content and repository counters. Every request first waits on
the injected rate limiter, which is shared by all concurrent callers.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Optional

import httpx

from myawesomelist.core.rate_limit import NoopLimiter
from myawesomelist.entities.repository import RepositoryRef
from myawesomelist.services.github.exceptions import (
    GithubError,
    GithubNotFoundError,
    GithubRateLimitError,
    GithubRetryableError,
    GithubSecondaryRateLimitError,
)

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
README_PATH = "README.md"


class GithubClient:
    """Thin async wrapper over the GitHub REST API."""

    def __init__(
        self,
        token: Optional[str] = None,
        limiter: Any = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.token = token
        self.limiter = limiter or NoopLimiter()
        self.api_url = api_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        if token:
            logger.info("Using authenticated GitHub client")
        else:
            logger.warning("Using unauthenticated GitHub client (rate limited)")

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, path: str) -> Dict[str, Any]:
        await self.limiter.wait()
        url = f"{self.api_url}{path}"
        try:
            response = await self._client.get(url, headers=self._headers())
        except httpx.TimeoutException as exc:
            raise GithubRetryableError(f"GitHub request timed out: {url}") from exc
        except httpx.HTTPError as exc:
            raise GithubRetryableError(f"GitHub request failed: {exc}") from exc

        self._raise_for_status(response, url)
        return response.json()

    def _raise_for_status(self, response: httpx.Response, url: str) -> None:
        status = response.status_code
        if status < 400:
            return
        if status == 404:
            raise GithubNotFoundError(f"GitHub resource not found: {url}")

        retry_after = response.headers.get("Retry-After")
        remaining = response.headers.get("X-RateLimit-Remaining")
        if status == 429 or (status == 403 and retry_after is not None):
            raise GithubSecondaryRateLimitError(
                f"GitHub secondary rate limit hit for {url}",
                retry_after=float(retry_after) if retry_after else None,
            )
        if status == 403 and remaining == "0":
            reset = response.headers.get("X-RateLimit-Reset")
            raise GithubRateLimitError(
                f"GitHub rate limit exhausted for {url}",
                retry_after=float(reset) if reset else None,
            )
        if status >= 500:
            raise GithubRetryableError(f"GitHub returned {status} for {url}")
        raise GithubError(f"GitHub returned {status} for {url}: {response.text[:200]}")

    async def get_readme(self, repo: RepositoryRef) -> bytes:
        """Raw README.md bytes of ``repo``."""
        data = await self._get(
            f"/repos/{repo.owner}/{repo.repo}/contents/{README_PATH}"
        )
        content = data.get("content")
        if content is None:
            raise GithubNotFoundError(f"{repo} has no {README_PATH} content")
        try:
            return base64.b64decode(content)
        except ValueError as exc:
            raise GithubError(f"failed to decode {README_PATH} of {repo}") from exc

    async def get_repository_stats(self, repo: RepositoryRef) -> Dict[str, int]:
        """Stargazers and open issues of ``repo``."""
        data = await self._get(f"/repos/{repo.owner}/{repo.repo}")
        return {
            "stargazers_count": int(data.get("stargazers_count") or 0),
            "open_issue_count": int(data.get("open_issues_count") or 0),
        }
