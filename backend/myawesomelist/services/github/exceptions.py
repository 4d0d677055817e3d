"""Exceptions raised by the GitHub client."""

from __future__ import annotations


class GithubError(Exception):
    """Base exception for GitHub failures."""


class GithubNotFoundError(GithubError):
    """Raised when the repository or its README does not exist."""


class GithubRateLimitError(GithubError):
    """Raised when the upstream service enforces a rate limit."""

    def __init__(self, message: str, retry_after: int | float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class GithubSecondaryRateLimitError(GithubRateLimitError):
    """
    Raised when GitHub's secondary rate limit (abuse detection) is triggered.

    Secondary limits come from bursts or too many concurrent requests and
    usually carry a Retry-After of 60s or more.
    """


class GithubRetryableError(GithubError):
    """Raised for transient issues where retrying later may succeed."""
