"""GitHub integration: REST client, errors and the built-in list registry"""

from .client import GithubClient
from .default_repos import DEFAULT_REPOS, DefaultRepo, default_refs, parse_options_for
from .exceptions import (
    GithubError,
    GithubNotFoundError,
    GithubRateLimitError,
    GithubRetryableError,
    GithubSecondaryRateLimitError,
)

__all__ = [
    "GithubClient",
    "DEFAULT_REPOS",
    "DefaultRepo",
    "default_refs",
    "parse_options_for",
    "GithubError",
    "GithubNotFoundError",
    "GithubRateLimitError",
    "GithubRetryableError",
    "GithubSecondaryRateLimitError",
]
