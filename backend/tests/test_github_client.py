import base64
import unittest

import httpx

from myawesomelist.entities.repository import RepositoryRef
from myawesomelist.services.github import (
    GithubClient,
    GithubNotFoundError,
    GithubRateLimitError,
    GithubRetryableError,
    GithubSecondaryRateLimitError,
)

REPO = RepositoryRef(owner="avelino", repo="awesome-go")


class CountingLimiter:
    def __init__(self):
        self.waits = 0

    async def wait(self):
        self.waits += 1


def _client(handler, token="secret", limiter=None):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GithubClient(token=token, limiter=limiter, http_client=http_client)


class TestGithubClient(unittest.IsolatedAsyncioTestCase):
    async def test_get_readme_decodes_content(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("Authorization")
            content = base64.b64encode(b"# Awesome Go\n").decode()
            return httpx.Response(200, json={"content": content, "encoding": "base64"})

        limiter = CountingLimiter()
        client = _client(handler, limiter=limiter)

        readme = await client.get_readme(REPO)

        self.assertEqual(readme, b"# Awesome Go\n")
        self.assertEqual(seen["path"], "/repos/avelino/awesome-go/contents/README.md")
        self.assertEqual(seen["auth"], "Bearer secret")
        self.assertEqual(limiter.waits, 1)

    async def test_unauthenticated_requests_have_no_token(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"stargazers_count": 5, "open_issues_count": 1})

        client = _client(handler, token=None)

        stats = await client.get_repository_stats(REPO)

        self.assertIsNone(seen["auth"])
        self.assertFalse(client.authenticated)
        self.assertEqual(stats, {"stargazers_count": 5, "open_issue_count": 1})

    async def test_not_found(self):
        client = _client(lambda request: httpx.Response(404, json={}))

        with self.assertRaises(GithubNotFoundError):
            await client.get_readme(REPO)

    async def test_primary_rate_limit(self):
        client = _client(
            lambda request: httpx.Response(
                403,
                headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000"},
                json={},
            )
        )

        with self.assertRaises(GithubRateLimitError) as ctx:
            await client.get_repository_stats(REPO)
        self.assertNotIsInstance(ctx.exception, GithubSecondaryRateLimitError)

    async def test_secondary_rate_limit(self):
        client = _client(
            lambda request: httpx.Response(429, headers={"Retry-After": "60"}, json={})
        )

        with self.assertRaises(GithubSecondaryRateLimitError) as ctx:
            await client.get_readme(REPO)
        self.assertEqual(ctx.exception.retry_after, 60.0)

    async def test_server_errors_are_retryable(self):
        client = _client(lambda request: httpx.Response(502, json={}))

        with self.assertRaises(GithubRetryableError):
            await client.get_readme(REPO)

    async def test_transport_errors_are_retryable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = _client(handler)

        with self.assertRaises(GithubRetryableError):
            await client.get_readme(REPO)


if __name__ == "__main__":
    unittest.main()
