import unittest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from myawesomelist.api.deps import get_awesome
from myawesomelist.entities.collection import Category, Collection, Project
from myawesomelist.entities.project_stats import ProjectStats
from myawesomelist.entities.repository import RepositoryRef
from myawesomelist.main import create_app
from myawesomelist.services.exceptions import QueryBuildError, UnsupportedHostnameError
from myawesomelist.services.github import GithubNotFoundError, GithubRateLimitError

SERVICE = "/myawesomelist.v1.AwesomeService"
REPO = RepositoryRef(owner="x", repo="awesome-x")


def _collection():
    return Collection(
        id=1,
        repo=REPO,
        language="X",
        categories=[
            Category(
                id=2,
                name="Tools",
                projects=[
                    Project(
                        id=3,
                        name="foo",
                        description="does things",
                        repo=RepositoryRef(owner="x", repo="foo"),
                    )
                ],
            )
        ],
    )


class TestAwesomeServiceApi(unittest.TestCase):
    def setUp(self):
        self.awesome = MagicMock()
        self.awesome.collections.get_collection = AsyncMock(return_value=_collection())
        self.awesome.collections.list_collections = AsyncMock(return_value=[_collection()])
        self.awesome.collections.list_categories = AsyncMock(
            return_value=_collection().categories
        )
        self.awesome.collections.list_projects = AsyncMock(
            return_value=_collection().categories[0].projects
        )
        self.awesome.collections.get_project_stats = AsyncMock(
            return_value=ProjectStats(stargazers_count=42, open_issue_count=3)
        )
        self.awesome.search.search_projects = AsyncMock(return_value=[])

        app = create_app()
        app.dependency_overrides[get_awesome] = lambda: self.awesome
        # Not used as a context manager, so the lifespan (database pool) never runs.
        self.client = TestClient(app)

    def test_get_collection_uses_camel_case(self):
        response = self.client.post(
            f"{SERVICE}/GetCollection",
            json={"repo": {"hostname": "github.com", "owner": "x", "repo": "awesome-x"}},
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["collection"]["language"], "X")
        project = body["collection"]["categories"][0]["projects"][0]
        self.assertEqual(project["repo"], {"hostname": "github.com", "owner": "x", "repo": "foo"})
        self.assertIn("updatedAt", project)
        self.awesome.collections.get_collection.assert_awaited_once_with(REPO)

    def test_list_collections_with_empty_request(self):
        response = self.client.post(f"{SERVICE}/ListCollections", json={})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["collections"]), 1)
        self.awesome.collections.list_collections.assert_awaited_once_with([])

    def test_list_projects(self):
        response = self.client.post(
            f"{SERVICE}/ListProjects",
            json={"repo": {"owner": "x", "repo": "awesome-x"}, "categoryName": "Tools"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["projects"][0]["name"], "foo")
        self.awesome.collections.list_projects.assert_awaited_once_with(REPO, "Tools")

    def test_list_categories(self):
        response = self.client.post(
            f"{SERVICE}/ListCategories", json={"repo": {"owner": "x", "repo": "awesome-x"}}
        )

        self.assertEqual([c["name"] for c in response.json()["categories"]], ["Tools"])

    def test_search_projects(self):
        response = self.client.post(
            f"{SERVICE}/SearchProjects",
            json={"query": "q", "limit": 5, "repos": [{"owner": "a", "repo": "b"}]},
        )

        self.assertEqual(response.status_code, 200)
        self.awesome.search.search_projects.assert_awaited_once_with(
            "q", [RepositoryRef(owner="a", repo="b")], 5
        )

    def test_get_project_stats(self):
        response = self.client.post(
            f"{SERVICE}/GetProjectStats", json={"repo": {"owner": "x", "repo": "foo"}}
        )

        self.assertEqual(response.json()["stats"]["stargazersCount"], 42)
        self.assertEqual(response.json()["stats"]["openIssueCount"], 3)

    def test_error_codes(self):
        cases = [
            (UnsupportedHostnameError("gitlab.com"), 400, "invalid_argument"),
            (QueryBuildError("bad filter"), 400, "invalid_argument"),
            (GithubNotFoundError("gone"), 404, "not_found"),
            (GithubRateLimitError("slow down", retry_after=30), 429, "resource_exhausted"),
        ]
        for exc, status, code in cases:
            with self.subTest(code=code):
                self.awesome.collections.get_collection.side_effect = exc

                response = self.client.post(
                    f"{SERVICE}/GetCollection", json={"repo": {"owner": "x", "repo": "y"}}
                )

                self.assertEqual(response.status_code, status)
                self.assertEqual(response.json()["code"], code)

    def test_request_id_is_echoed(self):
        response = self.client.get("/health", headers={"X-Request-ID": "abc-123"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["X-Request-ID"], "abc-123")


if __name__ == "__main__":
    unittest.main()
