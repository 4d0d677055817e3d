import unittest
from unittest.mock import AsyncMock, MagicMock

from myawesomelist.entities.repository import RepositoryRef
from myawesomelist.repositories import RepositoryRepository
from myawesomelist.repositories.queries import REPO_ID_QUERY, UPSERT_REPOSITORIES_QUERY


def _row(i, ref):
    return {"id": i, "hostname": ref.hostname, "owner": ref.owner, "repo": ref.repo, "updated_at": None}


class TestRepositoryRepository(unittest.IsolatedAsyncioTestCase):
    async def test_input_order_and_duplicates(self):
        a = RepositoryRef(owner="a", repo="one")
        b = RepositoryRef(owner="b", repo="two")
        conn = MagicMock()
        # Postgres does not guarantee RETURNING order
        conn.fetch = AsyncMock(return_value=[_row(2, b), _row(1, a)])

        resolved = await RepositoryRepository().upsert_many(conn, [a, b, a])

        self.assertEqual([r.id for r in resolved], [1, 2, 1])
        conn.fetch.assert_awaited_once_with(
            UPSERT_REPOSITORIES_QUERY,
            ["github.com", "github.com"],
            ["a", "b"],
            ["one", "two"],
        )

    async def test_rows_are_upserted_in_sorted_order(self):
        c = RepositoryRef(owner="c", repo="zed")
        a = RepositoryRef(owner="a", repo="one")
        b = RepositoryRef(owner="a", repo="alpha")
        gitlab = RepositoryRef(hostname="gitlab.com", owner="a", repo="one")
        rows = [_row(1, b), _row(2, a), _row(3, c), _row(4, gitlab)]

        for refs in ([c, a, b, gitlab], [gitlab, b, c, a], [a, gitlab, c, b, c]):
            with self.subTest(refs=[str(r) for r in refs]):
                conn = MagicMock()
                conn.fetch = AsyncMock(return_value=rows)

                resolved = await RepositoryRepository().upsert_many(conn, refs)

                conn.fetch.assert_awaited_once_with(
                    UPSERT_REPOSITORIES_QUERY,
                    ["github.com", "github.com", "github.com", "gitlab.com"],
                    ["a", "a", "c", "a"],
                    ["alpha", "one", "zed", "one"],
                )
                self.assertEqual([r.ref for r in resolved], refs)

    async def test_empty_input_skips_database(self):
        conn = MagicMock()
        conn.fetch = AsyncMock()

        self.assertEqual(await RepositoryRepository().upsert_many(conn, []), [])
        conn.fetch.assert_not_awaited()

    async def test_missing_row_is_an_error(self):
        conn = MagicMock()
        conn.fetch = AsyncMock(return_value=[])

        with self.assertRaises(LookupError):
            await RepositoryRepository().upsert_many(conn, [RepositoryRef(owner="a", repo="b")])

    async def test_find_id(self):
        conn = MagicMock()
        conn.fetchval = AsyncMock(return_value=9)

        found = await RepositoryRepository().find_id(conn, RepositoryRef(owner="a", repo="b"))

        self.assertEqual(found, 9)
        conn.fetchval.assert_awaited_once_with(REPO_ID_QUERY, "github.com", "a", "b")


if __name__ == "__main__":
    unittest.main()
