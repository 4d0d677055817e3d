import re
import unittest

from myawesomelist.entities.repository import RepositoryRef
from myawesomelist.repositories.queries import (
    DEFAULT_SEARCH_LIMIT,
    normalize_limit,
    render_list_collections_query,
    render_repository_filter,
    render_search_projects_query,
)
from myawesomelist.services.exceptions import QueryBuildError

PLACEHOLDER = re.compile(r"\$(\d+)")


def _refs(count):
    return [RepositoryRef(owner=f"owner{i}", repo=f"repo{i}") for i in range(count)]


def _placeholders(sql):
    return sorted({int(n) for n in PLACEHOLDER.findall(sql)})


class TestSearchProjectsQuery(unittest.TestCase):
    def assertPlaceholdersMatchArgs(self, sql, args):
        indices = _placeholders(sql)
        self.assertEqual(indices, list(range(1, len(args) + 1)))

    def test_placeholder_count_matches_args(self):
        for count in (0, 1, 2, 7):
            for embedding in (None, [0.1, 0.2, 0.3]):
                with self.subTest(filters=count, embedding=embedding is not None):
                    sql, args = render_search_projects_query(_refs(count), embedding, 10)
                    self.assertPlaceholdersMatchArgs(sql, args)
                    expected = 3 * count + (1 if embedding is not None else 0) + 1
                    self.assertEqual(len(args), expected)

    def test_no_filters_no_embedding(self):
        sql, args = render_search_projects_query([], None, 10)

        self.assertNotIn("WHERE", sql)
        self.assertNotIn("project_embeddings", sql)
        self.assertIn("ORDER BY p.updated_at DESC", sql)
        self.assertTrue(sql.endswith("LIMIT $1"))
        self.assertEqual(args, [10])

    def test_single_filter_with_embedding(self):
        embedding = [0.5, 0.25]
        sql, args = render_search_projects_query(
            [RepositoryRef(hostname="github.com", owner="a", repo="b")], embedding, 5
        )

        self.assertEqual(sql.count("r.hostname = "), 1)
        self.assertIn("(r.hostname = $1 AND r.owner = $2 AND r.repo = $3)", sql)
        self.assertIn("JOIN project_embeddings pe ON pe.project_id = p.id", sql)
        self.assertIn("ORDER BY pe.embedding <-> $4", sql)
        self.assertIn("LIMIT $5", sql)
        self.assertEqual(args, ["github.com", "a", "b", embedding, 5])

    def test_filters_are_or_of_triples(self):
        sql, _ = render_search_projects_query(_refs(3), None, 1)

        self.assertEqual(sql.count(" OR "), 2)
        self.assertIn("(r.hostname = $7 AND r.owner = $8 AND r.repo = $9)", sql)

    def test_non_positive_limit_defaults(self):
        for limit in (0, -3, None):
            with self.subTest(limit=limit):
                _, args = render_search_projects_query([], None, limit)
                self.assertEqual(args[-1], DEFAULT_SEARCH_LIMIT)
        self.assertEqual(normalize_limit(12), 12)

    def test_incomplete_filter_is_rejected(self):
        with self.assertRaises(QueryBuildError):
            render_search_projects_query([RepositoryRef(owner="a", repo="")], None, 1)
        with self.assertRaises(QueryBuildError):
            render_search_projects_query([RepositoryRef(hostname="", owner="a", repo="b")], None, 1)

    def test_empty_embedding_is_rejected(self):
        with self.assertRaises(QueryBuildError):
            render_search_projects_query([], [], 1)

    def test_values_are_never_inlined(self):
        ref = RepositoryRef(owner="x'; DROP TABLE projects; --", repo="y")
        sql, args = render_search_projects_query([ref], None, 1)

        self.assertNotIn("DROP TABLE", sql)
        self.assertIn(ref.owner, args)


class TestRepositoryFilter(unittest.TestCase):
    def test_zero_filters_render_nothing(self):
        self.assertEqual(render_repository_filter(0), "")

    def test_start_offset(self):
        self.assertEqual(
            render_repository_filter(1, start=4),
            "(r.hostname = $4 AND r.owner = $5 AND r.repo = $6)",
        )

    def test_invalid_shape(self):
        with self.assertRaises(QueryBuildError):
            render_repository_filter(-1)
        with self.assertRaises(QueryBuildError):
            render_repository_filter(1, start=0)


class TestListCollectionsQuery(unittest.TestCase):
    def test_all_collections(self):
        sql, args = render_list_collections_query([])

        self.assertNotIn("WHERE", sql)
        self.assertEqual(args, [])

    def test_filtered(self):
        sql, args = render_list_collections_query(_refs(2))

        self.assertEqual(_placeholders(sql), list(range(1, 7)))
        self.assertEqual(len(args), 6)


if __name__ == "__main__":
    unittest.main()
