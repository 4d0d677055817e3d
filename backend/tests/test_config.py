import unittest
from datetime import timedelta

from myawesomelist.config import Settings, parse_duration
from myawesomelist.utils.datetime import is_fresh, utc_now


class TestParseDuration(unittest.TestCase):
    def test_go_style_strings(self):
        self.assertEqual(parse_duration("24h"), timedelta(hours=24))
        self.assertEqual(parse_duration("1h30m"), timedelta(minutes=90))
        self.assertEqual(parse_duration("500ms"), timedelta(milliseconds=500))
        self.assertEqual(parse_duration("-5m"), timedelta(minutes=-5))

    def test_seconds(self):
        self.assertEqual(parse_duration("90"), timedelta(seconds=90))
        self.assertEqual(parse_duration("-1"), timedelta(seconds=-1))
        self.assertEqual(parse_duration(3600), timedelta(hours=1))

    def test_invalid(self):
        for value in ("", "abc", "5d", "1h-2m"):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    parse_duration(value)


class TestSettings(unittest.TestCase):
    def test_ttls_from_environment_strings(self):
        settings = Settings(COLLECTION_CACHE_TTL="2h", PROJECT_EMBEDDINGS_TTL="-1")

        self.assertEqual(settings.COLLECTION_CACHE_TTL, timedelta(hours=2))
        self.assertEqual(settings.PROJECT_EMBEDDINGS_TTL, timedelta(seconds=-1))

    def test_dsn_derived_from_pg_variables(self):
        settings = Settings(DSN=None, PGUSER="me", PGHOST="db", PGPORT=5433, PGDATABASE="awesome")

        self.assertEqual(settings.get_dsn(), "postgresql://me@db:5433/awesome")

    def test_dsn_unix_socket(self):
        settings = Settings(DSN=None, PGUSER="me", PGHOST="/run/postgresql", PGDATABASE="awesome")

        self.assertEqual(
            settings.get_dsn(),
            "postgresql://me@/awesome?host=%2Frun%2Fpostgresql&port=5432",
        )

    def test_invalid_dsn(self):
        with self.assertRaises(ValueError):
            Settings(DSN="not-a-dsn").get_dsn()

    def test_github_token_fallback(self):
        self.assertEqual(Settings(GITHUB_TOKEN=None, GH_TOKEN="gh").github_token, "gh")


class TestIsFresh(unittest.TestCase):
    def test_ttl_semantics(self):
        now = utc_now()
        hour_ago = now - timedelta(hours=1)

        self.assertTrue(is_fresh(hour_ago, timedelta(hours=2), now=now))
        self.assertFalse(is_fresh(hour_ago, timedelta(minutes=30), now=now))
        self.assertTrue(is_fresh(hour_ago - timedelta(days=900), timedelta(0), now=now))
        self.assertTrue(is_fresh(hour_ago, timedelta(seconds=-1), now=now))
        self.assertFalse(is_fresh(None, timedelta(0), now=now))

    def test_naive_timestamps_are_utc(self):
        now = utc_now()

        self.assertTrue(is_fresh(now.replace(tzinfo=None), timedelta(minutes=1), now=now))


if __name__ == "__main__":
    unittest.main()
