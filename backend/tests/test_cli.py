import unittest
from unittest.mock import AsyncMock, patch

from myawesomelist.cli import build_parser, main, parse_addr


class TestCli(unittest.TestCase):
    def test_parse_addr(self):
        self.assertEqual(parse_addr("localhost:8080"), ("localhost", 8080))
        self.assertEqual(parse_addr(":9000"), ("0.0.0.0", 9000))
        with self.assertRaises(ValueError):
            parse_addr("localhost")

    def test_commands(self):
        parser = build_parser()

        args = parser.parse_args(["--dsn", "postgres://x@y/z", "migrations", "apply"])
        self.assertEqual((args.command, args.action, args.dsn), ("migrations", "apply", "postgres://x@y/z"))

        args = parser.parse_args(["jobs", "embedding", "start"])
        self.assertEqual((args.command, args.job, args.action), ("jobs", "embedding", "start"))

        args = parser.parse_args(["server", "start", "--addr", "0.0.0.0:80"])
        self.assertEqual(args.addr, "0.0.0.0:80")

    def test_unknown_migration_action(self):
        with self.assertRaises(SystemExit):
            build_parser().parse_args(["migrations", "sideways"])

    @patch("myawesomelist.tasks.maintenance.run_embedding_sweep", new_callable=AsyncMock)
    def test_embedding_job_runs_sweep(self, mock_sweep):
        mock_sweep.return_value = {"stale": 0, "embedded": 0, "failed": 0}

        self.assertEqual(main(["jobs", "embedding", "start"]), 0)
        mock_sweep.assert_awaited_once()


if __name__ == "__main__":
    unittest.main()
