"""
Command line entry point.

    myawesomelist [--dsn DSN] server start [--addr HOST:PORT]
    myawesomelist [--dsn DSN] migrations apply|delete
    myawesomelist [--dsn DSN] jobs embedding start
"""

import asyncio
import logging
import sys
from argparse import ArgumentParser, Namespace
from typing import List, Optional, Tuple

from myawesomelist.config import settings
from myawesomelist.core.logging import setup_logging
from myawesomelist.core.tracing import TracingContext

logger = logging.getLogger(__name__)


def parse_addr(addr: str) -> Tuple[str, int]:
    """Split ``host:port`` (host may be empty for all interfaces)."""
    host, sep, port = addr.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid address {addr!r}, expected host:port")
    return host or "0.0.0.0", int(port)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="myawesomelist", description=__doc__.splitlines()[0])
    parser.add_argument("--dsn", help="PostgreSQL DSN (overrides DSN)")
    commands = parser.add_subparsers(dest="command", required=True)

    server = commands.add_parser("server", help="HTTP server")
    server_commands = server.add_subparsers(dest="action", required=True)
    start = server_commands.add_parser("start", help="serve the RPC API")
    start.add_argument("--addr", default=settings.addr, help="listen address")

    migrations = commands.add_parser("migrations", help="database schema")
    migrations_commands = migrations.add_subparsers(dest="action", required=True)
    migrations_commands.add_parser("apply", help="apply pending migrations")
    migrations_commands.add_parser("delete", help="revert all migrations")

    jobs = commands.add_parser("jobs", help="maintenance jobs")
    job_names = jobs.add_subparsers(dest="job", required=True)
    embedding = job_names.add_parser("embedding", help="embedding refresh sweep")
    embedding_commands = embedding.add_subparsers(dest="action", required=True)
    embedding_commands.add_parser("start", help="run one sweep now")

    return parser


def _start_server(args: Namespace) -> int:
    import uvicorn

    host, port = parse_addr(args.addr)
    logger.info("Starting server on %s:%d", host, port)
    uvicorn.run("myawesomelist.main:app", host=host, port=port)
    return 0


async def _migrate(action: str) -> int:
    from myawesomelist.database.migrator import Migrator
    from myawesomelist.database.postgres import close_pool, get_pool

    pool = await get_pool()
    try:
        migrator = Migrator(pool, settings.EMBEDDING_DIMENSIONS)
        if action == "apply":
            count = await migrator.up()
            logger.info("Applied %d migrations", count)
        else:
            count = await migrator.down()
            logger.info("Reverted %d migrations", count)
    finally:
        await close_pool()
    return 0


async def _embedding_sweep() -> int:
    from myawesomelist.tasks.maintenance import run_embedding_sweep

    TracingContext.set(
        correlation_id=TracingContext.generate_correlation_id(),
        task_name="embedding_sweep",
    )
    summary = await run_embedding_sweep()
    logger.info("Embedding sweep summary: %s", summary)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    if args.dsn:
        settings.DSN = args.dsn

    if args.command == "server":
        return _start_server(args)
    if args.command == "migrations":
        return asyncio.run(_migrate(args.action))
    if args.command == "jobs":
        return asyncio.run(_embedding_sweep())
    return 2


if __name__ == "__main__":
    sys.exit(main())
