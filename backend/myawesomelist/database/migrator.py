"""
SQL migrations.

Migration files live next to this module as ``NNNN_name.up.sql`` /
``NNNN_name.down.sql``. Applied versions are tracked in the
``schema_migrations`` table; each file runs in its own transaction.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import asyncpg

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"
EMBEDDING_DIMENSIONS_TOKEN = "__EMBEDDING_DIMENSIONS__"

_FILENAME = re.compile(r"^(\d+)_(.+)\.(up|down)\.sql$")

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version BIGINT PRIMARY KEY,
    name TEXT NOT NULL,
    applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""


@dataclass
class Migration:
    version: int
    name: str
    up_path: Optional[Path] = None
    down_path: Optional[Path] = None


def load_migrations(directory: Path = MIGRATIONS_DIR) -> List[Migration]:
    """Collect migrations from ``directory`` sorted by version."""
    by_version: dict[int, Migration] = {}
    for path in directory.glob("*.sql"):
        match = _FILENAME.match(path.name)
        if not match:
            logger.warning("Ignoring unexpected migration file %s", path.name)
            continue
        version = int(match.group(1))
        migration = by_version.setdefault(
            version, Migration(version=version, name=match.group(2))
        )
        if match.group(3) == "up":
            migration.up_path = path
        else:
            migration.down_path = path
    return [by_version[v] for v in sorted(by_version)]


def render_sql(path: Path, embedding_dimensions: int) -> str:
    if embedding_dimensions <= 0:
        raise ValueError("embedding dimensions must be positive")
    return path.read_text().replace(
        EMBEDDING_DIMENSIONS_TOKEN, str(int(embedding_dimensions))
    )


class Migrator:
    """Applies or reverts SQL migrations on a pool."""

    def __init__(
        self,
        pool: asyncpg.Pool,
        embedding_dimensions: int,
        directory: Path = MIGRATIONS_DIR,
    ):
        self.pool = pool
        self.embedding_dimensions = embedding_dimensions
        self.migrations = load_migrations(directory)

    async def _applied_versions(self, conn: asyncpg.Connection) -> set[int]:
        await conn.execute(CREATE_TABLE_SQL)
        rows = await conn.fetch("SELECT version FROM schema_migrations")
        return {row["version"] for row in rows}

    async def up(self) -> int:
        """Apply every pending migration. Returns how many were applied."""
        applied_count = 0
        async with self.pool.acquire() as conn:
            applied = await self._applied_versions(conn)
            for migration in self.migrations:
                if migration.version in applied or migration.up_path is None:
                    continue
                sql = render_sql(migration.up_path, self.embedding_dimensions)
                async with conn.transaction():
                    await conn.execute(sql)
                    await conn.execute(
                        "INSERT INTO schema_migrations (version, name) VALUES ($1, $2)",
                        migration.version,
                        migration.name,
                    )
                applied_count += 1
                logger.info(
                    "Applied migration %04d_%s", migration.version, migration.name
                )
        return applied_count

    async def down(self) -> int:
        """Revert every applied migration, newest first."""
        reverted = 0
        async with self.pool.acquire() as conn:
            applied = await self._applied_versions(conn)
            for migration in reversed(self.migrations):
                if migration.version not in applied:
                    continue
                if migration.down_path is None:
                    raise RuntimeError(
                        f"migration {migration.version} has no down file"
                    )
                sql = render_sql(migration.down_path, self.embedding_dimensions)
                async with conn.transaction():
                    await conn.execute(sql)
                    await conn.execute(
                        "DELETE FROM schema_migrations WHERE version = $1",
                        migration.version,
                    )
                reverted += 1
                logger.info(
                    "Reverted migration %04d_%s", migration.version, migration.name
                )
        return reverted
