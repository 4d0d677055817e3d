"""Repository for project embeddings and project search."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional, Sequence, Tuple

from myawesomelist.entities.collection import Project
from myawesomelist.entities.project_embedding import ProjectEmbedding, StaleProject
from myawesomelist.entities.repository import RepositoryRef
from myawesomelist.repositories.base import BaseRepository, Executor
from myawesomelist.repositories.queries import (
    STALE_PROJECT_EMBEDDINGS_QUERY,
    UPSERT_PROJECT_EMBEDDING_QUERY,
    render_search_projects_query,
)

logger = logging.getLogger(__name__)


class ProjectEmbeddingRepository(BaseRepository[ProjectEmbedding]):
    def __init__(self):
        super().__init__("project_embeddings", ProjectEmbedding)

    async def upsert_many(
        self, conn: Executor, vectors: Sequence[Tuple[int, Sequence[float]]]
    ) -> None:
        if not vectors:
            return
        await conn.executemany(
            UPSERT_PROJECT_EMBEDDING_QUERY,
            [(project_id, list(vector)) for project_id, vector in vectors],
        )

    async def list_stale(self, conn: Executor, ttl: timedelta) -> List[StaleProject]:
        """
        Projects with no embedding, or (ttl >= 0) an embedding older than ttl.

        A negative ttl only backfills missing embeddings.
        """
        rows = await conn.fetch(STALE_PROJECT_EMBEDDINGS_QUERY, ttl.total_seconds())
        return [
            StaleProject(
                id=row["id"],
                category_id=row["category_id"],
                repository_id=row["repository_id"],
                name=row["name"],
                description=row["description"] or "",
                updated_at=row["updated_at"],
                repo=RepositoryRef(
                    hostname=row["hostname"], owner=row["owner"], repo=row["repo"]
                ),
            )
            for row in rows
        ]


class ProjectRepository(BaseRepository[Project]):
    def __init__(self):
        super().__init__("projects", Project)

    async def search(
        self,
        conn: Executor,
        repos: Sequence[RepositoryRef],
        embedding: Optional[Sequence[float]],
        limit: Optional[int],
    ) -> List[Project]:
        sql, args = render_search_projects_query(repos, embedding, limit)
        logger.debug(
            "search projects query embedding_used=%s args_len=%d",
            embedding is not None,
            len(args),
        )
        rows = await conn.fetch(sql, *args)
        return [
            Project(
                id=row["id"],
                name=row["name"],
                description=row["description"] or "",
                updated_at=row["updated_at"],
                repo=RepositoryRef(
                    hostname=row["hostname"], owner=row["owner"], repo=row["repo"]
                ),
            )
            for row in rows
        ]
