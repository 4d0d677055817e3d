"""Repository for ProjectStats rows."""

from __future__ import annotations

from typing import Optional

from myawesomelist.entities.project_stats import ProjectStats
from myawesomelist.entities.repository import RepositoryRef
from myawesomelist.repositories.base import BaseRepository, Executor
from myawesomelist.repositories.queries import (
    PROJECT_STATS_BY_REPO_QUERY,
    UPSERT_PROJECT_STATS_QUERY,
)


class ProjectStatsRepository(BaseRepository[ProjectStats]):
    def __init__(self):
        super().__init__("project_stats", ProjectStats)

    async def find_by_ref(
        self, conn: Executor, ref: RepositoryRef
    ) -> Optional[ProjectStats]:
        row = await conn.fetchrow(
            PROJECT_STATS_BY_REPO_QUERY, ref.hostname, ref.owner, ref.repo
        )
        return self._to_entity(row)

    async def upsert(
        self,
        conn: Executor,
        repository_id: int,
        stargazers_count: Optional[int],
        open_issue_count: Optional[int],
    ) -> ProjectStats:
        row = await conn.fetchrow(
            UPSERT_PROJECT_STATS_QUERY,
            repository_id,
            stargazers_count,
            open_issue_count,
        )
        return self._to_entity(row)
