"""Repository for the raw README text of collection repositories."""

from __future__ import annotations

from pydantic import BaseModel

from myawesomelist.repositories.base import BaseRepository, Executor
from myawesomelist.repositories.queries import UPSERT_PROJECT_METADATA_QUERY


class ProjectMetadata(BaseModel):
    id: int
    repository_id: int
    readme: str | None = None


class ProjectMetadataRepository(BaseRepository[ProjectMetadata]):
    def __init__(self):
        super().__init__("project_metadata", ProjectMetadata)

    async def upsert(self, conn: Executor, repository_id: int, readme: str) -> None:
        await conn.execute(UPSERT_PROJECT_METADATA_QUERY, repository_id, readme)
