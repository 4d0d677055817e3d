"""
PostgreSQL persistence for awesome-list collections.

Writes go through one transaction per collection: repositories first, then
the collection, its categories and their projects, so every foreign key
resolves to a row written earlier in the same transaction. Embeddings for
new or changed projects are generated after commit.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

import asyncpg

from myawesomelist.database.postgres import get_transaction
from myawesomelist.entities.collection import Collection, Project
from myawesomelist.entities.project_embedding import StaleProject
from myawesomelist.entities.project_stats import ProjectStats
from myawesomelist.entities.repository import RepositoryRef
from myawesomelist.repositories import (
    CollectionRepository,
    ProjectEmbeddingRepository,
    ProjectMetadataRepository,
    ProjectRepository,
    ProjectStatsRepository,
    RepositoryRepository,
)
from myawesomelist.services.embeddings import EmbeddingService, split_results
from myawesomelist.services.exceptions import PersistenceError

logger = logging.getLogger(__name__)

# asyncio.TimeoutError is raised when no pool connection frees up in time.
DATABASE_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
    asyncio.TimeoutError,
)


@dataclass
class UpsertResult:
    collection_id: int
    category_ids: Dict[str, int] = field(default_factory=dict)
    repository_ids: Dict[RepositoryRef, int] = field(default_factory=dict)
    project_ids: Dict[Tuple[int, int], int] = field(default_factory=dict)
    changed_project_ids: List[int] = field(default_factory=list)
    skipped_projects: int = 0
    embedded: int = 0
    embedding_failures: int = 0


class CollectionStore:
    """Facade responsible for reading and persisting collections."""

    def __init__(
        self,
        pool: Any,
        embeddings: Optional[EmbeddingService] = None,
        prune_orphans: bool = False,
    ) -> None:
        self.pool = pool
        self.embeddings = embeddings
        self.prune_orphans = prune_orphans
        self.repository_repo = RepositoryRepository()
        self.collection_repo = CollectionRepository()
        self.project_repo = ProjectRepository()
        self.embedding_repo = ProjectEmbeddingRepository()
        self.stats_repo = ProjectStatsRepository()
        self.metadata_repo = ProjectMetadataRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_collection(self, repo: RepositoryRef) -> Optional[Collection]:
        async with self.pool.acquire() as conn:
            return await self.collection_repo.find_by_ref(conn, repo)

    async def list_collections(self, repos: Sequence[RepositoryRef]) -> List[Collection]:
        async with self.pool.acquire() as conn:
            return await self.collection_repo.list_by_refs(conn, repos)

    async def get_project_stats(self, repo: RepositoryRef) -> Optional[ProjectStats]:
        async with self.pool.acquire() as conn:
            return await self.stats_repo.find_by_ref(conn, repo)

    async def list_stale_embeddings(self, ttl: timedelta) -> List[StaleProject]:
        async with self.pool.acquire() as conn:
            return await self.embedding_repo.list_stale(conn, ttl)

    async def search_projects(
        self,
        repos: Sequence[RepositoryRef],
        embedding: Optional[Sequence[float]],
        limit: Optional[int],
    ) -> List[Project]:
        async with self.pool.acquire() as conn:
            return await self.project_repo.search(conn, repos, embedding, limit)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def upsert_collection(self, collection: Collection) -> UpsertResult:
        """
        Idempotently write ``collection`` and everything under it.

        Raises:
            PersistenceError: any statement failed; nothing was committed.
        """
        try:
            async with get_transaction(self.pool) as conn:
                result, changed = await self._write_collection(conn, collection)
        except DATABASE_ERRORS as exc:
            raise PersistenceError(
                f"failed to upsert collection {collection.repo}: {exc}"
            ) from exc

        logger.info(
            "Upserted collection %s: %d categories, %d projects (%d changed, %d skipped)",
            collection.repo,
            len(result.category_ids),
            len(result.project_ids),
            len(result.changed_project_ids),
            result.skipped_projects,
        )

        if changed:
            await self._embed_changed(result, changed)
        return result

    async def _write_collection(
        self, conn: Any, collection: Collection
    ) -> Tuple[UpsertResult, List[Tuple[int, str]]]:
        linked: List[RepositoryRef] = []
        skipped = 0
        for category in collection.categories:
            for project in category.projects:
                if project.repo is not None and project.repo.is_complete():
                    linked.append(project.repo)
                else:
                    skipped += 1

        # The owning repository goes first so its id is always resolved[0].
        resolved = await self.repository_repo.upsert_many(
            conn, [collection.repo, *linked]
        )
        owner_id = resolved[0].id
        repo_ids = {r.ref: r.id for r in resolved}

        collection_id = await self.collection_repo.upsert(
            conn, owner_id, collection.language
        )
        category_ids = await self.collection_repo.upsert_categories(
            conn, collection_id, [c.name for c in collection.categories]
        )
        stored_texts = await self.collection_repo.find_project_texts(
            conn, category_ids.values()
        )

        rows: List[Tuple[int, int, str, str]] = []
        for category in collection.categories:
            category_id = category_ids[category.name]
            for project in category.projects:
                if project.repo is None or not project.repo.is_complete():
                    continue
                rows.append(
                    (
                        category_id,
                        repo_ids[project.repo],
                        project.name,
                        project.description,
                    )
                )

        project_ids = await self.collection_repo.upsert_projects(conn, rows)

        if self.prune_orphans:
            await self._prune(conn, collection_id, category_ids, project_ids)

        # Later duplicates win in upsert_projects, so compare against the last row.
        latest = {(row[0], row[1]): (row[2], row[3]) for row in rows}
        changed: List[Tuple[int, str]] = []
        for key, project_id in project_ids.items():
            name, description = latest[key]
            if stored_texts.get(key) != (name, description):
                changed.append(
                    (project_id, Project(name=name, description=description).embedding_text)
                )

        result = UpsertResult(
            collection_id=collection_id,
            category_ids=category_ids,
            repository_ids=repo_ids,
            project_ids=project_ids,
            changed_project_ids=[project_id for project_id, _ in changed],
            skipped_projects=skipped,
        )
        return result, changed

    async def _prune(
        self,
        conn: Any,
        collection_id: int,
        category_ids: Dict[str, int],
        project_ids: Dict[Tuple[int, int], int],
    ) -> None:
        """Delete categories and projects that the new document no longer lists."""
        status = await self.collection_repo.delete_categories_except(
            conn, collection_id, list(category_ids)
        )
        logger.debug("Pruned categories of collection %d: %s", collection_id, status)

        kept: Dict[int, List[int]] = {category_id: [] for category_id in category_ids.values()}
        for category_id, repository_id in project_ids:
            kept[category_id].append(repository_id)
        for category_id, repository_ids in kept.items():
            status = await self.collection_repo.delete_projects_except(
                conn, category_id, repository_ids
            )
            logger.debug("Pruned projects of category %d: %s", category_id, status)

    async def _embed_changed(
        self, result: UpsertResult, changed: List[Tuple[int, str]]
    ) -> None:
        if self.embeddings is None:
            logger.debug(
                "No embedding generator configured; %d projects left for the sweep",
                len(changed),
            )
            return

        vectors = await self.embeddings.embed_many([text for _, text in changed])
        ok, failed = split_results([project_id for project_id, _ in changed], vectors)
        for project_id, exc in failed:
            logger.warning("Failed to embed project %d: %s", project_id, exc)

        try:
            async with self.pool.acquire() as conn:
                await self.embedding_repo.upsert_many(conn, ok)
        except DATABASE_ERRORS as exc:
            logger.warning(
                "Failed to store %d embeddings for collection %d: %s",
                len(ok),
                result.collection_id,
                exc,
            )
            result.embedding_failures = len(changed)
            return

        result.embedded = len(ok)
        result.embedding_failures = len(failed)

    async def upsert_embeddings(self, vectors: Sequence[Tuple[int, Sequence[float]]]) -> None:
        try:
            async with self.pool.acquire() as conn:
                await self.embedding_repo.upsert_many(conn, vectors)
        except DATABASE_ERRORS as exc:
            raise PersistenceError(f"failed to store embeddings: {exc}") from exc

    async def upsert_project_stats(
        self,
        repo: RepositoryRef,
        stargazers_count: Optional[int],
        open_issue_count: Optional[int],
    ) -> ProjectStats:
        try:
            async with get_transaction(self.pool) as conn:
                resolved = await self.repository_repo.upsert_many(conn, [repo])
                return await self.stats_repo.upsert(
                    conn, resolved[0].id, stargazers_count, open_issue_count
                )
        except DATABASE_ERRORS as exc:
            raise PersistenceError(
                f"failed to upsert project stats for {repo}: {exc}"
            ) from exc

    async def upsert_project_metadata(self, repo: RepositoryRef, readme: str) -> None:
        try:
            async with get_transaction(self.pool) as conn:
                resolved = await self.repository_repo.upsert_many(conn, [repo])
                await self.metadata_repo.upsert(conn, resolved[0].id, readme)
        except DATABASE_ERRORS as exc:
            raise PersistenceError(
                f"failed to upsert project metadata for {repo}: {exc}"
            ) from exc
