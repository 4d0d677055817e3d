"""Repository for collections, categories and projects."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from myawesomelist.entities.collection import Category, Collection, Project
from myawesomelist.entities.repository import RepositoryRef
from myawesomelist.repositories.base import BaseRepository, Executor
from myawesomelist.repositories.queries import (
    CATEGORIES_BY_COLLECTION_IDS_QUERY,
    COLLECTION_BY_REPO_QUERY,
    DELETE_CATEGORIES_EXCEPT_QUERY,
    DELETE_PROJECTS_EXCEPT_QUERY,
    PROJECTS_BY_CATEGORY_IDS_QUERY,
    UPSERT_CATEGORIES_QUERY,
    UPSERT_COLLECTION_QUERY,
    UPSERT_PROJECTS_QUERY,
    render_list_collections_query,
)

logger = logging.getLogger(__name__)

# (category_id, repository_id) -> (name, description)
StoredProjectText = Dict[Tuple[int, int], Tuple[str, str]]


def _ref_from_row(row: Mapping) -> RepositoryRef:
    return RepositoryRef(hostname=row["hostname"], owner=row["owner"], repo=row["repo"])


class CollectionRepository(BaseRepository[Collection]):
    """Reads and writes the collection → category → project hierarchy."""

    def __init__(self):
        super().__init__("collections", Collection)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_by_ref(
        self, conn: Executor, ref: RepositoryRef
    ) -> Optional[Collection]:
        """Load one stored collection with its categories and projects."""
        row = await conn.fetchrow(
            COLLECTION_BY_REPO_QUERY, ref.hostname, ref.owner, ref.repo
        )
        if row is None:
            return None
        collections = await self._assemble(conn, [row])
        return collections[0]

    async def list_by_refs(
        self, conn: Executor, refs: Sequence[RepositoryRef]
    ) -> List[Collection]:
        """Load every stored collection among ``refs`` in three queries."""
        sql, args = render_list_collections_query(refs)
        logger.debug("list collections query args_len=%d", len(args))
        rows = await conn.fetch(sql, *args)
        if not rows:
            return []
        return await self._assemble(conn, rows)

    async def _assemble(
        self, conn: Executor, collection_rows: Sequence[Mapping]
    ) -> List[Collection]:
        collection_ids = [row["id"] for row in collection_rows]
        category_rows = await conn.fetch(
            CATEGORIES_BY_COLLECTION_IDS_QUERY, collection_ids
        )

        categories_by_collection: Dict[int, List[Mapping]] = defaultdict(list)
        for row in category_rows:
            categories_by_collection[row["collection_id"]].append(row)

        projects_by_category: Dict[int, List[Project]] = defaultdict(list)
        category_ids = [row["id"] for row in category_rows]
        if category_ids:
            project_rows = await conn.fetch(
                PROJECTS_BY_CATEGORY_IDS_QUERY, category_ids
            )
            for row in project_rows:
                projects_by_category[row["category_id"]].append(
                    Project(
                        id=row["id"],
                        name=row["name"],
                        description=row["description"] or "",
                        repo=_ref_from_row(row),
                        updated_at=row["updated_at"],
                    )
                )

        collections = []
        for row in collection_rows:
            categories = [
                Category(
                    id=cat["id"],
                    name=cat["name"],
                    updated_at=cat["updated_at"],
                    projects=projects_by_category.get(cat["id"], []),
                )
                for cat in categories_by_collection.get(row["id"], [])
            ]
            collections.append(
                Collection(
                    id=row["id"],
                    repo=_ref_from_row(row),
                    language=row["language"],
                    updated_at=row["updated_at"],
                    categories=categories,
                )
            )
        return collections

    async def find_project_texts(
        self, conn: Executor, category_ids: Iterable[int]
    ) -> StoredProjectText:
        """Current (name, description) of stored projects, keyed by natural key."""
        ids = list(category_ids)
        if not ids:
            return {}
        rows = await conn.fetch(PROJECTS_BY_CATEGORY_IDS_QUERY, ids)
        return {
            (row["category_id"], row["repository_id"]): (
                row["name"],
                row["description"] or "",
            )
            for row in rows
        }

    # ------------------------------------------------------------------
    # Writes (call on a transaction's connection)
    # ------------------------------------------------------------------

    async def upsert(self, conn: Executor, repository_id: int, language: str) -> int:
        return await conn.fetchval(UPSERT_COLLECTION_QUERY, repository_id, language)

    async def upsert_categories(
        self, conn: Executor, collection_id: int, names: Sequence[str]
    ) -> Dict[str, int]:
        """Upsert categories by (collection_id, name). Returns name -> id."""
        unique = list(dict.fromkeys(names))
        if not unique:
            return {}
        rows = await conn.fetch(UPSERT_CATEGORIES_QUERY, collection_id, unique)
        return {row["name"]: row["id"] for row in rows}

    async def upsert_projects(
        self,
        conn: Executor,
        projects: Sequence[Tuple[int, int, str, str]],
    ) -> Dict[Tuple[int, int], int]:
        """
        Upsert (category_id, repository_id, name, description) tuples.

        A repository listed twice in one category keeps the last entry.
        Returns (category_id, repository_id) -> project id.
        """
        latest: Dict[Tuple[int, int], Tuple[str, str]] = {}
        for category_id, repository_id, name, description in projects:
            latest[(category_id, repository_id)] = (name, description)
        if not latest:
            return {}

        keys = list(latest)
        rows = await conn.fetch(
            UPSERT_PROJECTS_QUERY,
            [k[0] for k in keys],
            [k[1] for k in keys],
            [latest[k][0] for k in keys],
            [latest[k][1] for k in keys],
        )
        return {(row["category_id"], row["repository_id"]): row["id"] for row in rows}

    async def delete_categories_except(
        self, conn: Executor, collection_id: int, keep_names: Sequence[str]
    ) -> str:
        return await conn.execute(
            DELETE_CATEGORIES_EXCEPT_QUERY, collection_id, list(keep_names)
        )

    async def delete_projects_except(
        self, conn: Executor, category_id: int, keep_repository_ids: Sequence[int]
    ) -> str:
        return await conn.execute(
            DELETE_PROJECTS_EXCEPT_QUERY, category_id, list(keep_repository_ids)
        )
