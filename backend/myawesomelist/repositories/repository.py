"""Repository for the repositories table (the identity store)."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from myawesomelist.entities.repository import Repository, RepositoryRef
from myawesomelist.repositories.base import BaseRepository, Executor
from myawesomelist.repositories.queries import (
    REPO_ID_QUERY,
    UPSERT_REPOSITORIES_QUERY,
)

logger = logging.getLogger(__name__)


class RepositoryRepository(BaseRepository[Repository]):
    """Resolves (hostname, owner, repo) triples to surrogate ids."""

    def __init__(self):
        super().__init__("repositories", Repository)

    async def upsert_many(
        self, conn: Executor, refs: Sequence[RepositoryRef]
    ) -> List[Repository]:
        """
        Insert missing repositories and touch existing ones in one statement.

        Returns one Repository per input ref, in input order; duplicate refs
        resolve to the same row.
        """
        if not refs:
            return []

        # Sorted so every transaction locks repository rows in the same order.
        unique = sorted(
            dict.fromkeys(refs), key=lambda ref: (ref.hostname, ref.owner, ref.repo)
        )
        hostnames = [ref.hostname for ref in unique]
        owners = [ref.owner for ref in unique]
        names = [ref.repo for ref in unique]

        rows = await conn.fetch(UPSERT_REPOSITORIES_QUERY, hostnames, owners, names)
        by_ref = {
            RepositoryRef(hostname=r["hostname"], owner=r["owner"], repo=r["repo"]): r
            for r in rows
        }

        resolved: List[Repository] = []
        for ref in refs:
            row = by_ref.get(ref)
            if row is None:
                raise LookupError(f"repository {ref} was not returned by upsert")
            resolved.append(self._to_entity(row))

        logger.debug("Upserted %d repositories (%d unique)", len(refs), len(unique))
        return resolved

    async def find_id(self, conn: Executor, ref: RepositoryRef) -> Optional[int]:
        return await conn.fetchval(REPO_ID_QUERY, ref.hostname, ref.owner, ref.repo)
