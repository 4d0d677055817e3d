"""Semantic project search."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from myawesomelist.entities.collection import Project
from myawesomelist.entities.repository import RepositoryRef
from myawesomelist.services.collection_store import CollectionStore
from myawesomelist.services.embeddings import EmbeddingService
from myawesomelist.services.exceptions import EmbeddingConfigurationError

logger = logging.getLogger(__name__)


class SearchService:
    def __init__(
        self, store: CollectionStore, embeddings: Optional[EmbeddingService] = None
    ):
        self.store = store
        self.embeddings = embeddings

    async def search_projects(
        self,
        query: str,
        repos: Optional[Sequence[RepositoryRef]] = None,
        limit: Optional[int] = None,
    ) -> List[Project]:
        """
        Projects matching ``repos`` (any repository when empty).

        A non-empty query is embedded with exactly one request and results
        are ordered nearest first; an embedding failure aborts the search.
        An empty query returns the most recently updated projects.
        """
        query = (query or "").strip()
        embedding = None
        if query:
            if self.embeddings is None:
                raise EmbeddingConfigurationError(
                    "semantic search requires an embedding generator"
                )
            embedding = await self.embeddings.embed_text(
                Project(name=query, description=query).embedding_text
            )

        projects = await self.store.search_projects(list(repos or []), embedding, limit)
        logger.info(
            "Search projects query_len=%d filters=%d embedding_used=%s results=%d",
            len(query),
            len(repos or []),
            embedding is not None,
            len(projects),
        )
        return projects
