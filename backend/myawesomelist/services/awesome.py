"""
Application container.

Builds the process-wide collaborators once: the Postgres pool, one rate
limiter per upstream service, the GitHub and embedding clients, and the
services on top of them. The HTTP app, the Celery worker and the CLI all go
through this.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from myawesomelist.config import Settings
from myawesomelist.core.rate_limit import new_embedding_limiter, new_github_limiter
from myawesomelist.database.postgres import close_pool, get_pool
from myawesomelist.services.collection_service import CollectionService
from myawesomelist.services.collection_store import CollectionStore
from myawesomelist.services.embedding_sweep import EmbeddingSweep
from myawesomelist.services.embeddings import EmbeddingService
from myawesomelist.services.exceptions import EmbeddingConfigurationError
from myawesomelist.services.github import GithubClient
from myawesomelist.services.search_service import SearchService

logger = logging.getLogger(__name__)


class Awesome:
    """Owns the pool, clients and limiters; exposes the services."""

    def __init__(
        self,
        settings: Settings,
        pool: Any,
        github: GithubClient,
        embeddings: Optional[EmbeddingService] = None,
    ):
        self.settings = settings
        self.pool = pool
        self.github = github
        self.embeddings = embeddings
        self.store = CollectionStore(
            pool,
            embeddings=embeddings,
            prune_orphans=settings.COLLECTION_PRUNE_ORPHANS,
        )
        self.collections = CollectionService(
            self.store,
            github,
            collection_ttl=settings.COLLECTION_CACHE_TTL,
            stats_ttl=settings.PROJECT_STATS_TTL,
            concurrency=settings.FETCH_CONCURRENCY,
        )
        self.search = SearchService(self.store, embeddings)

    @classmethod
    async def create(cls, settings: Settings) -> "Awesome":
        pool = await get_pool()

        token = settings.github_token
        github = GithubClient(
            token=token,
            limiter=new_github_limiter(authenticated=bool(token)),
            api_url=settings.GITHUB_API_URL,
            timeout=settings.GITHUB_TIMEOUT,
        )

        embeddings: Optional[EmbeddingService] = None
        try:
            embeddings = EmbeddingService.from_settings(
                settings,
                limiter=new_embedding_limiter(
                    settings.EMBEDDING_RATE_LIMIT, settings.EMBEDDING_RATE_BURST
                ),
            )
        except EmbeddingConfigurationError as exc:
            logger.warning("Embeddings disabled: %s", exc)

        return cls(settings, pool, github, embeddings)

    def embedding_sweep(self) -> EmbeddingSweep:
        if self.embeddings is None:
            raise EmbeddingConfigurationError(
                "the embedding sweep requires OPENAI_API_KEY or OPENAI_BASE_URL"
            )
        return EmbeddingSweep(
            self.store,
            self.embeddings,
            ttl=self.settings.PROJECT_EMBEDDINGS_TTL,
            batch_size=self.settings.EMBEDDING_BATCH_SIZE,
        )

    async def close(self) -> None:
        await self.github.aclose()
        if self.embeddings is not None:
            await self.embeddings.aclose()
        await close_pool()
