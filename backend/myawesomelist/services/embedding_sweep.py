"""
Embedding refresh sweep.

Finds projects whose embedding is missing (or, with a non-negative TTL,
older than the TTL) and re-embeds them in batches. A project that fails to
embed is logged and counted; it never blocks the rest of its batch.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import timedelta
from typing import Any, Dict

from myawesomelist.core.tracing import TracingContext
from myawesomelist.services.collection_store import CollectionStore
from myawesomelist.services.embeddings import EmbeddingService, split_results
from myawesomelist.services.exceptions import PersistenceError

logger = logging.getLogger(__name__)


@dataclass
class SweepSummary:
    stale: int = 0
    embedded: int = 0
    failed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EmbeddingSweep:
    def __init__(
        self,
        store: CollectionStore,
        embeddings: EmbeddingService,
        ttl: timedelta = timedelta(seconds=-1),
        batch_size: int = 32,
    ):
        self.store = store
        self.embeddings = embeddings
        self.ttl = ttl
        self.batch_size = max(1, batch_size)

    async def run(self) -> SweepSummary:
        stale = await self.store.list_stale_embeddings(self.ttl)
        summary = SweepSummary(stale=len(stale))
        logger.info(
            "%s Embedding sweep found %d stale projects (ttl=%s)",
            TracingContext.get_log_prefix(),
            len(stale),
            self.ttl,
        )

        for start in range(0, len(stale), self.batch_size):
            batch = stale[start : start + self.batch_size]
            results = await self.embeddings.embed_many(
                [project.embedding_text for project in batch]
            )
            ok, failed = split_results([project.id for project in batch], results)
            for project_id, exc in failed:
                logger.warning("Failed to embed project %d: %s", project_id, exc)
            summary.failed += len(failed)

            try:
                await self.store.upsert_embeddings(ok)
            except PersistenceError as exc:
                logger.warning(
                    "Failed to store embedding batch of %d: %s", len(ok), exc
                )
                summary.failed += len(ok)
                continue
            summary.embedded += len(ok)

        logger.info(
            "Embedding sweep done: stale=%d embedded=%d failed=%d",
            summary.stale,
            summary.embedded,
            summary.failed,
        )
        return summary
