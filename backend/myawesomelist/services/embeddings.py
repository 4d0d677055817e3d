"""
Embedding generator.

Wraps an OpenAI-compatible embeddings endpoint. One request per text, each
gated by the shared embedding limiter, so a batch fans out concurrently
while still respecting the request budget.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Sequence, Union

from openai import AsyncOpenAI, OpenAIError

from myawesomelist.core.rate_limit import NoopLimiter
from myawesomelist.services.exceptions import (
    EmbeddingConfigurationError,
    EmbeddingError,
)

logger = logging.getLogger(__name__)

Vector = List[float]


class EmbeddingService:
    """Turns text into fixed-dimension vectors."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        dimensions: int,
        limiter: Any = None,
    ):
        self.client = client
        self.model = model
        self.dimensions = dimensions
        self.limiter = limiter or NoopLimiter()
        logger.debug(
            "Embeddings configured model=%s dimensions=%d", model, dimensions
        )

    @classmethod
    def from_settings(cls, settings, limiter: Any = None) -> "EmbeddingService":
        if not settings.OPENAI_API_KEY and not settings.OPENAI_BASE_URL:
            raise EmbeddingConfigurationError(
                "OPENAI_API_KEY or OPENAI_BASE_URL must be set to generate embeddings"
            )
        client = AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY or "unused",
            base_url=settings.OPENAI_BASE_URL,
        )
        return cls(
            client,
            model=settings.EMBEDDING_MODEL,
            dimensions=settings.EMBEDDING_DIMENSIONS,
            limiter=limiter,
        )

    async def embed_text(self, text: str) -> Vector:
        """One embedding request for ``text``."""
        await self.limiter.wait()
        try:
            response = await self.client.embeddings.create(
                model=self.model, input=text
            )
        except OpenAIError as exc:
            raise EmbeddingError(f"embedding request failed: {exc}") from exc

        if not response.data:
            raise EmbeddingError("embedding response contained no vectors")
        vector = list(response.data[0].embedding)
        if len(vector) != self.dimensions:
            raise EmbeddingError(
                f"embedding has {len(vector)} dimensions, expected {self.dimensions}"
            )
        return vector

    async def embed_many(
        self, texts: Sequence[str]
    ) -> List[Union[Vector, BaseException]]:
        """
        Embed every text concurrently.

        Returns one entry per input, in order: the vector, or the exception
        that text failed with. One failure never cancels the others.
        """
        if not texts:
            return []
        return await asyncio.gather(
            *(self.embed_text(text) for text in texts), return_exceptions=True
        )

    async def aclose(self) -> None:
        await self.client.close()


def split_results(
    items: Sequence[Any], results: Sequence[Union[Vector, BaseException]]
) -> tuple[list[tuple[Any, Vector]], list[tuple[Any, BaseException]]]:
    """Pair items with their embed_many() results, separating failures."""
    ok: list[tuple[Any, Vector]] = []
    failed: list[tuple[Any, BaseException]] = []
    for item, result in zip(items, results):
        if isinstance(result, BaseException):
            if isinstance(result, asyncio.CancelledError):
                raise result
            failed.append((item, result))
        else:
            ok.append((item, result))
    return ok, failed
