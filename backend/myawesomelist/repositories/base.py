"""Base repository for PostgreSQL tables."""

from __future__ import annotations

import logging
from typing import Any, Generic, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# Anything with fetch/fetchrow/fetchval/execute: a pool, a connection, or a
# connection inside a transaction.
Executor = Any


class BaseRepository(Generic[T]):
    """
    Table-scoped data access.

    Every method takes the executor to run on, so the same repository can
    be used on the shared pool for reads and on a transaction's connection
    for writes that must commit together.
    """

    def __init__(self, table: str, model: Type[T]):
        self.table = table
        self.model = model

    def _to_entity(self, row: Optional[Mapping[str, Any]]) -> Optional[T]:
        if row is None:
            return None
        return self.model.model_validate(dict(row))

