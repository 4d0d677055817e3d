"""ProjectEmbedding Entities - vectors used for semantic search."""

from typing import List

from pydantic import Field

from myawesomelist.entities.base import BaseEntity
from myawesomelist.entities.repository import RepositoryRef


class ProjectEmbedding(BaseEntity):
    project_id: int
    vector: List[float] = Field(default_factory=list)


class StaleProject(BaseEntity):
    """A project whose embedding is missing or older than the sweep TTL."""

    category_id: int
    repository_id: int
    name: str
    description: str = ""
    repo: RepositoryRef

    @property
    def embedding_text(self) -> str:
        return f"{self.name} {self.description}"
