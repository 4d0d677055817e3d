"""Repository layer for database operations"""

from .base import BaseRepository
from .collection import CollectionRepository
from .project import ProjectEmbeddingRepository, ProjectRepository
from .project_metadata import ProjectMetadataRepository
from .project_stats import ProjectStatsRepository
from .repository import RepositoryRepository

__all__ = [
    "BaseRepository",
    "RepositoryRepository",
    "CollectionRepository",
    "ProjectRepository",
    "ProjectEmbeddingRepository",
    "ProjectMetadataRepository",
    "ProjectStatsRepository",
]
