"""Domain entity models - the rows stored in PostgreSQL"""

from .base import BaseEntity
from .collection import Category, Collection, Project
from .project_embedding import ProjectEmbedding, StaleProject
from .project_stats import ProjectStats
from .repository import GITHUB_HOSTNAME, Repository, RepositoryRef

__all__ = [
    "BaseEntity",
    "GITHUB_HOSTNAME",
    "Repository",
    "RepositoryRef",
    "Collection",
    "Category",
    "Project",
    "ProjectStats",
    "ProjectEmbedding",
    "StaleProject",
]
