"""Data transfer objects for the RPC surface"""

from .awesome import (
    CategoryDto,
    CollectionDto,
    GetCollectionRequest,
    GetCollectionResponse,
    GetProjectStatsRequest,
    GetProjectStatsResponse,
    ListCategoriesRequest,
    ListCategoriesResponse,
    ListCollectionsRequest,
    ListCollectionsResponse,
    ListProjectsRequest,
    ListProjectsResponse,
    ProjectDto,
    ProjectStatsDto,
    RepositoryDto,
    SearchProjectsRequest,
    SearchProjectsResponse,
)

__all__ = [
    "RepositoryDto",
    "ProjectDto",
    "CategoryDto",
    "CollectionDto",
    "ProjectStatsDto",
    "ListCollectionsRequest",
    "ListCollectionsResponse",
    "GetCollectionRequest",
    "GetCollectionResponse",
    "ListCategoriesRequest",
    "ListCategoriesResponse",
    "ListProjectsRequest",
    "ListProjectsResponse",
    "SearchProjectsRequest",
    "SearchProjectsResponse",
    "GetProjectStatsRequest",
    "GetProjectStatsResponse",
]
