"""Request/response DTOs for the AwesomeService RPC methods"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from myawesomelist.entities.repository import GITHUB_HOSTNAME, RepositoryRef


class RpcModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RepositoryDto(RpcModel):
    hostname: str = GITHUB_HOSTNAME
    owner: str = ""
    repo: str = ""

    def to_ref(self) -> RepositoryRef:
        return RepositoryRef(hostname=self.hostname, owner=self.owner, repo=self.repo)


class ProjectDto(RpcModel):
    id: Optional[int] = None
    name: str
    description: str = ""
    repo: Optional[RepositoryDto] = None
    updated_at: Optional[datetime] = None


class CategoryDto(RpcModel):
    id: Optional[int] = None
    name: str
    projects: List[ProjectDto] = Field(default_factory=list)
    updated_at: Optional[datetime] = None


class CollectionDto(RpcModel):
    id: Optional[int] = None
    repo: RepositoryDto
    language: str = ""
    categories: List[CategoryDto] = Field(default_factory=list)
    updated_at: Optional[datetime] = None


class ProjectStatsDto(RpcModel):
    stargazers_count: Optional[int] = None
    open_issue_count: Optional[int] = None
    updated_at: Optional[datetime] = None


# Requests


class ListCollectionsRequest(RpcModel):
    repos: List[RepositoryDto] = Field(default_factory=list)


class GetCollectionRequest(RpcModel):
    repo: RepositoryDto


class ListCategoriesRequest(RpcModel):
    repo: RepositoryDto


class ListProjectsRequest(RpcModel):
    repo: RepositoryDto
    category_name: str


class SearchProjectsRequest(RpcModel):
    query: str = ""
    limit: int = 0
    repos: List[RepositoryDto] = Field(default_factory=list)


class GetProjectStatsRequest(RpcModel):
    repo: RepositoryDto


# Responses


class ListCollectionsResponse(RpcModel):
    collections: List[CollectionDto] = Field(default_factory=list)


class GetCollectionResponse(RpcModel):
    collection: CollectionDto


class ListCategoriesResponse(RpcModel):
    categories: List[CategoryDto] = Field(default_factory=list)


class ListProjectsResponse(RpcModel):
    projects: List[ProjectDto] = Field(default_factory=list)


class SearchProjectsResponse(RpcModel):
    projects: List[ProjectDto] = Field(default_factory=list)


class GetProjectStatsResponse(RpcModel):
    stats: ProjectStatsDto
