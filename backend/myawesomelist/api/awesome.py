"""
AwesomeService RPC endpoints.

Each method is a POST of a JSON request message returning a JSON response
message, mounted under ``/myawesomelist.v1.AwesomeService/``.
"""

import logging

from fastapi import APIRouter, Depends

from myawesomelist.api.deps import get_awesome
from myawesomelist.core.tracing import TracingContext
from myawesomelist.dtos import (
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
    SearchProjectsRequest,
    SearchProjectsResponse,
)
from myawesomelist.services.awesome import Awesome

logger = logging.getLogger(__name__)

SERVICE_PATH = "/myawesomelist.v1.AwesomeService"

router = APIRouter(prefix=SERVICE_PATH)


@router.post("/ListCollections", response_model=ListCollectionsResponse)
async def list_collections(
    request: ListCollectionsRequest,
    awesome: Awesome = Depends(get_awesome),
):
    """Collections for the given repositories, or the built-in lists when empty."""
    repos = [repo.to_ref() for repo in request.repos]
    collections = await awesome.collections.list_collections(repos)
    return ListCollectionsResponse(
        collections=[CollectionDto.model_validate(c) for c in collections]
    )


@router.post("/GetCollection", response_model=GetCollectionResponse)
async def get_collection(
    request: GetCollectionRequest,
    awesome: Awesome = Depends(get_awesome),
):
    repo = request.repo.to_ref()
    TracingContext.set(repo=repo.key)
    collection = await awesome.collections.get_collection(repo)
    return GetCollectionResponse(collection=CollectionDto.model_validate(collection))


@router.post("/ListCategories", response_model=ListCategoriesResponse)
async def list_categories(
    request: ListCategoriesRequest,
    awesome: Awesome = Depends(get_awesome),
):
    repo = request.repo.to_ref()
    TracingContext.set(repo=repo.key)
    categories = await awesome.collections.list_categories(repo)
    return ListCategoriesResponse(
        categories=[CategoryDto.model_validate(c) for c in categories]
    )


@router.post("/ListProjects", response_model=ListProjectsResponse)
async def list_projects(
    request: ListProjectsRequest,
    awesome: Awesome = Depends(get_awesome),
):
    """Projects of one category; empty when the category does not exist."""
    repo = request.repo.to_ref()
    TracingContext.set(repo=repo.key)
    projects = await awesome.collections.list_projects(repo, request.category_name)
    return ListProjectsResponse(
        projects=[ProjectDto.model_validate(p) for p in projects]
    )


@router.post("/SearchProjects", response_model=SearchProjectsResponse)
async def search_projects(
    request: SearchProjectsRequest,
    awesome: Awesome = Depends(get_awesome),
):
    projects = await awesome.search.search_projects(
        request.query,
        [repo.to_ref() for repo in request.repos],
        request.limit,
    )
    return SearchProjectsResponse(
        projects=[ProjectDto.model_validate(p) for p in projects]
    )


@router.post("/GetProjectStats", response_model=GetProjectStatsResponse)
async def get_project_stats(
    request: GetProjectStatsRequest,
    awesome: Awesome = Depends(get_awesome),
):
    repo = request.repo.to_ref()
    TracingContext.set(repo=repo.key)
    stats = await awesome.collections.get_project_stats(repo)
    return GetProjectStatsResponse(stats=ProjectStatsDto.model_validate(stats))
