"""
Cache-aside reads of collections and project stats.

Each read first consults the store. Fresh rows (younger than their TTL, or
any stored row when the TTL is zero or negative) are returned as is; missing
or stale rows are fetched from GitHub, decoded, written back and returned.
Upstream and decode errors always reach the caller, even when an older
copy is stored. Write-back failures are logged and the freshly fetched data
is still returned.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Dict, List, Optional, Sequence

from myawesomelist.encoding import ParseOptions, decode_collection
from myawesomelist.entities.collection import Category, Collection, Project
from myawesomelist.entities.project_stats import ProjectStats
from myawesomelist.entities.repository import GITHUB_HOSTNAME, RepositoryRef
from myawesomelist.services.collection_store import DATABASE_ERRORS, CollectionStore
from myawesomelist.services.exceptions import (
    InvalidArgumentError,
    PersistenceError,
    UnsupportedHostnameError,
)
from myawesomelist.services.github import (
    GithubClient,
    GithubError,
    default_refs,
    parse_options_for,
)
from myawesomelist.utils.datetime import ensure_aware_utc, is_fresh, utc_now

logger = logging.getLogger(__name__)

SUPPORTED_HOSTNAMES = frozenset({GITHUB_HOSTNAME})


def validate_repository(repo: Optional[RepositoryRef]) -> RepositoryRef:
    """Reject incomplete repositories and hosts we cannot fetch from."""
    if repo is None or not repo.is_complete():
        raise InvalidArgumentError("repository must have hostname, owner and repo")
    if repo.hostname not in SUPPORTED_HOSTNAMES:
        raise UnsupportedHostnameError(repo.hostname)
    return repo


class CollectionService:
    """TTL-governed read path over CollectionStore and GithubClient."""

    def __init__(
        self,
        store: CollectionStore,
        github: GithubClient,
        collection_ttl: timedelta = timedelta(hours=24),
        stats_ttl: timedelta = timedelta(hours=6),
        concurrency: int = 8,
    ):
        self.store = store
        self.github = github
        self.collection_ttl = collection_ttl
        self.stats_ttl = stats_ttl
        self.concurrency = max(1, concurrency)

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    async def get_collection(
        self,
        repo: RepositoryRef,
        options: Optional[ParseOptions] = None,
    ) -> Collection:
        repo = validate_repository(repo)
        stored = await self._load_collection(repo)
        if stored is not None:
            if is_fresh(stored.updated_at, self.collection_ttl):
                logger.info(
                    "Collection cache fresh; skip GitHub fetch repo=%s categories=%d",
                    repo,
                    len(stored.categories),
                )
                return stored
            logger.info(
                "Collection cache stale; refetching from GitHub repo=%s updated_at=%s ttl=%s",
                repo,
                stored.updated_at,
                self.collection_ttl,
            )
        return await self._fetch_collection(repo, options, stale=stored)

    async def _load_collection(self, repo: RepositoryRef) -> Optional[Collection]:
        try:
            return await self.store.get_collection(repo)
        except DATABASE_ERRORS as exc:
            logger.warning(
                "Failed to query datastore for collection repo=%s: %s", repo, exc
            )
            return None

    async def _fetch_collection(
        self,
        repo: RepositoryRef,
        options: Optional[ParseOptions],
        stale: Optional[Collection] = None,
    ) -> Collection:
        try:
            readme = await self.github.get_readme(repo)
        except GithubError as exc:
            if stale is not None:
                age = utc_now() - ensure_aware_utc(stale.updated_at)
                logger.warning(
                    "GitHub fetch failed; not serving stale collection repo=%s age=%s: %s",
                    repo,
                    age,
                    exc,
                )
            raise

        collection = decode_collection(
            readme, options or parse_options_for(repo), repo=repo
        )
        logger.info(
            "Fetched collection from GitHub repo=%s language=%r categories=%d",
            repo,
            collection.language,
            len(collection.categories),
        )

        try:
            await self.store.upsert_project_metadata(
                repo, readme.decode("utf-8", errors="replace")
            )
        except PersistenceError as exc:
            logger.warning("Failed to store README metadata repo=%s: %s", repo, exc)

        try:
            result = await self.store.upsert_collection(collection)
        except PersistenceError as exc:
            logger.warning(
                "Failed to upsert collection; returning unpersisted data repo=%s: %s",
                repo,
                exc,
            )
            return collection

        collection.id = result.collection_id
        collection.updated_at = utc_now()
        for category in collection.categories:
            category.id = result.category_ids.get(category.name)
            for project in category.projects:
                repository_id = result.repository_ids.get(project.repo)
                project.id = result.project_ids.get((category.id, repository_id))
        return collection

    async def list_collections(
        self, repos: Optional[Sequence[RepositoryRef]] = None
    ) -> List[Collection]:
        """
        Collections for ``repos`` (the built-in lists when empty).

        Stored, fresh collections come from one bulk query; the rest are
        fetched concurrently. A repository that fails is logged and left
        out. Result order is not guaranteed.
        """
        requested = list(dict.fromkeys(repos or default_refs()))
        for repo in requested:
            if repo is None or not repo.is_complete():
                raise InvalidArgumentError(
                    "repository must have hostname, owner and repo"
                )

        try:
            stored = await self.store.list_collections(requested)
        except DATABASE_ERRORS as exc:
            logger.warning("Failed to list collections from datastore: %s", exc)
            stored = []

        results: List[Collection] = []
        stale: Dict[RepositoryRef, Collection] = {}
        for collection in stored:
            if is_fresh(collection.updated_at, self.collection_ttl):
                results.append(collection)
            else:
                stale[collection.repo] = collection

        served = {collection.repo for collection in results}
        missing = [repo for repo in requested if repo not in served]
        logger.info(
            "List collections: %d requested, %d fresh in cache, %d to fetch",
            len(requested),
            len(results),
            len(missing),
        )
        if not missing:
            return results

        semaphore = asyncio.Semaphore(self.concurrency)

        async def fetch_one(repo: RepositoryRef) -> Optional[Collection]:
            async with semaphore:
                try:
                    validate_repository(repo)
                    return await self._fetch_collection(
                        repo, parse_options_for(repo), stale=stale.get(repo)
                    )
                except Exception as exc:
                    logger.warning("Failed to get collection repo=%s: %s", repo, exc)
                    return None

        fetched = await asyncio.gather(*(fetch_one(repo) for repo in missing))
        results.extend(collection for collection in fetched if collection is not None)
        return results

    async def list_categories(
        self, repo: RepositoryRef, options: Optional[ParseOptions] = None
    ) -> List[Category]:
        collection = await self.get_collection(repo, options)
        return collection.categories

    async def list_projects(
        self,
        repo: RepositoryRef,
        category_name: str,
        options: Optional[ParseOptions] = None,
    ) -> List[Project]:
        collection = await self.get_collection(repo, options)
        category = collection.find_category(category_name)
        if category is None:
            return []
        return category.projects

    # ------------------------------------------------------------------
    # Project stats
    # ------------------------------------------------------------------

    async def get_project_stats(self, repo: RepositoryRef) -> ProjectStats:
        repo = validate_repository(repo)
        try:
            stored = await self.store.get_project_stats(repo)
        except DATABASE_ERRORS as exc:
            logger.warning("Failed to query datastore for stats repo=%s: %s", repo, exc)
            stored = None

        if stored is not None:
            if is_fresh(stored.updated_at, self.stats_ttl):
                return stored
            logger.info(
                "Project stats stale; refetching from GitHub repo=%s updated_at=%s",
                repo,
                stored.updated_at,
            )

        try:
            counters = await self.github.get_repository_stats(repo)
        except GithubError as exc:
            if stored is not None:
                logger.warning(
                    "GitHub stats fetch failed; not serving stale stats repo=%s age=%s: %s",
                    repo,
                    utc_now() - ensure_aware_utc(stored.updated_at),
                    exc,
                )
            raise

        try:
            return await self.store.upsert_project_stats(
                repo, counters["stargazers_count"], counters["open_issue_count"]
            )
        except PersistenceError as exc:
            logger.warning("Failed to upsert project stats repo=%s: %s", repo, exc)
            return ProjectStats(
                stargazers_count=counters["stargazers_count"],
                open_issue_count=counters["open_issue_count"],
                updated_at=utc_now(),
            )
