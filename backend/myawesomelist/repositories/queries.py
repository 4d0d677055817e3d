"""
SQL text and query builders.

Static statements are module constants. The two dynamic statements (bulk
collection lookup and project search) are rendered by pure functions that
return ``(sql, args)``: only the shape of the query (how many filter triples,
whether to order by vector distance) varies, every value is a bound ``$n``
parameter.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

from myawesomelist.entities.repository import RepositoryRef
from myawesomelist.services.exceptions import QueryBuildError

DEFAULT_SEARCH_LIMIT = 50

# ---------------------------------------------------------------------------
# Identity store
# ---------------------------------------------------------------------------

UPSERT_REPOSITORIES_QUERY = " ".join(
    [
        "INSERT INTO repositories (hostname, owner, repo)",
        "SELECT * FROM unnest($1::text[], $2::text[], $3::text[])",
        "ON CONFLICT (hostname, owner, repo)",
        "DO UPDATE SET updated_at = NOW()",
        "RETURNING id, hostname, owner, repo, updated_at",
    ]
)

REPO_ID_QUERY = " ".join(
    [
        "SELECT id FROM repositories",
        "WHERE hostname = $1 AND owner = $2 AND repo = $3",
    ]
)

# ---------------------------------------------------------------------------
# Collections / categories / projects
# ---------------------------------------------------------------------------

UPSERT_COLLECTION_QUERY = " ".join(
    [
        "INSERT INTO collections (repository_id, language)",
        "VALUES ($1, $2)",
        "ON CONFLICT (repository_id)",
        "DO UPDATE SET language = EXCLUDED.language, updated_at = NOW()",
        "RETURNING id",
    ]
)

UPSERT_CATEGORIES_QUERY = " ".join(
    [
        "INSERT INTO categories (collection_id, name)",
        "SELECT $1, name FROM unnest($2::text[]) AS name",
        "ON CONFLICT (collection_id, name)",
        "DO UPDATE SET updated_at = NOW()",
        "RETURNING id, name",
    ]
)

UPSERT_PROJECTS_QUERY = " ".join(
    [
        "INSERT INTO projects (category_id, repository_id, name, description)",
        "SELECT * FROM unnest($1::bigint[], $2::bigint[], $3::text[], $4::text[])",
        "ON CONFLICT (category_id, repository_id)",
        "DO UPDATE SET name = EXCLUDED.name, description = EXCLUDED.description,",
        "updated_at = NOW()",
        "RETURNING id, category_id, repository_id",
    ]
)

COLLECTION_BY_REPO_QUERY = " ".join(
    [
        "SELECT c.id, c.repository_id, c.language, c.updated_at,",
        "r.hostname, r.owner, r.repo",
        "FROM collections c JOIN repositories r ON r.id = c.repository_id",
        "WHERE r.hostname = $1 AND r.owner = $2 AND r.repo = $3",
    ]
)

CATEGORIES_BY_COLLECTION_IDS_QUERY = " ".join(
    [
        "SELECT id, collection_id, name, updated_at",
        "FROM categories",
        "WHERE collection_id = ANY($1::bigint[])",
        "ORDER BY id",
    ]
)

PROJECTS_BY_CATEGORY_IDS_QUERY = " ".join(
    [
        "SELECT p.id, p.category_id, p.repository_id, p.name, p.description,",
        "p.updated_at, r.hostname, r.owner, r.repo",
        "FROM projects p JOIN repositories r ON r.id = p.repository_id",
        "WHERE p.category_id = ANY($1::bigint[])",
        "ORDER BY p.id",
    ]
)

DELETE_CATEGORIES_EXCEPT_QUERY = " ".join(
    [
        "DELETE FROM categories",
        "WHERE collection_id = $1 AND NOT (name = ANY($2::text[]))",
    ]
)

DELETE_PROJECTS_EXCEPT_QUERY = " ".join(
    [
        "DELETE FROM projects",
        "WHERE category_id = $1 AND NOT (repository_id = ANY($2::bigint[]))",
    ]
)

# ---------------------------------------------------------------------------
# Stats, metadata, embeddings
# ---------------------------------------------------------------------------

UPSERT_PROJECT_STATS_QUERY = " ".join(
    [
        "INSERT INTO project_stats (repository_id, stargazers_count, open_issue_count)",
        "VALUES ($1, $2, $3)",
        "ON CONFLICT (repository_id)",
        "DO UPDATE SET stargazers_count = EXCLUDED.stargazers_count,",
        "open_issue_count = EXCLUDED.open_issue_count, updated_at = NOW()",
        "RETURNING id, repository_id, stargazers_count, open_issue_count, updated_at",
    ]
)

PROJECT_STATS_BY_REPO_QUERY = " ".join(
    [
        "SELECT s.id, s.repository_id, s.stargazers_count, s.open_issue_count,",
        "s.updated_at",
        "FROM project_stats s JOIN repositories r ON r.id = s.repository_id",
        "WHERE r.hostname = $1 AND r.owner = $2 AND r.repo = $3",
    ]
)

UPSERT_PROJECT_METADATA_QUERY = " ".join(
    [
        "INSERT INTO project_metadata (repository_id, readme)",
        "VALUES ($1, $2)",
        "ON CONFLICT (repository_id)",
        "DO UPDATE SET readme = EXCLUDED.readme, updated_at = NOW()",
    ]
)

UPSERT_PROJECT_EMBEDDING_QUERY = " ".join(
    [
        "INSERT INTO project_embeddings (project_id, embedding)",
        "VALUES ($1, $2)",
        "ON CONFLICT (project_id)",
        "DO UPDATE SET embedding = EXCLUDED.embedding, updated_at = NOW()",
    ]
)

STALE_PROJECT_EMBEDDINGS_QUERY = " ".join(
    [
        "SELECT p.id, p.category_id, p.repository_id, p.name, p.description,",
        "p.updated_at, r.hostname, r.owner, r.repo",
        "FROM projects p",
        "JOIN repositories r ON r.id = p.repository_id",
        "LEFT JOIN project_embeddings pe ON pe.project_id = p.id",
        "WHERE pe.updated_at IS NULL",
        "OR ($1::double precision >= 0",
        "AND EXTRACT(EPOCH FROM NOW() - pe.updated_at) > $1::double precision)",
        "ORDER BY p.id",
    ]
)

_LIST_COLLECTIONS_SELECT = " ".join(
    [
        "SELECT c.id, c.repository_id, c.language, c.updated_at,",
        "r.hostname, r.owner, r.repo",
        "FROM collections c",
        "JOIN repositories r ON r.id = c.repository_id",
    ]
)

_SEARCH_PROJECTS_SELECT = " ".join(
    [
        "SELECT p.id, p.name, p.description, p.updated_at,",
        "r.hostname, r.owner, r.repo",
        "FROM projects p",
        "JOIN repositories r ON r.id = p.repository_id",
    ]
)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def render_repository_args(repos: Sequence[RepositoryRef]) -> List[Any]:
    """Flatten filter repositories into (hostname, owner, repo) triples."""
    args: List[Any] = []
    for i, ref in enumerate(repos):
        if ref is None or not ref.is_complete():
            raise QueryBuildError(
                f"repository filter {i} must have hostname, owner and repo"
            )
        args.extend([ref.hostname, ref.owner, ref.repo])
    return args


def render_repository_filter(count: int, start: int = 1) -> str:
    """
    OR of ``(r.hostname = $i AND r.owner = $i+1 AND r.repo = $i+2)`` groups.

    Returns an empty string for ``count == 0`` (no restriction).
    """
    if count < 0:
        raise QueryBuildError("filter count must not be negative")
    if start < 1:
        raise QueryBuildError("placeholder indices start at 1")
    groups = []
    for i in range(count):
        base = start + i * 3
        groups.append(
            f"(r.hostname = ${base} AND r.owner = ${base + 1} AND r.repo = ${base + 2})"
        )
    return " OR ".join(groups)


def render_list_collections_query(
    repos: Sequence[RepositoryRef],
) -> Tuple[str, List[Any]]:
    """Bulk lookup of stored collections for ``repos`` (all when empty)."""
    args = render_repository_args(repos)
    sql = _LIST_COLLECTIONS_SELECT
    if repos:
        sql = f"{sql} WHERE {render_repository_filter(len(repos))}"
    return sql, args


def normalize_limit(limit: Optional[int]) -> int:
    if limit is None or limit <= 0:
        return DEFAULT_SEARCH_LIMIT
    return int(limit)


def render_search_projects_query(
    repos: Sequence[RepositoryRef],
    embedding: Optional[Sequence[float]],
    limit: Optional[int],
) -> Tuple[str, List[Any]]:
    """
    Build the project search statement.

    Placeholders: ``$1..$3N`` for N filter triples, then the embedding
    (only when given), then the limit. With an embedding, rows are ordered
    by L2 distance to it (nearest first) and projects without an embedding
    are excluded; without one, most recently updated projects come first.
    """
    args = render_repository_args(repos)
    parts = [_SEARCH_PROJECTS_SELECT]

    if embedding is not None:
        parts.append("JOIN project_embeddings pe ON pe.project_id = p.id")

    if repos:
        parts.append(f"WHERE {render_repository_filter(len(repos))}")

    if embedding is not None:
        if len(embedding) == 0:
            raise QueryBuildError("embedding must not be empty")
        args.append(embedding)
        parts.append(f"ORDER BY pe.embedding <-> ${len(args)}")
    else:
        parts.append("ORDER BY p.updated_at DESC, p.id DESC")

    args.append(normalize_limit(limit))
    parts.append(f"LIMIT ${len(args)}")

    return " ".join(parts), args
