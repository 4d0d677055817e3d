"""
Application configuration
"""
import re
from datetime import timedelta
from typing import Optional
from urllib.parse import quote, urlencode

from pydantic import field_validator
from pydantic_settings import BaseSettings

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_DURATION_UNITS = {"ms": 0.001, "s": 1, "m": 60, "h": 3600}


def parse_duration(value) -> timedelta:
    """
    Parse a duration from seconds or a Go-style string.

    Accepts ints/floats (seconds), timedelta, "90", "-1", "24h", "1h30m",
    "500ms" and "-5m".
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    text = str(value).strip()
    if not text:
        raise ValueError("empty duration")

    try:
        return timedelta(seconds=float(text))
    except ValueError:
        pass

    sign = -1 if text.startswith("-") else 1
    body = text.lstrip("+-")
    parts = _DURATION_PART.findall(body)
    if not parts or "".join(n + u for n, u in parts) != body:
        raise ValueError(f"invalid duration: {value!r}")

    seconds = sum(float(n) * _DURATION_UNITS[u] for n, u in parts)
    return timedelta(seconds=sign * seconds)


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "myawesomelist"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "localhost"
    PORT: int = 8080

    # Database (PostgreSQL + pgvector)
    DSN: Optional[str] = None
    PGUSER: Optional[str] = None
    USER: Optional[str] = None
    PGHOST: str = "localhost"
    PGPORT: int = 5432
    PGDATABASE: str = "postgres"
    DB_POOL_MIN_SIZE: int = 1
    DB_POOL_MAX_SIZE: int = 10

    # GitHub
    GITHUB_TOKEN: Optional[str] = None
    GH_TOKEN: Optional[str] = None
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_TIMEOUT: float = 30.0

    # Cache
    COLLECTION_CACHE_TTL: timedelta = timedelta(hours=24)
    PROJECT_STATS_TTL: timedelta = timedelta(hours=6)
    PROJECT_EMBEDDINGS_TTL: timedelta = timedelta(seconds=-1)
    COLLECTION_PRUNE_ORPHANS: bool = False
    FETCH_CONCURRENCY: int = 8

    # Embeddings (OpenAI-compatible API)
    OPENAI_BASE_URL: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    EMBEDDING_MODEL: str = "text-embedding-3-small"
    EMBEDDING_DIMENSIONS: int = 1536
    EMBEDDING_RATE_LIMIT: float = 5.0
    EMBEDDING_RATE_BURST: int = 5
    EMBEDDING_BATCH_SIZE: int = 32
    EMBEDDING_SWEEP_INTERVAL: timedelta = timedelta(hours=1)

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"

    # Logging
    LOG_LEVEL: str = "info"
    LOG_FORMAT: str = "text"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @field_validator(
        "COLLECTION_CACHE_TTL",
        "PROJECT_STATS_TTL",
        "PROJECT_EMBEDDINGS_TTL",
        "EMBEDDING_SWEEP_INTERVAL",
        mode="before",
    )
    @classmethod
    def _parse_duration(cls, value):
        return parse_duration(value)

    @property
    def github_token(self) -> Optional[str]:
        return self.GITHUB_TOKEN or self.GH_TOKEN

    @property
    def addr(self) -> str:
        return f"{self.HOST}:{self.PORT}"

    def get_dsn(self) -> str:
        """Resolve the Postgres DSN, deriving it from PG* variables when unset."""
        if self.DSN:
            if "://" not in self.DSN:
                raise ValueError(
                    "invalid DSN: must be in format driver://dataSourceName"
                )
            return self.DSN

        user = self.PGUSER or self.USER or "postgres"
        if self.PGHOST.startswith("/"):
            # Unix socket directory
            query = urlencode({"host": self.PGHOST, "port": self.PGPORT})
            return f"postgresql://{quote(user)}@/{self.PGDATABASE}?{query}"
        return (
            f"postgresql://{quote(user)}@{self.PGHOST}:{self.PGPORT}"
            f"/{self.PGDATABASE}"
        )


settings = Settings()
