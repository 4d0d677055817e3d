"""
Repository Entity - Identity of a source code repository.

A repository is identified by its (hostname, owner, repo) triple. Every
other table references repositories through their surrogate id.
"""

from pydantic import BaseModel, ConfigDict, Field

from myawesomelist.entities.base import BaseEntity

GITHUB_HOSTNAME = "github.com"


class RepositoryRef(BaseModel):
    """Natural key of a repository. Hashable so it can key dicts and sets."""

    model_config = ConfigDict(frozen=True)

    hostname: str = Field(default=GITHUB_HOSTNAME, description="e.g. github.com")
    owner: str = Field(default="", description="User or organization")
    repo: str = Field(default="", description="Repository name")

    @property
    def key(self) -> str:
        return f"{self.hostname}/{self.owner}/{self.repo}"

    def is_complete(self) -> bool:
        return bool(self.hostname and self.owner and self.repo)

    def __str__(self) -> str:
        return self.key


class Repository(BaseEntity):
    """Persisted repository row."""

    hostname: str
    owner: str
    repo: str

    @property
    def ref(self) -> RepositoryRef:
        return RepositoryRef(hostname=self.hostname, owner=self.owner, repo=self.repo)
