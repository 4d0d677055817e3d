"""ProjectStats Entity - GitHub counters cached per repository."""

from typing import Optional

from pydantic import Field

from myawesomelist.entities.base import BaseEntity


class ProjectStats(BaseEntity):
    """Stars and open issues for one repository. TTL'd independently."""

    repository_id: Optional[int] = None
    stargazers_count: Optional[int] = Field(default=None, ge=0)
    open_issue_count: Optional[int] = Field(default=None, ge=0)
