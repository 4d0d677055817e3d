"""
Collection Entities - The parsed hierarchy of an awesome list.

A Collection belongs to exactly one repository (the one hosting the README),
holds Categories, and each Category holds Projects. A Project links to its
own repository, distinct from the collection's owning repository.
"""

from typing import List, Optional

from pydantic import Field

from myawesomelist.entities.base import BaseEntity
from myawesomelist.entities.repository import RepositoryRef


class Project(BaseEntity):
    """A list entry: one linked repository inside a category."""

    name: str = Field(..., description="Link text of the list item")
    description: str = Field(default="", description="Text after the ' - ' separator")
    repo: Optional[RepositoryRef] = Field(
        default=None,
        description="Linked repository. None for links that are not repositories.",
    )

    @property
    def embedding_text(self) -> str:
        return f"{self.name} {self.description}"


class Category(BaseEntity):
    """A section of the list (level-2 heading, optionally with level-3)."""

    name: str
    projects: List[Project] = Field(default_factory=list)


class Collection(BaseEntity):
    """The set of categories parsed from one repository's README."""

    repo: RepositoryRef
    language: str = Field(default="", description="From the 'Awesome X' title")
    categories: List[Category] = Field(default_factory=list)

    def find_category(self, name: str) -> Optional[Category]:
        for category in self.categories:
            if category.name == name:
                return category
        return None
