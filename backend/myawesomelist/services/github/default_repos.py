"""Built-in awesome lists and how to parse each of them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from myawesomelist.encoding import ParseOptions
from myawesomelist.entities.repository import RepositoryRef


@dataclass(frozen=True)
class DefaultRepo:
    repo: RepositoryRef
    options: ParseOptions = field(default_factory=ParseOptions)


DEFAULT_REPOS: List[DefaultRepo] = [
    DefaultRepo(
        repo=RepositoryRef(owner="avelino", repo="awesome-go"),
        options=ParseOptions(start_section="Actor Model", subsection_as_category=True),
    ),
    DefaultRepo(
        repo=RepositoryRef(owner="h4cc", repo="awesome-elixir"),
        options=ParseOptions(start_section="Actors"),
    ),
    DefaultRepo(
        repo=RepositoryRef(owner="sorrycc", repo="awesome-javascript"),
        options=ParseOptions(
            start_section="Package Managers", end_section="Worth Reading"
        ),
    ),
    DefaultRepo(
        repo=RepositoryRef(owner="gostor", repo="awesome-go-storage"),
        options=ParseOptions(start_section="Storage Server"),
    ),
]

_OPTIONS_BY_REF: Dict[RepositoryRef, ParseOptions] = {
    default.repo: default.options for default in DEFAULT_REPOS
}


def default_refs() -> List[RepositoryRef]:
    return [default.repo for default in DEFAULT_REPOS]


def parse_options_for(repo: RepositoryRef) -> ParseOptions:
    """Parse options registered for ``repo``, or the defaults."""
    return _OPTIONS_BY_REF.get(repo, ParseOptions())
