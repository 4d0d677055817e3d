"""
Awesome-list README decoder.

Turns the markdown of an "awesome-X" README into a Collection: the level-1
"Awesome X" title gives the language, level-2 headings (optionally level-3)
give categories, and each list item's link gives a project.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
from urllib.parse import urlsplit

from markdown_it import MarkdownIt
from markdown_it.token import Token

from myawesomelist.entities.collection import Category, Collection, Project
from myawesomelist.entities.repository import GITHUB_HOSTNAME, RepositoryRef
from myawesomelist.services.exceptions import CollectionDecodeError

logger = logging.getLogger(__name__)

DESCRIPTION_SEPARATOR = " - "
SUBSECTION_SEPARATOR = " - "

_TEXT_TOKENS = {"text", "code_inline"}


@dataclass(frozen=True)
class ParseOptions:
    """Where categories start and stop, and whether H3s are categories."""

    start_section: Optional[str] = None
    end_section: Optional[str] = None
    subsection_as_category: bool = False


def _parser() -> MarkdownIt:
    return MarkdownIt("commonmark")


def inline_text(children: Optional[Sequence[Token]]) -> str:
    """Plain text of an inline token's children (markup dropped)."""
    if not children:
        return ""
    parts = []
    for child in children:
        if child.type in _TEXT_TOKENS:
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
    return "".join(parts)


def parse_repository_url(href: str) -> Optional[RepositoryRef]:
    """
    Map a link target to a repository.

    ``https://host/owner/repo/...`` keeps its host; a relative
    ``owner/repo`` path is assumed to live on GitHub. Anything without both
    an owner and a repo is not a repository link.
    """
    try:
        parts = urlsplit(href.strip())
    except ValueError:
        return None
    segments = [s for s in parts.path.strip("/").split("/") if s]
    if len(segments) < 2:
        return None
    hostname = (parts.hostname or "").lower()
    if not hostname:
        if parts.scheme:
            return None
        hostname = GITHUB_HOSTNAME
    return RepositoryRef(hostname=hostname, owner=segments[0], repo=segments[1])


def decode_project(inline: Token) -> Optional[Project]:
    """Build a project from a list item's inline token, or None if it has no link."""
    children = inline.children or []
    name_parts: List[str] = []
    href: Optional[str] = None
    after: List[Token] = []
    state = "before"
    for child in children:
        if state == "before":
            if child.type == "link_open":
                href = str(child.attrGet("href") or "")
                state = "link"
        elif state == "link":
            if child.type == "link_close":
                state = "after"
            elif child.type in _TEXT_TOKENS:
                name_parts.append(child.content)
        else:
            after.append(child)

    name = "".join(name_parts).strip()
    if href is None or not name:
        return None

    description = ""
    trailing = inline_text(after)
    if DESCRIPTION_SEPARATOR in trailing:
        description = trailing.split(DESCRIPTION_SEPARATOR, 1)[1].strip()

    return Project(
        name=name,
        description=description,
        repo=parse_repository_url(href),
    )


def _list_item_inline(tokens: Sequence[Token], start: int) -> Optional[Token]:
    """First inline token that belongs directly to the list item opened at ``start``."""
    item_level = tokens[start].level
    for token in tokens[start + 1 :]:
        if token.type == "list_item_close" and token.level == item_level:
            return None
        if token.type in ("bullet_list_open", "ordered_list_open"):
            return None
        if token.type == "inline":
            return token
    return None


def decode_collection(
    content: str | bytes,
    options: Optional[ParseOptions] = None,
    repo: Optional[RepositoryRef] = None,
) -> Collection:
    """
    Decode README markdown into a Collection owned by ``repo``.

    Raises:
        CollectionDecodeError: the start section never appears, or the
            content is not valid UTF-8.
    """
    options = options or ParseOptions()
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CollectionDecodeError(f"README is not valid UTF-8: {exc}") from exc

    tokens = _parser().parse(content)

    language = ""
    found_title = False
    found_start = not options.start_section
    main_category = ""
    category = ""
    categories: Dict[str, Category] = {}

    i = 0
    while i < len(tokens):
        token = tokens[i]

        if token.type == "heading_open":
            heading = inline_text(tokens[i + 1].children).strip()
            if (
                token.tag == "h1"
                and not found_title
                and heading.lower().startswith("awesome ")
            ):
                language = " ".join(heading.split()[1:])
                found_title = True
            elif token.tag == "h2":
                if (
                    options.end_section
                    and found_start
                    and options.end_section in heading
                ):
                    break
                if options.start_section and options.start_section in heading:
                    found_start = True
                if found_start:
                    main_category = heading
                    category = heading
            elif (
                token.tag == "h3"
                and options.subsection_as_category
                and found_start
                and main_category
            ):
                category = f"{main_category}{SUBSECTION_SEPARATOR}{heading}"
            i += 3
            continue

        if token.type == "list_item_open" and found_start and category:
            inline = _list_item_inline(tokens, i)
            if inline is not None:
                project = decode_project(inline)
                if project is not None:
                    categories.setdefault(
                        category, Category(name=category)
                    ).projects.append(project)

        i += 1

    if not found_start:
        raise CollectionDecodeError(
            f"{options.start_section} section not found in the document"
        )

    logger.debug(
        "Decoded collection language=%r categories=%d", language, len(categories)
    )
    return Collection(
        repo=repo or RepositoryRef(),
        language=language,
        categories=list(categories.values()),
    )
