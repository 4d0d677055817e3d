"""Markdown decoding of awesome-list READMEs"""

from .awesome_markdown import ParseOptions, decode_collection, parse_repository_url

__all__ = ["ParseOptions", "decode_collection", "parse_repository_url"]
