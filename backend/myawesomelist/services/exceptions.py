"""Exceptions for the collection, embedding and search services."""

from __future__ import annotations


class AwesomeError(Exception):
    """Base exception for service failures."""


class InvalidArgumentError(AwesomeError):
    """Raised when a request is malformed."""


class UnsupportedHostnameError(InvalidArgumentError):
    """Raised when a repository is hosted somewhere we cannot fetch from."""

    def __init__(self, hostname: str):
        super().__init__(f"hostname is not supported: {hostname!r}")
        self.hostname = hostname


class CollectionDecodeError(AwesomeError):
    """Raised when a README cannot be turned into a collection."""


class PersistenceError(AwesomeError):
    """Raised when a database write fails."""


class QueryBuildError(InvalidArgumentError):
    """Raised when query parameters cannot be rendered."""


class EmbeddingError(AwesomeError):
    """Raised when the embedding generator fails."""


class EmbeddingConfigurationError(EmbeddingError):
    """Raised when no embedding generator is configured."""
