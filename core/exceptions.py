"""Custom exceptions for the legal citation engine."""

from typing import Any


class CitationEngineException(Exception):
    """Base exception for the citation engine."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(CitationEngineException):
    """Raised when settings fail validation."""

    pass


class DatabaseConnectionError(CitationEngineException):
    """Raised when a store client cannot be created."""

    pass


class GraphStoreError(DatabaseConnectionError):
    """Raised when the Neo4j driver cannot be initialized."""

    pass


class SearchIndexError(DatabaseConnectionError):
    """Raised when the Qdrant client cannot be initialized."""

    pass


class QueryPlanError(CitationEngineException):
    """Raised when a relation descriptor cannot be turned into a query."""

    pass


class UnknownRelationError(CitationEngineException):
    """Raised when a relation name is not registered."""

    pass
