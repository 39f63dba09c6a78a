"""MongoDB persistence exceptions."""

from __future__ import annotations

from ..core.exceptions import PersistenceError, StoreUnavailableError


class MongoPersistenceError(PersistenceError):
    """Base for MongoDB persistence errors."""


class MongoConnectionError(MongoPersistenceError, StoreUnavailableError):
    """Raised when connection to MongoDB fails."""


class MongoQueryError(MongoPersistenceError):
    """Raised when a query or compilation fails."""
