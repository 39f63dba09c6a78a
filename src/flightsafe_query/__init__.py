"""Multi-tenant list query engine for aviation safety records.

Turns untrusted query parameters into tenant-scoped, paginated store
queries and resolves ``id`` / ``tag.<field>:<value>`` path tokens.
"""

from __future__ import annotations

from .core.exceptions import (
    FlightsafeQueryError,
    InvalidFilterError,
    InvalidIdentifierError,
    InvalidSortError,
    ListQueryParseError,
    NotFoundError,
    RecordNotFoundError,
    StoreUnavailableError,
    TenantScopeError,
    ValidationError,
    is_client_error,
)
from .core.page import Page, PageMeta
from .engine import QueryEngine, build_mongo_engine
from .filtering import (
    DynamicFilterParser,
    FilterDefinition,
    FilterRegistry,
    IdentifierResolver,
    ListQuery,
    ListQuerySettings,
    QueryModifierParser,
    SortDirection,
    SortField,
    TagField,
    ValueType,
)
from .persistence import InMemoryRecordStore, MongoRecordStore, ScopedRepository

__all__ = [
    "DynamicFilterParser",
    "FilterDefinition",
    "FilterRegistry",
    "FlightsafeQueryError",
    "IdentifierResolver",
    "InMemoryRecordStore",
    "InvalidFilterError",
    "InvalidIdentifierError",
    "InvalidSortError",
    "ListQuery",
    "ListQueryParseError",
    "ListQuerySettings",
    "MongoRecordStore",
    "NotFoundError",
    "Page",
    "PageMeta",
    "QueryEngine",
    "QueryModifierParser",
    "RecordNotFoundError",
    "ScopedRepository",
    "SortDirection",
    "SortField",
    "StoreUnavailableError",
    "TagField",
    "TenantScopeError",
    "ValidationError",
    "ValueType",
    "build_mongo_engine",
    "is_client_error",
]
