from .exceptions import (
    FlightsafeQueryError,
    InfrastructureError,
    InvalidFilterError,
    InvalidIdentifierError,
    InvalidSortError,
    ListQueryParseError,
    NotFoundError,
    PersistenceError,
    RecordNotFoundError,
    StoreUnavailableError,
    TenantScopeError,
    ValidationError,
    is_client_error,
)
from .page import Page, PageMeta
from .ports import IRecordStore

__all__ = [
    "FlightsafeQueryError",
    "InfrastructureError",
    "InvalidFilterError",
    "InvalidIdentifierError",
    "InvalidSortError",
    "IRecordStore",
    "ListQueryParseError",
    "NotFoundError",
    "Page",
    "PageMeta",
    "PersistenceError",
    "RecordNotFoundError",
    "StoreUnavailableError",
    "TenantScopeError",
    "ValidationError",
    "is_client_error",
]
