"""Request-level and infrastructure exceptions for flightsafe-query."""

from __future__ import annotations

from typing import Any


class FlightsafeQueryError(Exception):
    """Root exception for the entire list query engine."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class ValidationError(FlightsafeQueryError):
    """Raised when request input cannot be turned into a valid query.

    Carries structured errors: ``{field: [messages]}``.
    """

    code = "VALIDATION_ERROR"

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors))

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "errors": self.errors,
        }


class ListQueryParseError(ValidationError):
    """Raised when pagination or sort syntax is malformed beyond recovery."""

    code = "LIST_QUERY_PARSE_ERROR"


class InvalidFilterError(ValidationError):
    """Raised for an unknown filter key or a value that fails coercion."""

    code = "INVALID_FILTER"

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        self.message = message
        super().__init__({key: [message]})

    def __str__(self) -> str:
        return f"{self.key}: {self.message}"


class InvalidSortError(InvalidFilterError):
    """Raised when a sort field is not in the entity's sortable allow-list."""

    code = "INVALID_SORT"


class InvalidIdentifierError(ValidationError):
    """Raised when a tag identifier names a field outside the allow-list."""

    code = "INVALID_IDENTIFIER"

    def __init__(self, token: str, field: str, allowed: list[str]) -> None:
        self.token = token
        self.field = field
        self.allowed = allowed
        super().__init__(
            {
                "id": [
                    f"Tag field {field!r} is not allowed; "
                    f"expected one of: {', '.join(sorted(allowed)) or '<none>'}"
                ]
            }
        )


class TenantScopeError(ValidationError):
    """Raised when the tenant scope is missing or contradictory."""

    code = "TENANT_SCOPE_ERROR"


class NotFoundError(FlightsafeQueryError):
    """Base class for lookups that matched nothing inside tenant scope."""


class RecordNotFoundError(NotFoundError):
    """Raised when a single-record lookup yields zero matches."""

    def __init__(self, entity: str, token: object) -> None:
        self.entity = entity
        self.token = token
        super().__init__(f"{entity} with id={token!r} not found")


class InfrastructureError(FlightsafeQueryError):
    """Base class for all infrastructure-related errors."""


class PersistenceError(InfrastructureError):
    """Base class for all persistence-related errors."""


class StoreUnavailableError(PersistenceError):
    """Raised when the record store cannot be reached or timed out.

    Retryable from the caller's point of view; never retried here.
    """


def is_client_error(exc: BaseException) -> bool:
    """Return True when *exc* should be presented as a 4xx response."""
    return isinstance(exc, (ValidationError, NotFoundError))
