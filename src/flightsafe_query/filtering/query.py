"""
ListQuery — the canonical, immutable form of a list request.

``ListQuery`` carries *what* the caller asked for (pagination window, sort,
raw filters); it is not validated against any entity until the filter
compiler sees it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any

from ..core.exceptions import ListQueryParseError


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortField:
    field: str
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def parse(cls, token: str) -> SortField:
        """Build from ``field`` or ``-field``."""
        if token.startswith("-"):
            return cls(token[1:], SortDirection.DESC)
        return cls(token, SortDirection.ASC)

    def to_token(self) -> str:
        return f"-{self.field}" if self.direction is SortDirection.DESC else self.field


@dataclass(frozen=True)
class ListQuerySettings:
    """
    Pagination policy and parameter names.

    Attributes:
        default_page_size: Page size when the caller supplies none (or garbage).
        max_page_size: Upper bound; larger requests are clamped, not rejected.
        page_key / page_size_key / sort_key: Reserved parameter names; every
            other parameter is a candidate filter.
    """

    default_page_size: int = 25
    max_page_size: int = 200
    page_key: str = "page"
    page_size_key: str = "pageSize"
    sort_key: str = "sort"

    def __post_init__(self) -> None:
        if self.default_page_size < 1 or self.max_page_size < 1:
            raise ValueError("page sizes must be positive")
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size cannot exceed max_page_size")

    @property
    def reserved_keys(self) -> frozenset[str]:
        return frozenset({self.page_key, self.page_size_key, self.sort_key})


@dataclass(frozen=True)
class ListQuery:
    """
    Immutable per-request list query.

    Attributes:
        tenant_id: Isolation boundary, taken from the authenticated principal.
        page: 1-based page number.
        page_size: Records per page. Both must be positive; the repository
            clamps page_size to its configured maximum.
        sort: Requested ordering; empty means the entity's default ordering.
        raw_filters: Unvalidated filter key → raw value mapping.
    """

    tenant_id: str
    page: int = 1
    page_size: int = 25
    sort: tuple[SortField, ...] = ()
    raw_filters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        problems = {
            name: ["must be a positive integer"]
            for name, value in (("page", self.page), ("pageSize", self.page_size))
            if not isinstance(value, int) or isinstance(value, bool) or value < 1
        }
        if problems:
            raise ListQueryParseError(problems)
        # Freeze the caller's mapping so a shared ListQuery cannot be mutated.
        object.__setattr__(
            self, "raw_filters", MappingProxyType(dict(self.raw_filters))
        )

    def clamped(self, max_page_size: int) -> ListQuery:
        """Return a copy whose page size does not exceed *max_page_size*."""
        if self.page_size <= max_page_size:
            return self
        return replace(self, page_size=max_page_size)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    def with_page(self, page: int) -> ListQuery:
        """Return a copy pointing at another page."""
        return ListQuery(
            tenant_id=self.tenant_id,
            page=max(1, page),
            page_size=self.page_size,
            sort=self.sort,
            raw_filters=dict(self.raw_filters),
        )
