"""
Page — one window of a tenant-scoped listing plus its pagination metadata.

``meta.total_count`` is computed over the whole scoped filter, independent
of the window, so it stays accurate on the last partial page.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PageMeta:
    page: int
    page_size: int
    total_count: int
    total_pages: int

    @classmethod
    def build(cls, *, page: int, page_size: int, total_count: int) -> PageMeta:
        total_pages = math.ceil(total_count / page_size) if total_count else 0
        return cls(
            page=page,
            page_size=page_size,
            total_count=total_count,
            total_pages=total_pages,
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "totalCount": self.total_count,
            "totalPages": self.total_pages,
        }


@dataclass(frozen=True)
class Page(Generic[T]):
    """Immutable listing result returned by ``find_with_params``."""

    meta: PageMeta
    data: list[T] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.data)

    @property
    def has_next(self) -> bool:
        return self.meta.page < self.meta.total_pages

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the ``{data, meta}`` response shape."""
        return {
            "data": [_dump(item) for item in self.data],
            "meta": self.meta.to_dict(),
        }


def _dump(item: Any) -> Any:
    if hasattr(item, "model_dump"):
        return item.model_dump(mode="json")
    return item
