"""QueryStringBuilder — ListQuery -> query string (pagination links)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from .query import ListQuerySettings

if TYPE_CHECKING:
    from ..core.page import PageMeta
    from .query import ListQuery


class QueryStringBuilder:
    """Re-encode a ListQuery so clients can follow next/previous links.

    Filters are emitted as given; the tenant never appears in the output.
    """

    def __init__(self, settings: ListQuerySettings | None = None) -> None:
        self._settings = settings or ListQuerySettings()

    def build(self, query: ListQuery, *, page: int | None = None) -> str:
        s = self._settings
        params: list[tuple[str, Any]] = [
            (s.page_key, page if page is not None else query.page),
            (s.page_size_key, query.page_size),
        ]
        if query.sort:
            params.append((s.sort_key, ",".join(f.to_token() for f in query.sort)))
        for key in sorted(query.raw_filters):
            value = query.raw_filters[key]
            if isinstance(value, (list, tuple)):
                params.extend((key, item) for item in value)
            else:
                params.append((key, value))
        return urlencode(params)

    def links(self, query: ListQuery, meta: PageMeta) -> dict[str, str | None]:
        """Return ``self``/``next``/``prev`` query strings for a page."""
        return {
            "self": self.build(query),
            "next": self.build(query, page=meta.page + 1)
            if meta.page < meta.total_pages
            else None,
            "prev": self.build(query, page=meta.page - 1) if meta.page > 1 else None,
        }
