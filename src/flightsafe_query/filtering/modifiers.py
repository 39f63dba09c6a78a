"""QueryModifierParser — raw request parameters -> ListQuery."""

from __future__ import annotations

import logging
import re
from typing import Any

from ..core.exceptions import ListQueryParseError, TenantScopeError
from .query import ListQuery, ListQuerySettings, SortField

logger = logging.getLogger("flightsafe_query.filtering.modifiers")

_SORT_TOKEN_RE = re.compile(r"^-?[A-Za-z_][\w.]*$", re.ASCII)


class QueryModifierParser:
    """Parse page, pageSize and sort; everything else is a candidate filter.

    The parser has no entity knowledge: sort fields and filter keys are
    checked later against the entity's :class:`FilterRegistry`.
    """

    def __init__(self, settings: ListQuerySettings | None = None) -> None:
        self._settings = settings or ListQuerySettings()

    @property
    def settings(self) -> ListQuerySettings:
        return self._settings

    def parse(self, raw_params: Any, tenant_id: str | None) -> ListQuery:
        """Return a normalised :class:`ListQuery`.

        Raises:
            TenantScopeError: *tenant_id* is missing or blank.
            ListQueryParseError: a sort segment is not a field path.
        """
        if tenant_id is None or not str(tenant_id).strip():
            raise TenantScopeError("Tenant context is required")
        params = self._collect(raw_params)
        s = self._settings
        page = self._page(params.get(s.page_key))
        page_size = self._page_size(params.get(s.page_size_key))
        sort = self._parse_sort(params.get(s.sort_key))
        raw_filters = {k: v for k, v in params.items() if k not in s.reserved_keys}
        return ListQuery(
            tenant_id=str(tenant_id),
            page=page,
            page_size=page_size,
            sort=sort,
            raw_filters=raw_filters,
        )

    def _collect(self, raw_params: Any) -> dict[str, Any]:
        """Flatten a mapping or multi-dict; repeated keys become lists."""
        if raw_params is None:
            return {}
        if hasattr(raw_params, "multi_items"):
            out: dict[str, Any] = {}
            for key, value in raw_params.multi_items():
                if key in out:
                    existing = out[key]
                    if isinstance(existing, list):
                        existing.append(value)
                    else:
                        out[key] = [existing, value]
                else:
                    out[key] = value
            return out
        return dict(raw_params)

    def _page(self, raw: Any) -> int:
        value = self._int_param(raw)
        if value is None or value < 1:
            if raw is not None:
                logger.debug("Normalised page %r to 1", raw)
            return 1
        return value

    def _page_size(self, raw: Any) -> int:
        s = self._settings
        value = self._int_param(raw)
        if value is None or value < 1:
            return s.default_page_size
        if value > s.max_page_size:
            logger.debug("Clamped page size %d to %d", value, s.max_page_size)
            return s.max_page_size
        return value

    def _int_param(self, v: Any) -> int | None:
        if isinstance(v, list):
            v = v[-1] if v else None
        if v is None or isinstance(v, bool):
            return None
        try:
            return int(str(v).strip())
        except (TypeError, ValueError):
            return None

    def _parse_sort(self, raw: Any) -> tuple[SortField, ...]:
        if not raw:
            return ()
        if isinstance(raw, list):
            raw = ",".join(str(item) for item in raw)
        if not isinstance(raw, str):
            raise ListQueryParseError({self._settings.sort_key: ["must be a string"]})
        out: list[SortField] = []
        for part in raw.split(","):
            stripped = part.strip()
            if not stripped:
                continue
            if not _SORT_TOKEN_RE.match(stripped):
                raise ListQueryParseError(
                    {self._settings.sort_key: [f"invalid sort segment {stripped!r}"]}
                )
            out.append(SortField.parse(stripped))
        return tuple(out)
