"""QueryEngine — the in-process entry points request handlers call."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from .core.exceptions import is_client_error
from .entities.catalog import CATALOG
from .filtering.compiler import DynamicFilterParser
from .filtering.identifiers import IdentifierResolver
from .filtering.injector import TenantScopeInjector
from .filtering.modifiers import QueryModifierParser
from .filtering.query import ListQuerySettings
from .persistence.mongo_store import MongoRecordStore
from .persistence.repository import ScopedRepository
from .specifications.operators_memory import build_default_registry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Iterable

    from .core.page import Page
    from .filtering.query import ListQuery
    from .filtering.registry import FilterRegistry
    from .persistence.connection import MongoConnectionManager

logger = logging.getLogger("flightsafe_query.engine")


class QueryEngine:
    """Dispatch list and lookup requests to the entity's repository.

    Repositories are looked up by the :class:`FilterRegistry` identity the
    handler passes in, so a handler can only reach entities that were
    registered at startup.
    """

    def __init__(
        self,
        repositories: Iterable[ScopedRepository[Any]],
        *,
        settings: ListQuerySettings | None = None,
    ) -> None:
        self._parser = QueryModifierParser(settings)
        self._repositories: dict[str, ScopedRepository[Any]] = {}
        for repository in repositories:
            if repository.entity in self._repositories:
                raise ValueError(f"Duplicate repository for {repository.entity!r}")
            self._repositories[repository.entity] = repository

    def repository(self, filters: FilterRegistry) -> ScopedRepository[Any]:
        repository = self._repositories.get(filters.entity)
        if repository is None or repository.filters is not filters:
            raise KeyError(f"No repository registered for {filters.entity!r}")
        return repository

    def parse_list_query(self, raw_params: Any, tenant_id: str | None) -> ListQuery:
        return self._parser.parse(raw_params, tenant_id)

    async def find_with_params(
        self, filters: FilterRegistry, list_query: ListQuery
    ) -> Page[Any]:
        repository = self.repository(filters)
        return await self._timed(
            f"list {filters.entity}",
            repository.find_with_params(list_query),
        )

    async def resolve_one(
        self, filters: FilterRegistry, token: str, tenant_id: str
    ) -> Any | None:
        repository = self.repository(filters)
        return await self._timed(
            f"resolve {filters.entity}",
            repository.resolve_one(token, tenant_id),
        )

    async def _timed(self, label: str, awaitable: Awaitable[Any]) -> Any:
        start = time.perf_counter()
        try:
            result = await awaitable
        except Exception as e:
            elapsed = (time.perf_counter() - start) * 1000
            if is_client_error(e):
                logger.info("%s rejected after %.2fms: %s", label, elapsed, e)
            else:
                logger.exception("%s failed after %.2fms", label, elapsed)
            raise
        elapsed = (time.perf_counter() - start) * 1000
        logger.info("%s completed in %.2fms", label, elapsed)
        return result


def build_mongo_engine(
    connection: MongoConnectionManager,
    database: str | None = None,
    *,
    settings: ListQuerySettings | None = None,
    query_timeout: float | None = None,
) -> QueryEngine:
    """Wire every catalog entity to its MongoDB collection."""
    settings = settings or ListQuerySettings()
    operators = build_default_registry()
    compiler = DynamicFilterParser(operators)
    injector = TenantScopeInjector(operators)
    resolver = IdentifierResolver(operators, injector)
    repositories = [
        ScopedRepository(
            MongoRecordStore(
                connection,
                binding.collection,
                database=database,
                object_id_fields=binding.object_id_fields,
            ),
            binding.filters,
            binding.model_cls,
            compiler=compiler,
            injector=injector,
            resolver=resolver,
            query_timeout=query_timeout,
            max_page_size=settings.max_page_size,
        )
        for binding in CATALOG.values()
    ]
    return QueryEngine(repositories, settings=settings)
