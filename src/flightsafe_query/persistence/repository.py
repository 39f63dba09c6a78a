"""ScopedRepository[T] — tenant-scoped listing and single-record resolution."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel

from ..core.exceptions import (
    InvalidFilterError,
    RecordNotFoundError,
    StoreUnavailableError,
    TenantScopeError,
    ValidationError,
)
from ..core.page import Page, PageMeta
from ..filtering.compiler import DynamicFilterParser
from ..filtering.identifiers import IdentifierResolver
from ..filtering.injector import TenantScopeInjector
from ..specifications.operators_memory import build_default_registry
from .mapper import RecordMapper

if TYPE_CHECKING:
    from collections.abc import Awaitable, Mapping, Sequence

    from ..core.ports import IRecordStore
    from ..filtering.query import ListQuery
    from ..filtering.registry import FilterRegistry

logger = logging.getLogger("flightsafe_query.repository")

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class BulkWriteFailure:
    index: int
    token: str
    reason: str


@dataclass(frozen=True)
class BulkWriteReport:
    """Outcome of a one-record-at-a-time batch.

    Records listed in ``succeeded`` are committed even when later ones
    failed.
    """

    succeeded: list[str] = field(default_factory=list)
    failed: list[BulkWriteFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class BulkWriteAborted(StoreUnavailableError):
    """The store failed mid-batch.

    ``report`` lists the updates committed before item ``index`` failed;
    that item and everything after it were not applied.
    """

    def __init__(self, report: BulkWriteReport, index: int, token: str) -> None:
        self.report = report
        self.index = index
        self.token = token
        super().__init__(
            f"Batch aborted at item {index} ({token!r}) after "
            f"{len(report.succeeded)} committed update(s)"
        )


class ScopedRepository(Generic[T]):
    """Read-path repository that can only see one tenant at a time.

    The tenant clause is conjoined here, never by callers: every store call
    goes through :class:`TenantScopeInjector` or :class:`IdentifierResolver`,
    and validation happens before the store is touched.

    Args:
        store: Raw-record store for the entity's collection.
        filters: The entity's :class:`FilterRegistry`.
        model_cls: Pydantic record model returned to callers.
        query_timeout: Seconds before a store round-trip is abandoned and
            reported as :class:`StoreUnavailableError`. ``None`` disables it.
        max_page_size: Largest page handed to the store; bigger requests
            are clamped.
    """

    def __init__(
        self,
        store: IRecordStore,
        filters: FilterRegistry,
        model_cls: type[T],
        *,
        compiler: DynamicFilterParser | None = None,
        injector: TenantScopeInjector | None = None,
        resolver: IdentifierResolver | None = None,
        query_timeout: float | None = None,
        id_field: str = "id",
        max_page_size: int = 200,
    ) -> None:
        operators = build_default_registry()
        self._store = store
        self._filters = filters
        self._model_cls = model_cls
        self._compiler = compiler or DynamicFilterParser(operators)
        self._injector = injector or TenantScopeInjector(operators)
        self._resolver = resolver or IdentifierResolver(operators, self._injector)
        self._query_timeout = query_timeout
        self._max_page_size = max_page_size
        self._mapper = RecordMapper(model_cls, id_field=id_field)

    @property
    def filters(self) -> FilterRegistry:
        return self._filters

    @property
    def entity(self) -> str:
        return self._filters.entity

    async def find_with_params(
        self,
        list_query: ListQuery,
        tenant_id: str | None = None,
    ) -> Page[T]:
        """Return one page of tenant-scoped records plus pagination meta.

        Raises:
            InvalidFilterError / InvalidSortError: before any store call.
            TenantScopeError: *tenant_id* contradicts ``list_query``.
            StoreUnavailableError: the store failed or timed out.
        """
        tenant = self._tenant_for(list_query, tenant_id)
        list_query = list_query.clamped(self._max_page_size)
        predicate = self._compiler.compile(self._filters, list_query.raw_filters)
        sort = self._compiler.compile_sort(self._filters, list_query.sort)
        scoped = self._injector.inject(
            predicate, tenant_field=self._filters.tenant_field, tenant_id=tenant
        )
        tasks = [
            asyncio.ensure_future(self._call(self._store.count(scoped))),
            asyncio.ensure_future(
                self._call(
                    self._store.find(scoped, sort, list_query.skip, list_query.limit)
                )
            ),
        ]
        try:
            total, docs = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise
        meta = PageMeta.build(
            page=list_query.page,
            page_size=list_query.page_size,
            total_count=total,
        )
        logger.debug(
            "%s page %d/%d (%d of %d records)",
            self.entity,
            meta.page,
            meta.total_pages,
            len(docs),
            total,
        )
        return Page(meta=meta, data=[self._mapper.from_doc(doc) for doc in docs])

    async def resolve_one(self, token: str, tenant_id: str) -> T | None:
        """Return the record addressed by an id or tag token, or ``None``."""
        lookup = self._resolver.resolve(self._filters, token, tenant_id)
        doc = await self._call(self._store.find_one(lookup))
        return self._mapper.from_doc(doc) if doc is not None else None

    async def get_one(self, token: str, tenant_id: str) -> T:
        """Like :meth:`resolve_one` but raises :class:`RecordNotFoundError`."""
        record = await self.resolve_one(token, tenant_id)
        if record is None:
            raise RecordNotFoundError(self.entity, token)
        return record

    async def delete_one(self, token: str, tenant_id: str) -> T | None:
        """Remove the addressed record; ``None`` when nothing matched."""
        lookup = self._resolver.resolve(self._filters, token, tenant_id)
        doc = await self._call(self._store.delete_one(lookup))
        if doc is None:
            return None
        logger.info("Deleted %s %s", self.entity, token)
        return self._mapper.from_doc(doc)

    async def update_each(
        self,
        changes: Sequence[tuple[str, Mapping[str, Any]]],
        tenant_id: str,
    ) -> BulkWriteReport:
        """Apply ``(token, fields)`` updates one record at a time.

        Each update is resolved through the same tenant-scoped lookup as
        reads. Request-level problems with one item are reported in
        ``failed`` and the batch continues; store unavailability aborts the
        batch with :class:`BulkWriteAborted`, whose ``report`` holds the
        updates committed so far.
        """
        protected = self._filters.protected_fields()
        report = BulkWriteReport()
        for index, (token, fields) in enumerate(changes):
            touched = protected.intersection(fields)
            try:
                if touched:
                    raise InvalidFilterError(
                        sorted(touched)[0], "field cannot be changed"
                    )
                lookup = self._resolver.resolve(self._filters, token, tenant_id)
            except TenantScopeError:
                raise
            except ValidationError as e:
                report.failed.append(BulkWriteFailure(index, str(token), str(e)))
                continue
            try:
                matched = await self._call(self._store.update_one(lookup, fields))
            except StoreUnavailableError as e:
                raise BulkWriteAborted(report, index, str(token)) from e
            if matched:
                report.succeeded.append(str(token))
            else:
                report.failed.append(BulkWriteFailure(index, str(token), "not found"))
        logger.info(
            "Bulk update on %s: %d succeeded, %d failed",
            self.entity,
            len(report.succeeded),
            len(report.failed),
        )
        return report

    def _tenant_for(self, list_query: ListQuery, tenant_id: str | None) -> str:
        if tenant_id is not None and tenant_id != list_query.tenant_id:
            raise TenantScopeError("Tenant does not match the list query")
        return list_query.tenant_id

    async def _call(self, awaitable: Awaitable[Any]) -> Any:
        try:
            if self._query_timeout is None:
                return await awaitable
            return await asyncio.wait_for(awaitable, self._query_timeout)
        except asyncio.TimeoutError as e:
            logger.warning(
                "%s store call exceeded %.2fs", self.entity, self._query_timeout
            )
            raise StoreUnavailableError(
                f"{self.entity} store timed out after {self._query_timeout}s"
            ) from e
        except StoreUnavailableError:
            logger.exception("%s store unavailable", self.entity)
            raise
