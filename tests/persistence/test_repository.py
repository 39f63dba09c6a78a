"""Tests for ScopedRepository over the in-memory store."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from flightsafe_query.core.exceptions import (
    InvalidFilterError,
    InvalidIdentifierError,
    InvalidSortError,
    ListQueryParseError,
    RecordNotFoundError,
    StoreUnavailableError,
    TenantScopeError,
)
from flightsafe_query.entities.catalog import AIRCRAFT_FILTERS
from flightsafe_query.entities.models import Aircraft
from flightsafe_query.filtering.modifiers import QueryModifierParser
from flightsafe_query.filtering.query import ListQuery, SortDirection, SortField
from flightsafe_query.persistence.memory_store import InMemoryRecordStore
from flightsafe_query.persistence.repository import BulkWriteAborted, ScopedRepository

ALPHA = "acct_alpha"
BRAVO = "acct_bravo"

parse = QueryModifierParser().parse


class TestFindWithParams:
    @pytest.mark.asyncio
    async def test_only_tenant_records_are_returned(self, aircraft_repo) -> None:
        page = await aircraft_repo.find_with_params(parse({}, BRAVO))
        assert {r.account for r in page.data} == {BRAVO}
        assert page.meta.total_count == 2

    @pytest.mark.asyncio
    async def test_shared_values_do_not_leak(self, aircraft_repo) -> None:
        page = await aircraft_repo.find_with_params(
            parse({"designation": "N123AB"}, BRAVO)
        )
        assert [r.id for r in page.data] == ["bc1"]

    @pytest.mark.asyncio
    async def test_tenant_argument_must_match_query(self, aircraft_repo) -> None:
        with pytest.raises(TenantScopeError):
            await aircraft_repo.find_with_params(parse({}, ALPHA), BRAVO)
        page = await aircraft_repo.find_with_params(parse({}, ALPHA), ALPHA)
        assert page.meta.total_count == 5

    @pytest.mark.asyncio
    async def test_pages_cover_every_record_once(self, aircraft_repo) -> None:
        seen: list[str] = []
        for number in range(1, 4):
            page = await aircraft_repo.find_with_params(
                parse({"page": str(number), "pageSize": "2"}, ALPHA)
            )
            assert page.meta.total_count == 5
            assert page.meta.total_pages == 3
            seen.extend(r.id for r in page.data)
        assert sorted(seen) == ["ac1", "ac2", "ac3", "ac4", "ac5"]
        assert len(seen) == len(set(seen))

    @pytest.mark.asyncio
    async def test_page_past_the_end(self, aircraft_repo) -> None:
        page = await aircraft_repo.find_with_params(parse({"page": "9"}, ALPHA))
        assert page.data == []
        assert page.meta.page == 9
        assert page.meta.total_count == 5

    @pytest.mark.asyncio
    async def test_default_sort_is_deterministic(self, aircraft_repo) -> None:
        first = await aircraft_repo.find_with_params(parse({}, ALPHA))
        second = await aircraft_repo.find_with_params(parse({}, ALPHA))
        ids = [r.id for r in first.data]
        assert ids == [r.id for r in second.data]
        # ac2 and ac3 share dateAdded; _id breaks the tie
        assert ids == ["ac4", "ac2", "ac3", "ac1", "ac5"]

    @pytest.mark.asyncio
    async def test_requested_sort(self, aircraft_repo) -> None:
        query = ListQuery(
            tenant_id=ALPHA,
            sort=(SortField("type"), SortField("designation", SortDirection.DESC)),
        )
        page = await aircraft_repo.find_with_params(query)
        assert [r.designation for r in page.data] == [
            "N500IJ",
            "N300EF",
            "N123AB",
            "N200CD",
            "N400GH",
        ]

    @pytest.mark.asyncio
    async def test_in_set_and_empty_in_set(self, aircraft_repo) -> None:
        page = await aircraft_repo.find_with_params(
            ListQuery(tenant_id=ALPHA, raw_filters={"type": ["PA28", "SR22"]})
        )
        assert {r.type for r in page.data} == {"PA28", "SR22"}

        empty = await aircraft_repo.find_with_params(
            ListQuery(tenant_id=ALPHA, raw_filters={"type": []})
        )
        assert empty.data == []
        assert empty.meta.total_count == 0
        assert empty.meta.total_pages == 0

    @pytest.mark.asyncio
    async def test_date_range(self, aircraft_repo) -> None:
        page = await aircraft_repo.find_with_params(
            parse({"addedAfter": "2024-02-01", "addedBefore": "2024-02-28"}, ALPHA)
        )
        assert sorted(r.id for r in page.data) == ["ac2", "ac3"]

    @pytest.mark.asyncio
    async def test_bounds_are_clamped(self, aircraft_repo) -> None:
        page = await aircraft_repo.find_with_params(
            parse({"pageSize": "100000", "page": "-5"}, ALPHA)
        )
        assert page.meta.page_size == 200
        assert page.meta.page == 1
        assert len(page) == 5

    @pytest.mark.asyncio
    async def test_direct_list_query_is_clamped(self) -> None:
        store = InMemoryRecordStore(
            [{"account": ALPHA, "designation": f"N{i}"} for i in range(5)]
        )
        store.find = AsyncMock(wraps=store.find)
        repo = ScopedRepository(store, AIRCRAFT_FILTERS, Aircraft, max_page_size=3)
        page = await repo.find_with_params(ListQuery(ALPHA, page=2, page_size=100000))
        assert page.meta.page_size == 3
        assert page.meta.total_pages == 2
        assert len(page) == 2
        _, _, skip, limit = store.find.call_args.args
        assert (skip, limit) == (3, 3)

    @pytest.mark.parametrize(
        "page, page_size", [(0, 25), (-1, 25), (1, 0), (1, -10), (True, 25)]
    )
    def test_non_positive_pagination_is_rejected(self, page, page_size) -> None:
        with pytest.raises(ListQueryParseError):
            ListQuery(ALPHA, page=page, page_size=page_size)

    @pytest.mark.asyncio
    async def test_validation_happens_before_the_store(self) -> None:
        store = AsyncMock()
        repo = ScopedRepository(store, AIRCRAFT_FILTERS, Aircraft)
        with pytest.raises(InvalidFilterError):
            await repo.find_with_params(ListQuery(ALPHA, raw_filters={"color": "red"}))
        with pytest.raises(InvalidSortError):
            await repo.find_with_params(ListQuery(ALPHA, sort=(SortField("color"),)))
        with pytest.raises(InvalidFilterError):
            await repo.find_with_params(ListQuery(ALPHA, raw_filters={"addedAfter": "?"}))
        store.count.assert_not_called()
        store.find.assert_not_called()


class TestSingleRecord:
    @pytest.mark.asyncio
    async def test_id_and_tag_resolve_to_the_same_record(self, aircraft_repo) -> None:
        by_id = await aircraft_repo.resolve_one("ac1", ALPHA)
        by_tag = await aircraft_repo.resolve_one("tag.designation:N123AB", ALPHA)
        assert by_id is not None
        assert by_id == by_tag

    @pytest.mark.asyncio
    async def test_tag_value_is_normalized(self, aircraft_repo) -> None:
        record = await aircraft_repo.resolve_one("tag.designation:n123ab", BRAVO)
        assert record.id == "bc1"

    @pytest.mark.asyncio
    async def test_other_tenants_records_are_not_found(self, aircraft_repo) -> None:
        assert await aircraft_repo.resolve_one("bc2", ALPHA) is None
        assert await aircraft_repo.resolve_one("tag.designation:N999ZZ", ALPHA) is None

    @pytest.mark.asyncio
    async def test_tag_field_outside_allow_list(self, aircraft_repo) -> None:
        with pytest.raises(InvalidIdentifierError):
            await aircraft_repo.resolve_one("tag.account:acct_bravo", ALPHA)

    @pytest.mark.asyncio
    async def test_get_one(self, aircraft_repo) -> None:
        assert (await aircraft_repo.get_one("ac4", ALPHA)).designation == "N400GH"
        with pytest.raises(RecordNotFoundError) as exc_info:
            await aircraft_repo.get_one("missing", ALPHA)
        assert exc_info.value.entity == "aircraft"

    @pytest.mark.asyncio
    async def test_nested_tag_target(self, flight_repo) -> None:
        flight = await flight_repo.resolve_one("tag.externalId:EXT1", "acct_alpha")
        assert flight.id == "fl1"
        bravo = await flight_repo.resolve_one("tag.externalId:EXT1", "acct_bravo")
        assert bravo.id == "fl9"

    @pytest.mark.asyncio
    async def test_delete_one(self, aircraft_repo, aircraft_store) -> None:
        assert await aircraft_repo.delete_one("tag.designation:N123AB", BRAVO) is not None
        assert await aircraft_repo.delete_one("bc1", BRAVO) is None
        # the same designation under the other tenant is untouched
        assert await aircraft_repo.resolve_one("ac1", ALPHA) is not None
        assert len(aircraft_store) == 6


class TestUpdateEach:
    @pytest.mark.asyncio
    async def test_partial_failure_is_reported_per_item(self, aircraft_repo) -> None:
        report = await aircraft_repo.update_each(
            [
                ("ac1", {"type": "DA40"}),
                ("bc1", {"type": "DA40"}),
                ("tag.owner:x", {"type": "DA40"}),
                ("ac2", {"account": BRAVO}),
                ("tag.designation:n300ef", {"type": "DA40"}),
            ],
            ALPHA,
        )
        assert not report.ok
        assert report.succeeded == ["ac1", "tag.designation:n300ef"]
        assert [(f.index, f.token) for f in report.failed] == [
            (1, "bc1"),
            (2, "tag.owner:x"),
            (3, "ac2"),
        ]
        assert report.failed[0].reason == "not found"
        assert "account" in report.failed[2].reason

        assert (await aircraft_repo.get_one("ac3", ALPHA)).type == "DA40"
        assert (await aircraft_repo.get_one("bc1", BRAVO)).type == "C172"
        assert (await aircraft_repo.get_one("ac2", ALPHA)).account == ALPHA

    @pytest.mark.asyncio
    async def test_missing_tenant_aborts_the_batch(self, aircraft_repo) -> None:
        with pytest.raises(TenantScopeError):
            await aircraft_repo.update_each([("ac1", {"type": "x"})], "")

    @pytest.mark.asyncio
    async def test_empty_batch(self, aircraft_repo) -> None:
        report = await aircraft_repo.update_each([], ALPHA)
        assert report.ok
        assert report.succeeded == []


class _SlowStore(InMemoryRecordStore):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.cancelled = False

    async def find(self, spec, sort, skip, limit):
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return await super().find(spec, sort, skip, limit)


class TestStoreFailures:
    @pytest.mark.asyncio
    async def test_timeout_is_store_unavailable(self) -> None:
        repo = ScopedRepository(
            _SlowStore([{"account": ALPHA, "designation": "N1"}]),
            AIRCRAFT_FILTERS,
            Aircraft,
            query_timeout=0.05,
        )
        with pytest.raises(StoreUnavailableError, match="timed out"):
            await repo.find_with_params(ListQuery(ALPHA))

    @pytest.mark.asyncio
    async def test_failure_cancels_the_sibling_call(self) -> None:
        store = _SlowStore([{"account": ALPHA, "designation": "N1"}])
        store.count = AsyncMock(side_effect=StoreUnavailableError("down"))
        repo = ScopedRepository(store, AIRCRAFT_FILTERS, Aircraft)
        with pytest.raises(StoreUnavailableError):
            await repo.find_with_params(ListQuery(ALPHA))
        await asyncio.sleep(0.01)
        assert store.cancelled

    @pytest.mark.asyncio
    async def test_lookup_failure_propagates(self) -> None:
        store = AsyncMock()
        store.find_one.side_effect = StoreUnavailableError("down")
        repo = ScopedRepository(store, AIRCRAFT_FILTERS, Aircraft)
        with pytest.raises(StoreUnavailableError):
            await repo.resolve_one("ac1", ALPHA)


class _FailingUpdateStore(InMemoryRecordStore):
    def __init__(self, *args, fail_on: int, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.fail_on = fail_on
        self.updates = 0

    async def update_one(self, spec, fields):
        self.updates += 1
        if self.updates == self.fail_on:
            raise StoreUnavailableError("down")
        return await super().update_one(spec, fields)


class TestUpdateEachAbort:
    @pytest.mark.asyncio
    async def test_abort_carries_the_committed_updates(self) -> None:
        store = _FailingUpdateStore(
            [
                {"_id": "ac1", "account": ALPHA, "designation": "N1", "type": "C172"},
                {"_id": "ac2", "account": ALPHA, "designation": "N2", "type": "C172"},
                {"_id": "ac3", "account": ALPHA, "designation": "N3", "type": "C172"},
            ],
            fail_on=2,
        )
        repo = ScopedRepository(store, AIRCRAFT_FILTERS, Aircraft)
        with pytest.raises(BulkWriteAborted) as exc_info:
            await repo.update_each(
                [
                    ("ac1", {"type": "DA40"}),
                    ("missing", {"type": "DA40"}),
                    ("ac2", {"type": "DA40"}),
                    ("ac3", {"type": "DA40"}),
                ],
                ALPHA,
            )
        aborted = exc_info.value
        assert isinstance(aborted, StoreUnavailableError)
        assert aborted.index == 1
        assert aborted.token == "missing"
        assert aborted.report.succeeded == ["ac1"]
        assert aborted.report.failed == []
        assert (await repo.get_one("ac1", ALPHA)).type == "DA40"
        assert (await repo.get_one("ac2", ALPHA)).type == "C172"
