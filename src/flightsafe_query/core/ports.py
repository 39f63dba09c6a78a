"""IRecordStore — the narrow store contract the repository consumes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from ..specifications.base import ISpecification


@runtime_checkable
class IRecordStore(Protocol):
    """
    Raw-record access for one entity collection.

    Every ``spec`` handed to a store already carries the tenant clause;
    stores never add or remove scope themselves. ``sort`` is a sequence of
    ``(store_field, "asc" | "desc")`` pairs.

    Implementations raise :class:`StoreUnavailableError` for infrastructure
    failures and must not return partial results.
    """

    async def count(self, spec: ISpecification[Any]) -> int: ...

    async def find(
        self,
        spec: ISpecification[Any],
        sort: Sequence[tuple[str, str]],
        skip: int,
        limit: int,
    ) -> list[dict[str, Any]]: ...

    async def find_one(self, spec: ISpecification[Any]) -> dict[str, Any] | None: ...

    async def update_one(
        self, spec: ISpecification[Any], fields: Mapping[str, Any]
    ) -> int: ...

    async def delete_one(self, spec: ISpecification[Any]) -> dict[str, Any] | None: ...
