"""InMemoryRecordStore — dict-backed fake store for tests and local runs."""

from __future__ import annotations

import copy
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from bson import ObjectId

from ..specifications.ast import AttributeSpecification

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from ..specifications.base import ISpecification


class InMemoryRecordStore:
    """In-memory implementation of ``IRecordStore``.

    Evaluates specifications through their in-memory operator registry and
    sorts like MongoDB: ``None`` lowest, then values grouped by type
    bracket (numbers first, dates last) so mixed types still order.
    """

    def __init__(self, documents: Iterable[dict[str, Any]] = ()) -> None:
        self._docs: list[dict[str, Any]] = []
        for doc in documents:
            self.insert(doc)

    async def count(self, spec: ISpecification[Any]) -> int:
        return sum(1 for doc in self._docs if spec.is_satisfied_by(doc))

    async def find(
        self,
        spec: ISpecification[Any],
        sort: Sequence[tuple[str, str]],
        skip: int,
        limit: int,
    ) -> list[dict[str, Any]]:
        matched = [doc for doc in self._docs if spec.is_satisfied_by(doc)]
        # Stable sorts applied from the least significant key.
        for field, direction in reversed(list(sort)):
            matched.sort(
                key=lambda doc, f=field: _sort_key(doc, f),
                reverse=direction == "desc",
            )
        return [copy.deepcopy(doc) for doc in matched[skip : skip + limit]]

    async def find_one(self, spec: ISpecification[Any]) -> dict[str, Any] | None:
        for doc in self._docs:
            if spec.is_satisfied_by(doc):
                return copy.deepcopy(doc)
        return None

    async def update_one(
        self, spec: ISpecification[Any], fields: Mapping[str, Any]
    ) -> int:
        for doc in self._docs:
            if spec.is_satisfied_by(doc):
                doc.update(copy.deepcopy(dict(fields)))
                return 1
        return 0

    async def delete_one(self, spec: ISpecification[Any]) -> dict[str, Any] | None:
        for index, doc in enumerate(self._docs):
            if spec.is_satisfied_by(doc):
                return self._docs.pop(index)
        return None

    # ── Test helpers ──────────────────────────────────────────

    def insert(self, doc: dict[str, Any]) -> str:
        stored = copy.deepcopy(doc)
        stored.setdefault("_id", uuid.uuid4().hex)
        self._docs.append(stored)
        return str(stored["_id"])

    def clear(self) -> None:
        self._docs.clear()

    def __len__(self) -> int:
        return len(self._docs)


# MongoDB BSON comparison order for the types records can hold.
_BRACKETS: tuple[tuple[type | tuple[type, ...], int], ...] = (
    (bool, 8),
    ((int, float, Decimal), 1),
    (str, 2),
    (dict, 3),
    ((list, tuple), 4),
    (bytes, 5),
    (ObjectId, 6),
    ((datetime, date), 9),
)


def _sort_key(doc: dict[str, Any], field: str) -> tuple[int, Any]:
    value = AttributeSpecification._resolve_field(doc, field)
    if value is None:
        return (0, 0)
    for types, rank in _BRACKETS:
        if isinstance(value, types):
            break
    else:
        return (10, str(value))
    if rank in (3, 4):
        return (rank, repr(value))
    if rank == 9 and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    return (rank, value)
