"""RecordMapper — raw store document -> pydantic record."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from bson import ObjectId
from pydantic import BaseModel

T_Entity = TypeVar("T_Entity", bound=BaseModel)


class RecordMapper(Generic[T_Entity]):
    """
    Store document → pydantic record.

    Maps ``_id`` → ``id`` and renders BSON ``ObjectId`` values (ids and
    references alike) as their hex strings so records stay JSON-friendly.
    """

    def __init__(self, entity_cls: type[T_Entity], *, id_field: str = "id") -> None:
        self.entity_cls = entity_cls
        self._id_field = id_field

    def from_doc(self, doc: dict[str, Any]) -> T_Entity:
        data = dict(doc)
        if "_id" in data:
            data[self._id_field] = data.pop("_id")
        return self.entity_cls.model_validate(self._deserialize(data))

    def _deserialize(self, value: Any) -> Any:
        if isinstance(value, ObjectId):
            return str(value)
        if isinstance(value, dict):
            return {k: self._deserialize(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._deserialize(v) for v in value]
        return value
