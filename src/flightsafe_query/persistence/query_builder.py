"""Mongo query builder from specification AST."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from bson import ObjectId

from ..specifications.operators import SpecificationOperator
from .exceptions import MongoQueryError
from .operators import compile_null, compile_set, compile_standard

_COMPILERS = [
    compile_standard,
    compile_set,
    compile_null,
]


class MongoQueryBuilder:
    """Compiles specifications (via to_dict()) to MongoDB query documents.

    Args:
        object_id_fields: Store fields holding ``ObjectId`` values. String
            operands on these fields are converted when they are valid
            ObjectIds; anything else is left as-is and simply matches
            nothing.
    """

    def __init__(self, object_id_fields: Iterable[str] = ("_id",)) -> None:
        self._object_id_fields = frozenset(object_id_fields)

    def build_match(self, spec: Any) -> dict[str, Any]:
        """Build the ``$match`` document for a specification or AST dict."""
        if hasattr(spec, "to_dict"):
            data = spec.to_dict()
        elif isinstance(spec, dict):
            data = spec
        else:
            raise MongoQueryError("spec must be a specification or dict")
        if not data:
            return {}
        return self._compile_node(data)

    def build_sort(
        self, order_by: Iterable[tuple[str, str]] | None
    ) -> list[tuple[str, int]]:
        """Build MongoDB sort tuples from ``[(field, "asc"|"desc")]``."""
        if not order_by:
            return []
        return [
            (field, -1 if str(direction).lower() == "desc" else 1)
            for field, direction in order_by
        ]

    def convert_value(self, field: str, val: Any) -> Any:
        """Apply ObjectId conversion for configured fields."""
        if field not in self._object_id_fields:
            return val
        if isinstance(val, list):
            return [self._to_object_id(v) for v in val]
        return self._to_object_id(val)

    @staticmethod
    def _to_object_id(val: Any) -> Any:
        if isinstance(val, str) and ObjectId.is_valid(val):
            return ObjectId(val)
        return val

    def _compile_leaf(self, data: dict[str, Any]) -> dict[str, Any]:
        op_str = data.get("op", "")
        attr = data.get("attr")
        if not attr:
            raise MongoQueryError(f"Specification missing 'attr': {data}")
        val = self.convert_value(attr, data.get("val"))
        for compiler in _COMPILERS:
            result = compiler(attr, op_str, val)
            if result is not None:
                return result
        raise MongoQueryError(f"Unsupported operator {op_str!r} for field {attr!r}")

    def _compile_node(self, data: dict[str, Any]) -> dict[str, Any]:
        """Recursively compile spec dict to MongoDB filter."""
        if not isinstance(data, dict):
            raise MongoQueryError("Specification node must be a dict")
        op_str = str(data.get("op", "")).lower()
        if op_str == SpecificationOperator.AND:
            conditions = data.get("conditions", [])
            if not conditions:
                return {}
            return {"$and": [self._compile_node(c) for c in conditions]}
        if op_str == SpecificationOperator.OR:
            conditions = data.get("conditions", [])
            if not conditions:
                return {}
            return {"$or": [self._compile_node(c) for c in conditions]}
        if op_str == SpecificationOperator.NOT:
            conditions = data.get("conditions", [])
            inner = self._compile_node(conditions[0]) if conditions else {}
            return {"$nor": [inner]} if inner else {}
        return self._compile_leaf(data)
