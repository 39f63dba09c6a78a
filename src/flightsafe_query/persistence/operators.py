"""Comparison, set and null operators for MongoDB query compilation."""

from __future__ import annotations

from typing import Any

from ..specifications.operators import SpecificationOperator

_MONGO_OP_MAP: dict[SpecificationOperator, str] = {
    SpecificationOperator.EQ: "$eq",
    SpecificationOperator.NE: "$ne",
    SpecificationOperator.GT: "$gt",
    SpecificationOperator.GE: "$gte",
    SpecificationOperator.LT: "$lt",
    SpecificationOperator.LE: "$lte",
}


def compile_standard(field: str, op: str, val: Any) -> dict[str, Any] | None:
    """Compile standard comparison operators to MongoDB query fragments."""
    try:
        spec_op = SpecificationOperator(op)
    except ValueError:
        return None
    mongo_op = _MONGO_OP_MAP.get(spec_op)
    if mongo_op:
        return {field: {mongo_op: val}}
    return None


def compile_set(field: str, op: str, val: Any) -> dict[str, Any] | None:
    """Compile set operators. ``$in: []`` matches nothing, which is intended."""
    try:
        spec_op = SpecificationOperator(op)
    except ValueError:
        return None
    if spec_op == SpecificationOperator.IN:
        return {field: {"$in": val if isinstance(val, list) else [val]}}
    if spec_op == SpecificationOperator.NOT_IN:
        return {field: {"$nin": val if isinstance(val, list) else [val]}}
    return None


def compile_null(field: str, op: str, _val: Any) -> dict[str, Any] | None:
    try:
        spec_op = SpecificationOperator(op)
    except ValueError:
        return None
    if spec_op == SpecificationOperator.IS_NULL:
        return {field: None}
    if spec_op == SpecificationOperator.IS_NOT_NULL:
        return {field: {"$ne": None}}
    return None
