"""Equality and ordering operators: =, !=, >, <, >=, <=."""

from __future__ import annotations

import operator
from collections.abc import Callable
from typing import Any, ClassVar

from ..evaluator import MemoryOperator
from ..operators import SpecificationOperator


class EqualOperator(MemoryOperator):
    @property
    def name(self) -> SpecificationOperator:
        return SpecificationOperator.EQ

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return bool(field_value == condition_value)


class NotEqualOperator(MemoryOperator):
    @property
    def name(self) -> SpecificationOperator:
        return SpecificationOperator.NE

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return bool(field_value != condition_value)


class _OrderingOperator(MemoryOperator):
    """
    Range comparison with MongoDB semantics.

    A missing field, or a value of a different type than the bound (e.g. a
    string stored where a date is expected), never matches.
    """

    kind: ClassVar[SpecificationOperator]
    compare: ClassVar[Callable[[Any, Any], Any]]

    @property
    def name(self) -> SpecificationOperator:
        return self.kind

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        if field_value is None:
            return False
        try:
            return bool(type(self).compare(field_value, condition_value))
        except TypeError:
            return False


class GreaterThanOperator(_OrderingOperator):
    kind = SpecificationOperator.GT
    compare = operator.gt


class LessThanOperator(_OrderingOperator):
    kind = SpecificationOperator.LT
    compare = operator.lt


class GreaterEqualOperator(_OrderingOperator):
    kind = SpecificationOperator.GE
    compare = operator.ge


class LessEqualOperator(_OrderingOperator):
    kind = SpecificationOperator.LE
    compare = operator.le
