"""Set operators: in, not_in."""

from __future__ import annotations

from typing import Any

from ..evaluator import MemoryOperator
from ..operators import SpecificationOperator


class InOperator(MemoryOperator):
    """Membership test; an empty condition set matches nothing."""

    @property
    def name(self) -> SpecificationOperator:
        return SpecificationOperator.IN

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return field_value in condition_value


class NotInOperator(MemoryOperator):
    @property
    def name(self) -> SpecificationOperator:
        return SpecificationOperator.NOT_IN

    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        return field_value not in condition_value
