"""
In-memory predicate evaluation.

Each leaf operator is a small strategy object; the registry maps
:class:`SpecificationOperator` members to them. Compiled list predicates are
evaluated through it by :class:`InMemoryRecordStore`, so the same predicate
tree serves both MongoDB and the in-memory store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .operators import SpecificationOperator


class MemoryOperator(ABC):
    """Evaluates one leaf operator against a resolved record value."""

    @property
    @abstractmethod
    def name(self) -> SpecificationOperator: ...

    @abstractmethod
    def evaluate(self, field_value: Any, condition_value: Any) -> bool:
        """Return True when *field_value* satisfies the condition."""


class MemoryOperatorRegistry:
    """
    Operator table shared by every predicate built at request time.

    Populate it once at startup (see ``build_default_registry``); it is
    read-only afterwards.
    """

    def __init__(self) -> None:
        self._operators: dict[SpecificationOperator, MemoryOperator] = {}

    def register_all(self, *operators: MemoryOperator) -> None:
        for operator in operators:
            self._operators[operator.name] = operator

    @property
    def supported_operators(self) -> set[SpecificationOperator]:
        return set(self._operators)

    def evaluate(
        self,
        name: SpecificationOperator,
        field_value: Any,
        condition_value: Any,
    ) -> bool:
        """
        Dispatch to the registered strategy.

        Raises:
            ValueError: no strategy is registered for *name*.
        """
        operator = self._operators.get(name)
        if operator is None:
            raise ValueError(f"Unsupported operator for in-memory evaluation: {name}")
        return operator.evaluate(field_value, condition_value)
