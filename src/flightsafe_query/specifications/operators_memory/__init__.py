"""
In-memory operator implementations.

Usage::

    from flightsafe_query.specifications.operators_memory import (
        build_default_registry,
    )

    registry = build_default_registry()
    result = registry.evaluate(SpecificationOperator.EQ, actual, expected)
"""

from __future__ import annotations

from ..evaluator import MemoryOperatorRegistry
from .null import IsNotNullOperator, IsNullOperator
from .set import InOperator, NotInOperator
from .standard import (
    EqualOperator,
    GreaterEqualOperator,
    GreaterThanOperator,
    LessEqualOperator,
    LessThanOperator,
    NotEqualOperator,
)


def build_default_registry() -> MemoryOperatorRegistry:
    """
    Create a registry with all built-in operators.

    Registries are stateless after construction; build one at startup and
    share it across requests.

    Example:
        >>> registry = build_default_registry()
        >>> registry.evaluate(SpecificationOperator.EQ, "N123AB", "N123AB")
        True
    """
    registry = MemoryOperatorRegistry()
    registry.register_all(
        EqualOperator(),
        NotEqualOperator(),
        GreaterThanOperator(),
        LessThanOperator(),
        GreaterEqualOperator(),
        LessEqualOperator(),
        InOperator(),
        NotInOperator(),
        IsNullOperator(),
        IsNotNullOperator(),
    )
    return registry


__all__ = [
    "build_default_registry",
    "MemoryOperatorRegistry",
]
