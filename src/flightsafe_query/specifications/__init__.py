"""Composable predicates over store fields."""

from .ast import AttributeSpecification
from .base import (
    AndSpecification,
    BaseSpecification,
    ISpecification,
    NotSpecification,
    OrSpecification,
)
from .evaluator import MemoryOperator, MemoryOperatorRegistry
from .operators import SpecificationOperator
from .operators_memory import build_default_registry

__all__ = [
    "SpecificationOperator",
    "AttributeSpecification",
    "ISpecification",
    "BaseSpecification",
    "AndSpecification",
    "OrSpecification",
    "NotSpecification",
    "MemoryOperator",
    "MemoryOperatorRegistry",
    "build_default_registry",
]
