"""DynamicFilterParser — raw filter map + FilterRegistry -> specification."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..core.exceptions import InvalidFilterError, InvalidSortError
from ..specifications.ast import AttributeSpecification
from ..specifications.base import AndSpecification
from ..specifications.operators import SpecificationOperator
from .definitions import CoercionError, FilterDefinition

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from ..specifications.base import ISpecification
    from ..specifications.evaluator import MemoryOperatorRegistry
    from .query import SortField
    from .registry import FilterRegistry

logger = logging.getLogger("flightsafe_query.filtering.compiler")


class DynamicFilterParser:
    """Compile whitelisted filters into one AND-ed specification.

    Callers cannot express OR/NOT; only declared definitions (through a
    custom ``builder``) can. The compiler holds no per-request state, so one
    instance serves every entity and request.
    """

    def __init__(self, registry: MemoryOperatorRegistry) -> None:
        if registry is None:
            raise ValueError(
                "registry parameter is required. "
                "Use build_default_registry() from "
                "flightsafe_query.specifications.operators_memory to create one."
            )
        self._registry = registry

    def compile(
        self,
        filters: FilterRegistry,
        raw_filters: Mapping[str, Any],
    ) -> ISpecification[Any] | None:
        """Return the conjunction of all per-key predicates, or ``None``.

        Raises:
            InvalidFilterError: unknown key or uncoercible value.
        """
        predicates: list[ISpecification[Any]] = []
        for key, raw in raw_filters.items():
            definition = filters.get(key)
            if definition is None:
                logger.warning("Rejected unknown filter %r on %s", key, filters.entity)
                raise InvalidFilterError(key, "unknown filter key")
            predicates.append(self._compile_one(definition, raw))
        if not predicates:
            return None
        if len(predicates) == 1:
            return predicates[0]
        return AndSpecification(*predicates)

    def compile_sort(
        self,
        filters: FilterRegistry,
        sort: Iterable[SortField],
    ) -> list[tuple[str, str]]:
        """Map public sort names to store fields, plus an id tiebreaker.

        Raises:
            InvalidSortError: a field is not sortable on this entity.
        """
        requested = tuple(sort) or filters.default_sort
        out: list[tuple[str, str]] = []
        seen: set[str] = set()
        for item in requested:
            target = filters.sort_target(item.field)
            if target is None:
                logger.warning(
                    "Rejected sort field %r on %s", item.field, filters.entity
                )
                raise InvalidSortError(item.field, "field is not sortable")
            if target in seen:
                continue
            seen.add(target)
            out.append((target, item.direction.value))
        if filters.id_field not in seen:
            out.append((filters.id_field, "asc"))
        return out

    def _compile_one(
        self, definition: FilterDefinition, raw: Any
    ) -> ISpecification[Any]:
        if isinstance(raw, (list, tuple)):
            if not definition.allow_multiple:
                raise InvalidFilterError(
                    definition.key, "bad value: multiple values are not allowed"
                )
            values = [self._coerce(definition, item) for item in raw]
            return self._build(definition, values, SpecificationOperator.IN)
        value = self._coerce(definition, raw)
        return self._build(definition, value, definition.operator)

    def _coerce(self, definition: FilterDefinition, raw: Any) -> Any:
        try:
            return definition.coerce(raw)
        except CoercionError as e:
            raise InvalidFilterError(definition.key, f"bad value: {e}") from e

    def _build(
        self,
        definition: FilterDefinition,
        value: Any,
        op: SpecificationOperator,
    ) -> ISpecification[Any]:
        if definition.builder is not None:
            return definition.builder(value, self._registry)
        assert definition.target_field is not None
        return AttributeSpecification(
            definition.target_field, op, value, registry=self._registry
        )
