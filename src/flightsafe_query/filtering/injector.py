"""TenantScopeInjector — conjoin the mandatory tenant clause."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..core.exceptions import TenantScopeError
from ..specifications.ast import AttributeSpecification
from ..specifications.base import AndSpecification
from ..specifications.operators import SpecificationOperator

if TYPE_CHECKING:
    from ..specifications.base import ISpecification
    from ..specifications.evaluator import MemoryOperatorRegistry


class TenantScopeInjector:
    """Appends the tenant constraint before any query reaches a store."""

    def __init__(self, registry: MemoryOperatorRegistry) -> None:
        """
        Initialize TenantScopeInjector.

        Args:
            registry: MemoryOperatorRegistry for creating specifications.
        """
        if registry is None:
            raise ValueError(
                "registry parameter is required. "
                "Use build_default_registry() from "
                "flightsafe_query.specifications.operators_memory to create one."
            )
        self._registry = registry

    def scope(self, tenant_field: str, tenant_id: Any) -> ISpecification[Any]:
        """Return the bare tenant clause.

        Raises:
            TenantScopeError: *tenant_id* is missing or blank.
        """
        if tenant_id is None or (isinstance(tenant_id, str) and not tenant_id.strip()):
            raise TenantScopeError("Tenant context is required")
        return AttributeSpecification(
            tenant_field,
            SpecificationOperator.EQ,
            tenant_id,
            registry=self._registry,
        )

    def inject(
        self,
        spec: ISpecification[Any] | None,
        *,
        tenant_field: str,
        tenant_id: Any,
    ) -> ISpecification[Any]:
        """Return ``tenant clause AND spec`` (just the clause when spec is None)."""
        clause = self.scope(tenant_field, tenant_id)
        if spec is None:
            return clause
        return AndSpecification(clause, spec)
