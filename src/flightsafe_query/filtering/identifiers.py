"""
IdentifierResolver — one path segment, two addressing forms.

A token is either an opaque record id or a tag expression
``tag.<field>:<value>``, where ``<field>`` must be allow-listed on the
entity. Both forms resolve to a tenant-scoped lookup predicate, so read,
update and delete endpoints address records the same way.

The grammar only admits ASCII word characters in both positions. Widening
it changes what reaches the store and needs its own review.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..core.exceptions import InvalidIdentifierError
from ..specifications.ast import AttributeSpecification
from ..specifications.operators import SpecificationOperator

if TYPE_CHECKING:
    from ..specifications.base import ISpecification
    from ..specifications.evaluator import MemoryOperatorRegistry
    from .injector import TenantScopeInjector
    from .registry import FilterRegistry

logger = logging.getLogger("flightsafe_query.filtering.identifiers")

TAG_PATTERN = re.compile(r"^tag\.(\w+):(\w+)$", re.ASCII)


@dataclass(frozen=True)
class ParsedIdentifier:
    """Classification of a path token."""

    token: str
    tag_field: str | None = None
    tag_value: str | None = None

    @property
    def is_tag(self) -> bool:
        return self.tag_field is not None


def parse_identifier(token: Any) -> ParsedIdentifier:
    """Classify *token*. Total: anything that is not a tag is an id."""
    text = token if isinstance(token, str) else str(token)
    match = TAG_PATTERN.match(text)
    if match is None:
        return ParsedIdentifier(text)
    return ParsedIdentifier(text, match.group(1), match.group(2))


class IdentifierResolver:
    """Turn a path token into a tenant-scoped lookup predicate."""

    def __init__(
        self,
        registry: MemoryOperatorRegistry,
        injector: TenantScopeInjector,
    ) -> None:
        self._registry = registry
        self._injector = injector

    def resolve(
        self,
        filters: FilterRegistry,
        token: Any,
        tenant_id: Any,
    ) -> ISpecification[Any]:
        """Return ``tenant clause AND (id == token | tag target == value)``.

        Raises:
            InvalidIdentifierError: tag field not in the entity's allow-list.
            TenantScopeError: *tenant_id* is missing.
        """
        parsed = parse_identifier(token)
        if parsed.is_tag:
            assert parsed.tag_field is not None and parsed.tag_value is not None
            tag = filters.tag_fields.get(parsed.tag_field)
            if tag is None:
                logger.warning(
                    "Rejected tag field %r on %s", parsed.tag_field, filters.entity
                )
                raise InvalidIdentifierError(
                    parsed.token, parsed.tag_field, list(filters.tag_fields)
                )
            lookup = AttributeSpecification(
                tag.target,
                SpecificationOperator.EQ,
                tag.apply(parsed.tag_value),
                registry=self._registry,
            )
        else:
            lookup = AttributeSpecification(
                filters.id_field,
                SpecificationOperator.EQ,
                parsed.token,
                registry=self._registry,
            )
        return self._injector.inject(
            lookup, tenant_field=filters.tenant_field, tenant_id=tenant_id
        )
