"""Request parsing, declarative filters, identifier resolution, tenant scope."""

from __future__ import annotations

from .compiler import DynamicFilterParser
from .definitions import (
    CoercionError,
    FilterDefinition,
    TagField,
    ValueType,
    coerce_value,
)
from .identifiers import IdentifierResolver, ParsedIdentifier, parse_identifier
from .injector import TenantScopeInjector
from .modifiers import QueryModifierParser
from .query import ListQuery, ListQuerySettings, SortDirection, SortField
from .query_string import QueryStringBuilder
from .registry import FilterRegistry

__all__ = [
    "CoercionError",
    "DynamicFilterParser",
    "FilterDefinition",
    "FilterRegistry",
    "IdentifierResolver",
    "ListQuery",
    "ListQuerySettings",
    "ParsedIdentifier",
    "QueryModifierParser",
    "QueryStringBuilder",
    "SortDirection",
    "SortField",
    "TagField",
    "TenantScopeInjector",
    "ValueType",
    "coerce_value",
    "parse_identifier",
]
