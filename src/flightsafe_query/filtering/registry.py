"""FilterRegistry — per-entity filter, sort and tag allow-lists."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from .definitions import FilterDefinition, TagField
from .query import SortDirection, SortField

if TYPE_CHECKING:
    from collections.abc import Iterator


class FilterRegistry:
    """
    Immutable declaration of what callers may filter, sort and tag by.

    Built once at process start and shared read-only across requests.

    Args:
        entity: Entity name used in logs and error messages.
        definitions: Filter definitions; keys must be unique.
        sortable: Extra public sort names → store fields for fields that
            can be sorted on but not filtered by.
        tag_fields: Allow-list for ``tag.<field>:<value>`` identifiers.
        default_sort: Ordering applied when the request names none.
        tenant_field: Store field holding the owning tenant.
        id_field: Store field holding the opaque record id.
    """

    def __init__(
        self,
        entity: str,
        definitions: Iterable[FilterDefinition] = (),
        *,
        sortable: Mapping[str, str] | None = None,
        tag_fields: Mapping[str, TagField | str] | None = None,
        default_sort: Iterable[SortField] = (),
        tenant_field: str = "account",
        id_field: str = "_id",
    ) -> None:
        self._entity = entity
        self._tenant_field = tenant_field
        self._id_field = id_field

        filters: dict[str, FilterDefinition] = {}
        for definition in definitions:
            if definition.key in filters:
                raise ValueError(
                    f"Duplicate filter key {definition.key!r} on {entity!r}"
                )
            filters[definition.key] = definition
        self._filters = MappingProxyType(filters)

        sort_fields: dict[str, str] = {
            d.key: d.target_field
            for d in filters.values()
            if d.is_sortable and d.target_field is not None
        }
        for name, target in (sortable or {}).items():
            if name in sort_fields and sort_fields[name] != target:
                raise ValueError(
                    f"Sort key {name!r} on {entity!r} maps to two store fields"
                )
            sort_fields[name] = target
        self._sort_fields = MappingProxyType(sort_fields)

        tags: dict[str, TagField] = {
            name: spec if isinstance(spec, TagField) else TagField(spec)
            for name, spec in (tag_fields or {}).items()
        }
        self._tag_fields = MappingProxyType(tags)

        self._default_sort = tuple(default_sort) or (
            SortField(id_field, SortDirection.DESC),
        )
        for sort_field in self._default_sort:
            if sort_field.field != id_field and sort_field.field not in sort_fields:
                raise ValueError(
                    f"Default sort {sort_field.field!r} on {entity!r} is not sortable"
                )

    @property
    def entity(self) -> str:
        return self._entity

    @property
    def tenant_field(self) -> str:
        return self._tenant_field

    @property
    def id_field(self) -> str:
        return self._id_field

    @property
    def filters(self) -> Mapping[str, FilterDefinition]:
        return self._filters

    @property
    def sort_fields(self) -> Mapping[str, str]:
        return self._sort_fields

    @property
    def tag_fields(self) -> Mapping[str, TagField]:
        return self._tag_fields

    @property
    def default_sort(self) -> tuple[SortField, ...]:
        return self._default_sort

    def get(self, key: str) -> FilterDefinition | None:
        return self._filters.get(key)

    def sort_target(self, name: str) -> str | None:
        """Return the store field for a public sort name, or ``None``."""
        if name == self._id_field:
            return self._id_field
        return self._sort_fields.get(name)

    def protected_fields(self) -> frozenset[str]:
        """Store fields that writes through the engine may never touch."""
        return frozenset({self._tenant_field, self._id_field})

    def __contains__(self, key: object) -> bool:
        return key in self._filters

    def __iter__(self) -> Iterator[FilterDefinition]:
        return iter(self._filters.values())

    def __len__(self) -> int:
        return len(self._filters)

    def __repr__(self) -> str:
        return (
            f"FilterRegistry({self._entity!r}, filters={sorted(self._filters)}, "
            f"sort={sorted(self._sort_fields)}, tags={sorted(self._tag_fields)})"
        )
