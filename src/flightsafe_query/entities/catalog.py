"""Declarative filter tables for the list endpoints.

Registries are module-level constants: built once at import, read-only for
the life of the process.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..filtering.definitions import FilterDefinition, TagField, ValueType
from ..filtering.query import SortDirection, SortField
from ..filtering.registry import FilterRegistry
from ..specifications.ast import AttributeSpecification
from ..specifications.base import OrSpecification
from ..specifications.operators import SpecificationOperator
from .models import Aircraft, Assessment, Flight, TenantRecord, User

if TYPE_CHECKING:
    from ..specifications.base import ISpecification
    from ..specifications.evaluator import MemoryOperatorRegistry

GE = SpecificationOperator.GE
LE = SpecificationOperator.LE

USER_ROLES = frozenset({"admin", "manager", "pilot", "viewer"})


def _upper(value: str) -> str:
    return value.upper()


def _any_pilot(value: Any, operators: MemoryOperatorRegistry) -> ISpecification[Any]:
    """Match a user in any crew seat of a flight."""
    op = (
        SpecificationOperator.IN
        if isinstance(value, list)
        else SpecificationOperator.EQ
    )
    return OrSpecification(
        *(
            AttributeSpecification(seat, op, value, registry=operators)
            for seat in ("pic", "sic", "responsiblePilot")
        )
    )


AIRCRAFT_FILTERS = FilterRegistry(
    "aircraft",
    [
        FilterDefinition(
            "designation",
            target_field="designation",
            allow_multiple=True,
            normalize=_upper,
        ),
        FilterDefinition("type", target_field="type", allow_multiple=True),
        FilterDefinition(
            "defaultAssessment",
            ValueType.ID_REFERENCE,
            target_field="defaultAssessment",
            allow_multiple=True,
        ),
        FilterDefinition(
            "addedAfter",
            ValueType.DATE,
            target_field="dateAdded",
            operator=GE,
            sortable=False,
        ),
        FilterDefinition(
            "addedBefore",
            ValueType.DATE,
            target_field="dateAdded",
            operator=LE,
            sortable=False,
        ),
    ],
    sortable={"dateAdded": "dateAdded"},
    tag_fields={"designation": TagField("designation", _upper)},
    default_sort=[SortField("dateAdded", SortDirection.DESC)],
)


FLIGHT_FILTERS = FilterRegistry(
    "flight",
    [
        FilterDefinition(
            "flightDateFrom",
            ValueType.DATE,
            target_field="flightDate",
            operator=GE,
            sortable=False,
        ),
        FilterDefinition(
            "flightDateTo",
            ValueType.DATE,
            target_field="flightDate",
            operator=LE,
            sortable=False,
        ),
        FilterDefinition(
            "aircraft",
            ValueType.ID_REFERENCE,
            target_field="aircraft",
            allow_multiple=True,
        ),
        FilterDefinition("pic", ValueType.ID_REFERENCE, target_field="pic"),
        FilterDefinition("sic", ValueType.ID_REFERENCE, target_field="sic"),
        FilterDefinition(
            "responsiblePilot",
            ValueType.ID_REFERENCE,
            target_field="responsiblePilot",
            allow_multiple=True,
        ),
        FilterDefinition(
            "pilot",
            ValueType.ID_REFERENCE,
            builder=_any_pilot,
            allow_multiple=True,
        ),
        FilterDefinition(
            "departureAirport",
            ValueType.ID_REFERENCE,
            target_field="departure_airport",
            allow_multiple=True,
        ),
        FilterDefinition(
            "arrivalAirport",
            ValueType.ID_REFERENCE,
            target_field="arrival_airport",
            allow_multiple=True,
        ),
        FilterDefinition(
            "assessment",
            ValueType.ID_REFERENCE,
            target_field="assessment",
            allow_multiple=True,
        ),
        FilterDefinition("customIdentifier", target_field="customIdentifier"),
        FilterDefinition(
            "minScore",
            ValueType.NUMBER,
            target_field="score",
            operator=GE,
            sortable=False,
        ),
        FilterDefinition(
            "maxScore",
            ValueType.NUMBER,
            target_field="score",
            operator=LE,
            sortable=False,
        ),
    ],
    sortable={"flightDate": "flightDate", "score": "score"},
    tag_fields={
        "customIdentifier": "customIdentifier",
        "externalId": "tag.externalId",
        "tripNumber": "tag.tripNumber",
    },
    default_sort=[SortField("flightDate", SortDirection.DESC)],
)


ASSESSMENT_FILTERS = FilterRegistry(
    "assessment",
    [
        FilterDefinition("name", target_field="name"),
        FilterDefinition("isDefault", ValueType.BOOLEAN, target_field="isDefault"),
        FilterDefinition(
            "createdAfter",
            ValueType.DATE,
            target_field="created",
            operator=GE,
            sortable=False,
        ),
    ],
    sortable={"created": "created"},
    default_sort=[SortField("created", SortDirection.DESC)],
)


USER_FILTERS = FilterRegistry(
    "user",
    [
        FilterDefinition(
            "role",
            ValueType.ENUM,
            target_field="role",
            allow_multiple=True,
            choices=USER_ROLES,
        ),
        FilterDefinition("active", ValueType.BOOLEAN, target_field="active"),
        FilterDefinition("email", target_field="email", normalize=str.lower),
        FilterDefinition("lastName", target_field="lastName"),
    ],
    sortable={"firstName": "firstName", "created": "created"},
    tag_fields={"employeeId": "employeeId"},
    default_sort=[SortField("created", SortDirection.DESC)],
)


@dataclass(frozen=True)
class EntityBinding:
    """How one catalog entity maps onto storage."""

    filters: FilterRegistry
    model_cls: type[TenantRecord]
    collection: str
    object_id_fields: frozenset[str]


CATALOG: dict[str, EntityBinding] = {
    "aircraft": EntityBinding(
        AIRCRAFT_FILTERS,
        Aircraft,
        "aircrafts",
        frozenset({"_id", "account", "defaultAssessment"}),
    ),
    "flight": EntityBinding(
        FLIGHT_FILTERS,
        Flight,
        "flights",
        frozenset(
            {
                "_id",
                "account",
                "aircraft",
                "pic",
                "sic",
                "responsiblePilot",
                "departure_airport",
                "arrival_airport",
                "assessment",
            }
        ),
    ),
    "assessment": EntityBinding(
        ASSESSMENT_FILTERS,
        Assessment,
        "assessments",
        frozenset({"_id", "account"}),
    ),
    "user": EntityBinding(
        USER_FILTERS,
        User,
        "users",
        frozenset({"_id", "account"}),
    ),
}
