from .catalog import (
    AIRCRAFT_FILTERS,
    ASSESSMENT_FILTERS,
    CATALOG,
    FLIGHT_FILTERS,
    USER_FILTERS,
    EntityBinding,
)
from .models import Aircraft, Assessment, Flight, TenantRecord, User

__all__ = [
    "AIRCRAFT_FILTERS",
    "ASSESSMENT_FILTERS",
    "CATALOG",
    "FLIGHT_FILTERS",
    "USER_FILTERS",
    "Aircraft",
    "Assessment",
    "EntityBinding",
    "Flight",
    "TenantRecord",
    "User",
]
