"""Record models returned by the repositories.

Field names follow the stored documents, which use the legacy
application's mixed camelCase / snake_case naming.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TenantRecord(BaseModel):
    """Base for every tenant-owned record."""

    model_config = ConfigDict(extra="ignore")

    id: str
    account: str


class Aircraft(TenantRecord):
    designation: str
    type: str = "Undefined Type"
    dateAdded: datetime | None = None
    defaultAssessment: str | None = None

    @field_validator("designation")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.strip().upper()


class Flight(TenantRecord):
    flightDate: datetime | None = None
    aircraft: str | None = None
    pic: str | None = None
    sic: str | None = None
    fakeSic: dict[str, Any] | None = None
    responsiblePilot: str | None = None
    departure_airport: str | None = None
    arrival_airport: str | None = None
    assessment: str | None = None
    customIdentifier: str | None = None
    score: float | None = None
    tag: dict[str, Any] = Field(default_factory=dict)


class Assessment(TenantRecord):
    name: str = ""
    isDefault: bool = False
    created: datetime | None = None


class User(TenantRecord):
    email: str
    firstName: str = ""
    lastName: str = ""
    role: str = "pilot"
    active: bool = True
    employeeId: str | None = None
    created: datetime | None = None
