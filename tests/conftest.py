"""Shared fixtures for the flightsafe-query test suite."""

from __future__ import annotations

from datetime import datetime

import pytest

from flightsafe_query.entities.catalog import AIRCRAFT_FILTERS, FLIGHT_FILTERS
from flightsafe_query.entities.models import Aircraft, Flight
from flightsafe_query.filtering.compiler import DynamicFilterParser
from flightsafe_query.persistence.connection import MongoConnectionManager
from flightsafe_query.persistence.memory_store import InMemoryRecordStore
from flightsafe_query.persistence.repository import ScopedRepository
from flightsafe_query.specifications.operators_memory import build_default_registry

TENANT_A = "acct_alpha"
TENANT_B = "acct_bravo"


@pytest.fixture
def registry():
    """Default in-memory operator registry for building specs."""
    return build_default_registry()


def aircraft_docs() -> list[dict]:
    """Five aircraft for tenant A, two for tenant B (one shares a designation)."""
    return [
        {
            "_id": "ac1",
            "account": TENANT_A,
            "designation": "N123AB",
            "type": "C172",
            "dateAdded": datetime(2024, 1, 1),
        },
        {
            "_id": "ac2",
            "account": TENANT_A,
            "designation": "N200CD",
            "type": "PA28",
            "dateAdded": datetime(2024, 2, 1),
        },
        {
            "_id": "ac3",
            "account": TENANT_A,
            "designation": "N300EF",
            "type": "C172",
            "dateAdded": datetime(2024, 2, 1),
        },
        {
            "_id": "ac4",
            "account": TENANT_A,
            "designation": "N400GH",
            "type": "SR22",
            "dateAdded": datetime(2024, 3, 1),
        },
        {
            "_id": "ac5",
            "account": TENANT_A,
            "designation": "N500IJ",
            "type": "C172",
            "dateAdded": None,
        },
        {
            "_id": "bc1",
            "account": TENANT_B,
            "designation": "N123AB",
            "type": "C172",
            "dateAdded": datetime(2024, 1, 5),
        },
        {
            "_id": "bc2",
            "account": TENANT_B,
            "designation": "N999ZZ",
            "type": "PA28",
            "dateAdded": datetime(2024, 1, 6),
        },
    ]


def flight_docs() -> list[dict]:
    return [
        {
            "_id": "fl1",
            "account": TENANT_A,
            "flightDate": datetime(2024, 5, 1),
            "aircraft": "ac1",
            "pic": "u1",
            "sic": "u2",
            "responsiblePilot": "u1",
            "customIdentifier": "TRIP100",
            "score": 12,
            "tag": {"externalId": "EXT1", "tripNumber": "T100"},
        },
        {
            "_id": "fl2",
            "account": TENANT_A,
            "flightDate": datetime(2024, 5, 2),
            "aircraft": "ac2",
            "pic": "u3",
            "sic": "u1",
            "responsiblePilot": "u3",
            "customIdentifier": "TRIP200",
            "score": 30,
            "tag": {"externalId": "EXT2"},
        },
        {
            "_id": "fl3",
            "account": TENANT_A,
            "flightDate": datetime(2024, 5, 3),
            "aircraft": "ac1",
            "pic": "u3",
            "sic": "u4",
            "responsiblePilot": "u3",
            "score": 45.5,
            "tag": {},
        },
        {
            "_id": "fl9",
            "account": TENANT_B,
            "flightDate": datetime(2024, 5, 1),
            "aircraft": "bc1",
            "pic": "u1",
            "customIdentifier": "TRIP100",
            "score": 99,
            "tag": {"externalId": "EXT1"},
        },
    ]


@pytest.fixture
def aircraft_store() -> InMemoryRecordStore:
    return InMemoryRecordStore(aircraft_docs())


@pytest.fixture
def flight_store() -> InMemoryRecordStore:
    return InMemoryRecordStore(flight_docs())


@pytest.fixture
def aircraft_repo(aircraft_store, registry) -> ScopedRepository[Aircraft]:
    return ScopedRepository(
        aircraft_store,
        AIRCRAFT_FILTERS,
        Aircraft,
        compiler=DynamicFilterParser(registry),
    )


@pytest.fixture
def flight_repo(flight_store) -> ScopedRepository[Flight]:
    return ScopedRepository(flight_store, FLIGHT_FILTERS, Flight)


@pytest.fixture
async def mongo_connection():
    """MongoConnectionManager backed by mongomock-motor."""
    mongomock_motor = pytest.importorskip("mongomock_motor")

    connection = MongoConnectionManager("mongodb://mock:27017", database="test_db")
    connection._client = mongomock_motor.AsyncMongoMockClient()
    yield connection
    connection._client = None
