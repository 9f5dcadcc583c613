"""Shared fixtures: vehicle factory, in-memory catalog, API client."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from drivematch.api.deps import get_jitter_source, get_repository, limiter
from drivematch.main import app
from drivematch.models.vehicle import Vehicle
from drivematch.services.advisor import FixedJitter
from drivematch.services.memory_repository import InMemoryVehicleRepository

SAMPLE_CATALOG = Path(__file__).resolve().parent.parent / "data" / "sample_vehicles.json"


def make_vehicle(vehicle_id: str, **overrides) -> Vehicle:
    """A mid-range petrol manual SUV unless overridden."""
    data = {
        "id": vehicle_id,
        "name": f"Model {vehicle_id}",
        "brand": "Tata",
        "type": "car",
        "price": 1_000_000,
        "engine_power": "100 bhp",
        "torque": "200 Nm",
        "mileage": "18 km/l",
        "fuel_type": "Petrol",
        "transmission": "Manual",
        "body_type": "SUV",
        "performance_score": 70,
        "eco_score": 60,
        "is_trending": False,
    }
    data.update(overrides)
    return Vehicle.model_validate(data)


class CountingRepository:
    """Wraps a repository and records every call made through it."""

    def __init__(self, inner):
        self.inner = inner
        self.calls: list[str] = []

    async def find_by_id(self, vehicle_id):
        self.calls.append("find_by_id")
        return await self.inner.find_by_id(vehicle_id)

    async def find_by_filter(self, query):
        self.calls.append("find_by_filter")
        self.last_query = query
        return await self.inner.find_by_filter(query)

    async def find_trending(self, limit):
        self.calls.append("find_trending")
        self.trending_limit = limit
        return await self.inner.find_trending(limit)

    async def find_by_ids(self, vehicle_ids):
        self.calls.append("find_by_ids")
        return await self.inner.find_by_ids(vehicle_ids)


@pytest.fixture
def sample_repository() -> InMemoryVehicleRepository:
    return InMemoryVehicleRepository.from_json_file(SAMPLE_CATALOG)


@pytest.fixture
def client(sample_repository):
    limiter.enabled = False
    app.dependency_overrides[get_repository] = lambda: sample_repository
    app.dependency_overrides[get_jitter_source] = lambda: FixedJitter(0)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    limiter.enabled = True
