"""Shared fixtures for the FleetTrack tests."""

import pytest

from fleettrack.models.department import Department
from fleettrack.models.vehicle import FuelType, Vehicle, VehicleStatus
from fleettrack.store.memory import InMemoryStore


@pytest.fixture
def store():
    """An empty in-memory store."""
    return InMemoryStore()


@pytest.fixture
def make_vehicle():
    """Factory for vehicles with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "name": f"Van {counter['n']}",
            "number_plate": f"KAA {100 + counter['n']}X",
            "make": "Toyota",
            "model": "Hiace",
            "year": 2021,
            "fuel_type": FuelType.DIESEL,
            "fuel_capacity": 70,
            "fuel_level": 50,
            "current_odometer": 100,
            "status": VehicleStatus.ACTIVE,
        }
        data.update(overrides)
        return Vehicle(**data)
    return _make


@pytest.fixture
def department():
    return Department(id="dept-ops", name="Operations", code="OPS")
