"""Tests for the trip odometer/fuel calculator."""

from datetime import datetime, timedelta, timezone

import pytest

from fleettrack.models.trip import Trip
from fleettrack.services import calculator
from fleettrack.services.errors import InvalidReadingError

T1 = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def test_calculate_distance():
    assert calculator.calculate_distance(100, 120) == 20
    assert calculator.calculate_distance(100, 100) == 0


def test_calculate_distance_rejects_negative():
    with pytest.raises(InvalidReadingError):
        calculator.calculate_distance(100, 90)


def test_fuel_delta_may_be_negative():
    assert calculator.fuel_delta(50, 35) == -15
    assert calculator.fuel_delta(20, 60) == 40


def test_trip_distance_needs_both_readings():
    trip = Trip(vehicle_id="v", user_id="u", start_odometer=100)
    assert calculator.trip_distance(trip) is None

    trip.end_odometer = 130
    assert calculator.trip_distance(trip) == 30


def test_fuel_consumption():
    trip = Trip(vehicle_id="v", user_id="u", fuel_level_start=50)
    assert calculator.fuel_consumption(trip) is None
    assert calculator.trip_fuel_delta(trip) is None

    trip.fuel_level_end = 42
    assert calculator.fuel_consumption(trip) == 8
    assert calculator.trip_fuel_delta(trip) == -8


def test_trip_duration_in_minutes():
    trip = Trip(vehicle_id="v", user_id="u", start_time=T1)
    assert calculator.trip_duration(trip) is None

    trip.end_time = T1 + timedelta(hours=1, minutes=30)
    assert calculator.trip_duration(trip) == 90
