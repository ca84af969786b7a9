"""Odometer, fuel and duration arithmetic for trips."""

from typing import Optional

from fleettrack.models.trip import Trip
from fleettrack.services.errors import InvalidReadingError


def calculate_distance(start_odometer: float, end_odometer: float) -> float:
    """
    Distance covered between two odometer readings.

    Raises:
        InvalidReadingError: If the end reading is lower than the start reading
    """
    distance = end_odometer - start_odometer
    if distance < 0:
        raise InvalidReadingError(
            f"End odometer {end_odometer} is lower than start odometer {start_odometer}")
    return distance


def fuel_delta(fuel_level_start: float, fuel_level_end: float) -> float:
    """Change in fuel level; negative values mean fuel was used."""
    return fuel_level_end - fuel_level_start


def trip_distance(trip: Trip) -> Optional[float]:
    """Distance for a trip, or None when either odometer reading is missing."""
    if trip.start_odometer is None or trip.end_odometer is None:
        return None
    return calculate_distance(trip.start_odometer, trip.end_odometer)


def trip_fuel_delta(trip: Trip) -> Optional[float]:
    if trip.fuel_level_start is None or trip.fuel_level_end is None:
        return None
    return fuel_delta(trip.fuel_level_start, trip.fuel_level_end)


def fuel_consumption(trip: Trip) -> Optional[float]:
    """Fuel used on a trip (start minus end), or None without both readings."""
    if trip.fuel_level_start is None or trip.fuel_level_end is None:
        return None
    return trip.fuel_level_start - trip.fuel_level_end


def trip_duration(trip: Trip) -> Optional[float]:
    """Trip duration in minutes, or None while the trip has no end time."""
    if trip.start_time is None or trip.end_time is None:
        return None
    return (trip.end_time - trip.start_time).total_seconds() / 60
