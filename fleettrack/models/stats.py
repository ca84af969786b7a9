"""Aggregate statistics shapes for FleetTrack dashboards."""

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class FleetStats:
    """Fleet summary: counts by status and the average fuel level."""
    total: int
    active: int
    maintenance: int
    avg_fuel: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "active": self.active,
            "maintenance": self.maintenance,
            "avgFuel": self.avg_fuel,
        }


@dataclass(frozen=True)
class TripStats:
    """Trip summary; avg_duration is in minutes."""
    active: int
    completed: int
    avg_duration: float
    total_distance: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "active": self.active,
            "completed": self.completed,
            "avgDuration": self.avg_duration,
            "totalDistance": self.total_distance,
        }


@dataclass(frozen=True)
class DepartmentUtilization:
    """Per-department vehicle and trip usage."""
    id: str
    name: str
    code: str
    total_vehicles: int
    active_vehicles: int
    total_trips: int
    completed_trips: int
    utilization_rate: int
    avg_trips_per_vehicle: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "totalVehicles": self.total_vehicles,
            "activeVehicles": self.active_vehicles,
            "totalTrips": self.total_trips,
            "completedTrips": self.completed_trips,
            "utilizationRate": self.utilization_rate,
            "avgTripsPerVehicle": self.avg_trips_per_vehicle,
        }


@dataclass(frozen=True)
class DriverPerformance:
    """
    Trip totals for one driver.

    Trips without a driver are credited to the user who opened them.
    Distance and durations only count completed trips; durations are in
    minutes.
    """
    driver_id: str
    total_trips: int
    completed_trips: int
    cancelled_trips: int
    total_distance: float
    total_duration: float
    avg_duration: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "driverId": self.driver_id,
            "totalTrips": self.total_trips,
            "completedTrips": self.completed_trips,
            "cancelledTrips": self.cancelled_trips,
            "totalDistance": self.total_distance,
            "totalDuration": self.total_duration,
            "avgDuration": self.avg_duration,
        }


@dataclass(frozen=True)
class FuelBreakdown:
    """Fleet fuel capacity by fuel type and fuel used on completed trips."""
    total_vehicles: int
    by_fuel_type: Dict[str, int]
    total_capacity: float
    avg_capacity: float
    total_consumption: float
    consumption_by_fuel_type: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalVehicles": self.total_vehicles,
            "byFuelType": dict(self.by_fuel_type),
            "totalFuelCapacity": self.total_capacity,
            "avgFuelCapacity": self.avg_capacity,
            "totalConsumption": self.total_consumption,
            "consumptionByFuelType": dict(self.consumption_by_fuel_type),
        }
