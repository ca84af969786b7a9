"""Fleet and trip statistics for the FleetTrack dashboards."""

from collections import Counter, defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from fleettrack.models.department import Department
from fleettrack.models.stats import (
    DepartmentUtilization, DriverPerformance, FleetStats, FuelBreakdown, TripStats
)
from fleettrack.models.timestamps import parse_datetime
from fleettrack.models.trip import Trip, TripStatus
from fleettrack.models.vehicle import Vehicle, VehicleStatus
from fleettrack.services import calculator
from fleettrack.store.base import EntityStore

# Inclusive (start, end) bounds on trip start_time; either side may be None
Window = Tuple[Optional[datetime], Optional[datetime]]


def fleet_stats(vehicles: Sequence[Vehicle]) -> FleetStats:
    """Counts by status plus the mean fuel level of vehicles reporting one."""
    fuel_levels = [vehicle.fuel_level for vehicle in vehicles if vehicle.fuel_level is not None]
    return FleetStats(
        total=len(vehicles),
        active=sum(1 for vehicle in vehicles if vehicle.status is VehicleStatus.ACTIVE),
        maintenance=sum(1 for vehicle in vehicles if vehicle.status is VehicleStatus.MAINTENANCE),
        avg_fuel=sum(fuel_levels) / len(fuel_levels) if fuel_levels else 0,
    )


def trip_stats(trips: Iterable[Trip], window: Optional[Window] = None) -> TripStats:
    """
    Summarise trips.

    avg_duration is the mean length in minutes of completed trips with both
    timestamps; total_distance sums calculated_distance over completed trips.
    """
    trips = filter_window(trips, window)
    completed = [trip for trip in trips if trip.status is TripStatus.COMPLETED]

    durations = [calculator.trip_duration(trip) for trip in completed]
    durations = [duration for duration in durations if duration is not None]

    return TripStats(
        active=sum(1 for trip in trips if trip.status is TripStatus.ACTIVE),
        completed=len(completed),
        avg_duration=sum(durations) / len(durations) if durations else 0,
        total_distance=sum(trip.calculated_distance or 0 for trip in completed),
    )


def department_utilization(departments: Iterable[Department], vehicles: Sequence[Vehicle],
                           trips: Iterable[Trip],
                           window: Optional[Window] = None) -> List[DepartmentUtilization]:
    """Vehicle and trip usage for each department."""
    trips = filter_window(trips, window)
    vehicle_departments = {vehicle.id: vehicle.department_id for vehicle in vehicles}

    results = []
    for dept in departments:
        dept_vehicles = [vehicle for vehicle in vehicles if vehicle.department_id == dept.id]
        dept_trips = [trip for trip in trips if vehicle_departments.get(trip.vehicle_id) == dept.id]
        active_vehicles = sum(1 for vehicle in dept_vehicles if vehicle.is_active)

        results.append(DepartmentUtilization(
            id=dept.id,
            name=dept.name,
            code=dept.code,
            total_vehicles=len(dept_vehicles),
            active_vehicles=active_vehicles,
            total_trips=len(dept_trips),
            completed_trips=sum(1 for trip in dept_trips if trip.is_completed),
            utilization_rate=round(active_vehicles / len(dept_vehicles) * 100) if dept_vehicles else 0,
            avg_trips_per_vehicle=round(len(dept_trips) / len(dept_vehicles), 2) if dept_vehicles else 0,
        ))
    return results


def trip_status_counts(trips: Iterable[Trip], window: Optional[Window] = None) -> Dict[str, int]:
    """Number of trips in each status, cancelled included."""
    trips = filter_window(trips, window)
    return {
        status.value: sum(1 for trip in trips if trip.status is status)
        for status in TripStatus
    }


def driver_performance(trips: Iterable[Trip],
                       window: Optional[Window] = None) -> List[DriverPerformance]:
    """Per-driver trip totals, busiest driver (by distance) first."""
    by_driver: Dict[str, List[Trip]] = defaultdict(list)
    for trip in filter_window(trips, window):
        by_driver[trip.driver_id or trip.user_id].append(trip)

    results = []
    for driver_id, driver_trips in by_driver.items():
        completed = [trip for trip in driver_trips if trip.is_completed]
        durations = [calculator.trip_duration(trip) for trip in completed]
        durations = [duration for duration in durations if duration is not None]

        results.append(DriverPerformance(
            driver_id=driver_id,
            total_trips=len(driver_trips),
            completed_trips=len(completed),
            cancelled_trips=sum(1 for trip in driver_trips if trip.status is TripStatus.CANCELLED),
            total_distance=sum(_distance(trip) for trip in completed),
            total_duration=sum(durations),
            avg_duration=sum(durations) / len(durations) if durations else 0,
        ))
    return sorted(results, key=lambda result: (-result.total_distance, result.driver_id))


def fuel_breakdown(vehicles: Sequence[Vehicle], trips: Iterable[Trip],
                   window: Optional[Window] = None) -> FuelBreakdown:
    """
    Fuel capacity of the fleet by fuel type, plus fuel used on completed trips.

    Consumption is start minus end fuel level, so a trip that ended with more
    fuel than it started with lowers the total. Trips missing either reading
    are skipped.
    """
    fuel_types = {vehicle.id: vehicle.fuel_type.value for vehicle in vehicles}
    by_fuel_type = Counter(vehicle.fuel_type.value for vehicle in vehicles)
    total_capacity = sum(vehicle.fuel_capacity for vehicle in vehicles)

    consumption: Dict[str, float] = defaultdict(float)
    for trip in filter_window(trips, window):
        used = calculator.fuel_consumption(trip) if trip.is_completed else None
        if used is not None:
            consumption[fuel_types.get(trip.vehicle_id, "unknown")] += used

    return FuelBreakdown(
        total_vehicles=len(vehicles),
        by_fuel_type=dict(by_fuel_type),
        total_capacity=total_capacity,
        avg_capacity=round(total_capacity / len(vehicles), 2) if vehicles else 0,
        total_consumption=sum(consumption.values()),
        consumption_by_fuel_type=dict(consumption),
    )


def _distance(trip: Trip) -> float:
    if trip.calculated_distance is not None:
        return trip.calculated_distance
    return calculator.trip_distance(trip) or 0


def filter_window(trips: Iterable[Trip], window: Optional[Window]) -> List[Trip]:
    if window is None:
        return list(trips)
    start, end = (parse_datetime(bound) for bound in window)
    return [
        trip for trip in trips
        if (start is None or trip.start_time >= start) and (end is None or trip.start_time <= end)
    ]


class StatsService:
    """Computes dashboard statistics from a store snapshot."""

    def __init__(self, store: EntityStore):
        self.store = store

    def fleet(self) -> FleetStats:
        return fleet_stats(self.store.list_vehicles())

    def trips(self, window: Optional[Window] = None) -> TripStats:
        return trip_stats(self.store.list_trips(), window)

    def departments(self, window: Optional[Window] = None) -> List[DepartmentUtilization]:
        return department_utilization(
            self.store.list_departments(), self.store.list_vehicles(),
            self.store.list_trips(), window)

    def trip_statuses(self, window: Optional[Window] = None) -> Dict[str, int]:
        return trip_status_counts(self.store.list_trips(), window)

    def drivers(self, window: Optional[Window] = None) -> List[DriverPerformance]:
        return driver_performance(self.store.list_trips(), window)

    def fuel(self, window: Optional[Window] = None) -> FuelBreakdown:
        return fuel_breakdown(self.store.list_vehicles(), self.store.list_trips(), window)
