"""Entity models for the FleetTrack application."""
from fleettrack.models.vehicle import Vehicle, VehicleStatus, FuelType
from fleettrack.models.department import Department
from fleettrack.models.trip import Trip, TripStatus
from fleettrack.models.inspection import Inspection, CHECKLIST_FIELDS
from fleettrack.models.stats import (
    FleetStats, TripStats, DepartmentUtilization, DriverPerformance, FuelBreakdown
)


__all__ = [
    'Vehicle',
    'VehicleStatus',
    'FuelType',
    'Department',
    'Trip',
    'TripStatus',
    'Inspection',
    'CHECKLIST_FIELDS',
    'FleetStats',
    'TripStats',
    'DepartmentUtilization',
    'DriverPerformance',
    'FuelBreakdown',
]
