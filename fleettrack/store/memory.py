"""Thread-safe in-process entity store."""

import copy
import threading
from typing import Dict, List, Optional

from fleettrack.models.department import Department
from fleettrack.models.trip import Trip, TripStatus
from fleettrack.models.vehicle import Vehicle
from fleettrack.services.errors import NotFoundError, VehicleUnavailableError
from fleettrack.store.base import EntityStore


class InMemoryStore(EntityStore):
    """
    Keeps every record in dictionaries guarded by a single lock.

    Reads hand out deep copies so callers work on snapshots. Creating a
    second active trip for a vehicle is refused at write time.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._vehicles: Dict[str, Vehicle] = {}
        self._departments: Dict[str, Department] = {}
        self._trips: Dict[str, Trip] = {}

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        with self._lock:
            return copy.deepcopy(self._vehicles.get(vehicle_id))

    def list_vehicles(self) -> List[Vehicle]:
        with self._lock:
            return copy.deepcopy(list(self._vehicles.values()))

    def save_vehicle(self, vehicle: Vehicle) -> Vehicle:
        with self._lock:
            self._vehicles[vehicle.id] = copy.deepcopy(vehicle)
            return copy.deepcopy(vehicle)

    def get_department(self, department_id: str) -> Optional[Department]:
        with self._lock:
            return copy.deepcopy(self._departments.get(department_id))

    def list_departments(self) -> List[Department]:
        with self._lock:
            return copy.deepcopy(list(self._departments.values()))

    def save_department(self, department: Department) -> Department:
        with self._lock:
            self._departments[department.id] = copy.deepcopy(department)
            return copy.deepcopy(department)

    def get_trip(self, trip_id: str) -> Optional[Trip]:
        with self._lock:
            return copy.deepcopy(self._trips.get(trip_id))

    def list_trips(self, vehicle_id: Optional[str] = None,
                   status: Optional[TripStatus] = None) -> List[Trip]:
        with self._lock:
            trips = [
                trip for trip in self._trips.values()
                if (vehicle_id is None or trip.vehicle_id == vehicle_id)
                and (status is None or trip.status is status)
            ]
            return copy.deepcopy(trips)

    def create_trip(self, trip: Trip) -> Trip:
        with self._lock:
            if trip.is_active and self._has_other_active_trip(trip):
                raise VehicleUnavailableError(
                    trip.vehicle_id, VehicleUnavailableError.ALREADY_ON_TRIP)
            self._trips[trip.id] = copy.deepcopy(trip)
            return copy.deepcopy(trip)

    def save_trip(self, trip: Trip) -> Trip:
        with self._lock:
            if trip.id not in self._trips:
                raise NotFoundError("trip", trip.id)
            if trip.is_active and self._has_other_active_trip(trip):
                raise VehicleUnavailableError(
                    trip.vehicle_id, VehicleUnavailableError.ALREADY_ON_TRIP)
            self._trips[trip.id] = copy.deepcopy(trip)
            return copy.deepcopy(trip)

    def _has_other_active_trip(self, trip: Trip) -> bool:
        return any(
            other.vehicle_id == trip.vehicle_id and other.is_active and other.id != trip.id
            for other in self._trips.values()
        )
