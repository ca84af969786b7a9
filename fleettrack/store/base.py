"""Contract every FleetTrack entity store implements."""

from abc import ABC, abstractmethod
from typing import List, Optional

from fleettrack.models.department import Department
from fleettrack.models.trip import Trip, TripStatus
from fleettrack.models.vehicle import Vehicle


class EntityStore(ABC):
    """
    Durable record of vehicles, departments and trips.

    Lookups return None for missing records. Returned entities are copies;
    changes only reach the store through the save/create methods. Transport
    or backend failures are raised as StoreUnavailableError.
    """

    @abstractmethod
    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        ...

    @abstractmethod
    def list_vehicles(self) -> List[Vehicle]:
        ...

    @abstractmethod
    def save_vehicle(self, vehicle: Vehicle) -> Vehicle:
        """Insert or replace a vehicle."""

    @abstractmethod
    def get_department(self, department_id: str) -> Optional[Department]:
        ...

    @abstractmethod
    def list_departments(self) -> List[Department]:
        ...

    @abstractmethod
    def save_department(self, department: Department) -> Department:
        ...

    @abstractmethod
    def get_trip(self, trip_id: str) -> Optional[Trip]:
        ...

    @abstractmethod
    def list_trips(self, vehicle_id: Optional[str] = None,
                   status: Optional[TripStatus] = None) -> List[Trip]:
        """Trips, optionally narrowed to one vehicle and/or one status."""

    @abstractmethod
    def create_trip(self, trip: Trip) -> Trip:
        ...

    @abstractmethod
    def save_trip(self, trip: Trip) -> Trip:
        """Replace an existing trip."""

    def active_trip_for(self, vehicle_id: str) -> Optional[Trip]:
        """The open trip on a vehicle, if any."""
        trips = self.list_trips(vehicle_id=vehicle_id, status=TripStatus.ACTIVE)
        return trips[0] if trips else None
