"""Vehicle queries for FleetTrack."""

from typing import Any, Dict, List, Optional

from fleettrack.models.vehicle import Vehicle, VehicleStatus
from fleettrack.services.availability import AvailabilityGuard
from fleettrack.services.errors import NotFoundError, VehicleUnavailableError
from fleettrack.store.base import EntityStore


class VehicleService:
    """Read-side operations on the fleet's vehicles."""

    def __init__(self, store: EntityStore):
        self.store = store
        self.guard = AvailabilityGuard(store)

    def get_vehicle(self, vehicle_id: str) -> Vehicle:
        """
        Get a vehicle by its ID.

        Raises:
            NotFoundError: If the vehicle does not exist
        """
        vehicle = self.store.get_vehicle(vehicle_id)
        if vehicle is None:
            raise NotFoundError("vehicle", vehicle_id)
        return vehicle

    def list_vehicles(self, status: Optional[VehicleStatus] = None,
                      department_id: Optional[str] = None) -> List[Vehicle]:
        vehicles = [
            vehicle for vehicle in self.store.list_vehicles()
            if (status is None or vehicle.status is status)
            and (department_id is None or vehicle.department_id == department_id)
        ]
        return sorted(vehicles, key=lambda vehicle: vehicle.name.lower())

    def search_vehicles(self, term: str) -> List[Vehicle]:
        """
        Vehicles whose name, plate, make, model, department name or assigned
        driver contains ``term`` (case-insensitive).
        """
        vehicles = self.list_vehicles()
        term = (term or "").strip().lower()
        if not term:
            return vehicles

        departments = {dept.id: dept.name for dept in self.store.list_departments()}

        def matches(vehicle: Vehicle) -> bool:
            fields = (
                vehicle.name,
                vehicle.number_plate,
                vehicle.make,
                vehicle.model,
                departments.get(vehicle.department_id),
                vehicle.assigned_driver_id,
            )
            return any(term in value.lower() for value in fields if value)

        return [vehicle for vehicle in vehicles if matches(vehicle)]

    def check_availability(self, vehicle_id: str) -> Dict[str, Any]:
        """
        Report whether a vehicle could start a trip right now.

        This is advisory only; starting a trip re-checks under the vehicle lock.

        Raises:
            NotFoundError: If the vehicle does not exist
        """
        try:
            self.guard.can_start(vehicle_id)
        except VehicleUnavailableError as e:
            return {"vehicle_id": vehicle_id, "available": False, "reason": e.reason}
        return {"vehicle_id": vehicle_id, "available": True, "reason": None}
