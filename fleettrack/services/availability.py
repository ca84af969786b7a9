"""Checks whether a vehicle may start a trip."""

import logging

from fleettrack.models.vehicle import Vehicle, VehicleStatus
from fleettrack.services.errors import NotFoundError, VehicleUnavailableError
from fleettrack.store.base import EntityStore

logger = logging.getLogger(__name__)

_STATUS_REASONS = {
    VehicleStatus.MAINTENANCE: VehicleUnavailableError.MAINTENANCE,
    VehicleStatus.INACTIVE: VehicleUnavailableError.INACTIVE,
}


class AvailabilityGuard:
    """Read-only gate in front of trip creation."""

    def __init__(self, store: EntityStore):
        self.store = store

    def can_start(self, vehicle_id: str) -> Vehicle:
        """
        Confirm a vehicle can start a trip.

        Callers creating a trip must hold the vehicle's lock across this
        check and the creation.

        Args:
            vehicle_id: ID of the vehicle to check

        Returns:
            Vehicle: The eligible vehicle

        Raises:
            NotFoundError: If the vehicle does not exist
            VehicleUnavailableError: If the vehicle is not active or already on a trip
        """
        vehicle = self.store.get_vehicle(vehicle_id)
        if vehicle is None:
            raise NotFoundError("vehicle", vehicle_id)

        if vehicle.status is not VehicleStatus.ACTIVE:
            reason = _STATUS_REASONS[vehicle.status]
            logger.warning(f"Vehicle {vehicle_id} rejected for trip start: {reason}")
            raise VehicleUnavailableError(vehicle_id, reason)

        active_trip = self.store.active_trip_for(vehicle_id)
        if active_trip is not None:
            logger.warning(
                f"Vehicle {vehicle_id} rejected for trip start: already on trip {active_trip.id}")
            raise VehicleUnavailableError(vehicle_id, VehicleUnavailableError.ALREADY_ON_TRIP)

        return vehicle
