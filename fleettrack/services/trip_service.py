"""Trip lifecycle service for FleetTrack."""

import copy
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from fleettrack.models.inspection import CHECKLIST_FIELDS, Inspection
from fleettrack.models.timestamps import parse_datetime, utcnow
from fleettrack.models.trip import Trip, TripStatus
from fleettrack.models.vehicle import Vehicle
from fleettrack.services import calculator
from fleettrack.services.availability import AvailabilityGuard
from fleettrack.services.errors import (
    InvalidReadingError,
    InvalidStateTransitionError,
    InvalidTimestampError,
    NotFoundError,
    StoreUnavailableError,
)
from fleettrack.services.locks import KeyedLock
from fleettrack.store.base import EntityStore

logger = logging.getLogger(__name__)

Timestamp = Union[str, datetime, None]


class TripService:
    """
    Opens, closes and cancels trips.

    Every operation that touches a trip runs under the lock of the trip's
    vehicle, so a vehicle never gets two active trips and end-of-trip
    readings never interleave with another update of the same vehicle.
    """

    def __init__(self, store: EntityStore, locks: Optional[KeyedLock] = None):
        self.store = store
        self.locks = locks if locks is not None else KeyedLock()
        self.guard = AvailabilityGuard(store)

    def start_trip(self, vehicle_id: str, user_id: str, driver_id: Optional[str] = None,
                   purpose: Optional[str] = None, trip_purpose: Optional[str] = None,
                   start_odometer: Optional[float] = None,
                   fuel_level_start: Optional[float] = None,
                   start_time: Timestamp = None) -> Trip:
        """
        Open a trip on a vehicle.

        When no start readings are given the vehicle's last known odometer
        and fuel level are used.

        Args:
            vehicle_id: ID of the vehicle to check out
            user_id: ID of the user opening the trip
            driver_id: ID of the driver, if someone else drives
            purpose: Purpose of the trip
            trip_purpose: Purpose as sent by newer clients, stored separately
            start_odometer: Odometer reading at start
            fuel_level_start: Fuel level at start
            start_time: When the trip started, defaults to now

        Returns:
            Trip: The new active trip

        Raises:
            NotFoundError: If the vehicle does not exist
            VehicleUnavailableError: If the vehicle cannot start a trip
            InvalidReadingError: If a start reading is out of range
            StoreUnavailableError: If the store or the vehicle lock times out
        """
        with self.locks.hold(vehicle_id):
            vehicle = self.guard.can_start(vehicle_id)

            if start_odometer is None:
                start_odometer = vehicle.current_odometer
            else:
                _check_odometer(vehicle, start_odometer)

            if fuel_level_start is None:
                fuel_level_start = vehicle.fuel_level
            else:
                _check_fuel_level(vehicle, fuel_level_start)

            trip = Trip(
                vehicle_id=vehicle_id,
                user_id=user_id,
                driver_id=driver_id,
                purpose=purpose,
                trip_purpose=trip_purpose,
                start_time=parse_datetime(start_time) or utcnow(),
                start_odometer=start_odometer,
                fuel_level_start=fuel_level_start,
            )
            created = self.store.create_trip(trip)

        logger.info(f"Trip {created.id} started on vehicle {vehicle_id} by user {user_id}")
        return created

    def end_trip(self, trip_id: str, end_odometer: Optional[float] = None,
                 fuel_level_end: Optional[float] = None, end_time: Timestamp = None,
                 damage_report: Optional[str] = None,
                 inspection: Optional[Dict[str, Any]] = None) -> Trip:
        """
        Complete an active trip and carry its closing readings to the vehicle.

        The trip is written first. If the vehicle update then fails the trip
        is put back to active, so the end can be retried.

        Args:
            trip_id: ID of the trip to complete
            end_odometer: Odometer reading at the end
            fuel_level_end: Fuel level at the end
            end_time: When the trip ended, defaults to now
            damage_report: Damage noted by the driver
            inspection: Optional end-of-trip inspection, as keyword arguments
                for record_inspection (inspection_type, checklist items, notes)

        Returns:
            Trip: The completed trip

        Raises:
            NotFoundError: If the trip or its vehicle does not exist
            InvalidStateTransitionError: If the trip is not active
            InvalidTimestampError: If end_time is before start_time
            InvalidReadingError: If a closing reading is out of order or range
            StoreUnavailableError: If the store or the vehicle lock times out
        """
        vehicle_id = self._require_trip(trip_id).vehicle_id

        with self.locks.hold(vehicle_id):
            trip = self._require_trip(trip_id)
            _require_active(trip, "end")

            end_time = parse_datetime(end_time) or utcnow()
            if end_time < trip.start_time:
                raise InvalidTimestampError(
                    f"End time {end_time.isoformat()} is before start time "
                    f"{trip.start_time.isoformat()}")

            vehicle = self._require_vehicle(vehicle_id)
            distance = None
            if end_odometer is not None:
                if trip.start_odometer is not None:
                    distance = calculator.calculate_distance(trip.start_odometer, end_odometer)
                _check_odometer(vehicle, end_odometer)
            if fuel_level_end is not None:
                _check_fuel_level(vehicle, fuel_level_end)

            closing_inspection = None
            if inspection is not None:
                closing_inspection = _build_inspection(trip, **inspection)

            active = copy.deepcopy(trip)
            trip.complete(
                end_time=end_time,
                end_odometer=end_odometer,
                fuel_level_end=fuel_level_end,
                calculated_distance=distance,
                damage_report=damage_report,
            )
            if closing_inspection is not None:
                trip.add_inspection(closing_inspection)
            saved = self.store.save_trip(trip)

            if end_odometer is not None or fuel_level_end is not None:
                if end_odometer is not None:
                    vehicle.current_odometer = end_odometer
                if fuel_level_end is not None:
                    vehicle.fuel_level = fuel_level_end
                vehicle.updated_at = utcnow()
                try:
                    self.store.save_vehicle(vehicle)
                except StoreUnavailableError:
                    self._reopen(active)
                    raise

        logger.info(f"Trip {trip_id} completed, distance {distance}")
        return saved

    def cancel_trip(self, trip_id: str, reason: Optional[str] = None) -> Trip:
        """
        Cancel an active trip. The vehicle's readings are left untouched.

        Raises:
            NotFoundError: If the trip does not exist
            InvalidStateTransitionError: If the trip is not active
        """
        vehicle_id = self._require_trip(trip_id).vehicle_id

        with self.locks.hold(vehicle_id):
            trip = self._require_trip(trip_id)
            _require_active(trip, "cancel")

            trip.cancel(end_time=max(utcnow(), trip.start_time), reason=reason)
            saved = self.store.save_trip(trip)

        logger.info(f"Trip {trip_id} cancelled" + (f": {reason}" if reason else ""))
        return saved

    def record_inspection(self, trip_id: str, inspection_type: str,
                          notes: Optional[str] = None, **checklist: bool) -> Inspection:
        """
        Record an inspection against an active trip.

        Args:
            trip_id: ID of the trip
            inspection_type: Kind of inspection, e.g. "pre_trip"
            notes: Optional remarks
            **checklist: Checklist answers; items left out count as not good

        Returns:
            Inspection: The recorded inspection

        Raises:
            NotFoundError: If the trip does not exist
            InvalidStateTransitionError: If the trip is completed or cancelled
            ValueError: If an unknown checklist item is given
        """
        vehicle_id = self._require_trip(trip_id).vehicle_id

        with self.locks.hold(vehicle_id):
            trip = self._require_trip(trip_id)
            _require_active(trip, "inspect")

            inspection = _build_inspection(
                trip, inspection_type=inspection_type, notes=notes, **checklist)
            trip.add_inspection(inspection)
            self.store.save_trip(trip)

        if inspection.needs_service:
            logger.warning(
                f"Inspection on trip {trip_id} flagged vehicle {vehicle_id} for service: "
                f"{', '.join(inspection.failed_items())}")
        return inspection

    def get_trip(self, trip_id: str) -> Trip:
        """
        Get a trip by its ID.

        Raises:
            NotFoundError: If the trip does not exist
        """
        return self._require_trip(trip_id)

    def list_trips(self, status: Optional[TripStatus] = None,
                   vehicle_id: Optional[str] = None) -> List[Trip]:
        """Trips, newest first."""
        trips = self.store.list_trips(vehicle_id=vehicle_id, status=status)
        return sorted(trips, key=lambda trip: trip.start_time, reverse=True)

    def search_trips(self, term: str, status: Optional[TripStatus] = None) -> List[Trip]:
        """
        Trips whose vehicle plate, user, driver or purpose contains ``term``.

        Matching is case-insensitive; a blank term returns every trip.
        """
        trips = self.list_trips(status=status)
        term = (term or "").strip().lower()
        if not term:
            return trips

        plates = {vehicle.id: vehicle.number_plate for vehicle in self.store.list_vehicles()}

        def matches(trip: Trip) -> bool:
            fields = (
                plates.get(trip.vehicle_id),
                trip.user_id,
                trip.driver_id,
                trip.purpose,
                trip.trip_purpose,
            )
            return any(term in value.lower() for value in fields if value)

        return [trip for trip in trips if matches(trip)]

    def _reopen(self, active: Trip) -> None:
        """Put a trip back to active after its vehicle could not be updated."""
        logger.error(
            f"Vehicle {active.vehicle_id} was not updated, reopening trip {active.id}")
        try:
            self.store.save_trip(active)
        except StoreUnavailableError as e:
            logger.error(f"Could not reopen trip {active.id}, it stays completed: {e}")

    def _require_trip(self, trip_id: str) -> Trip:
        trip = self.store.get_trip(trip_id)
        if trip is None:
            raise NotFoundError("trip", trip_id)
        return trip

    def _require_vehicle(self, vehicle_id: str) -> Vehicle:
        vehicle = self.store.get_vehicle(vehicle_id)
        if vehicle is None:
            raise NotFoundError("vehicle", vehicle_id)
        return vehicle


def _require_active(trip: Trip, action: str) -> None:
    if trip.status.is_terminal:
        logger.warning(f"Refused to {action} trip {trip.id}: already {trip.status.value}")
        raise InvalidStateTransitionError(trip.id, trip.status.value, action)


def _check_odometer(vehicle: Vehicle, reading: float) -> None:
    if reading < 0:
        raise InvalidReadingError(f"Odometer reading {reading} cannot be negative")
    if vehicle.current_odometer is not None and reading < vehicle.current_odometer:
        raise InvalidReadingError(
            f"Odometer reading {reading} is lower than vehicle {vehicle.id}'s "
            f"current odometer {vehicle.current_odometer}")


def _check_fuel_level(vehicle: Vehicle, level: float) -> None:
    if not vehicle.fuel_level_in_range(level):
        raise InvalidReadingError(
            f"Fuel level {level} is outside 0-{vehicle.fuel_capacity} for vehicle {vehicle.id}")


def _build_inspection(trip: Trip, inspection_type: str, notes: Optional[str] = None,
                      **checklist: bool) -> Inspection:
    unknown = set(checklist) - set(CHECKLIST_FIELDS)
    if unknown:
        raise ValueError(f"Unknown checklist items: {', '.join(sorted(unknown))}")
    return Inspection(
        trip_id=trip.id,
        vehicle_id=trip.vehicle_id,
        inspection_type=inspection_type,
        notes=notes,
        **{name: bool(value) for name, value in checklist.items()},
    )
