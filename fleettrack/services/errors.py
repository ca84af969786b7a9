"""Exceptions raised by the FleetTrack services."""


class FleetServiceError(Exception):
    """Base exception for fleet service errors."""
    pass


class NotFoundError(FleetServiceError):
    """A referenced vehicle, trip or department does not exist."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind.capitalize()} with ID {record_id} not found")


class VehicleUnavailableError(FleetServiceError):
    """The vehicle cannot start a trip right now."""

    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"
    ALREADY_ON_TRIP = "already on trip"

    def __init__(self, vehicle_id: str, reason: str):
        self.vehicle_id = vehicle_id
        self.reason = reason
        super().__init__(f"Vehicle {vehicle_id} is unavailable: {reason}")


class InvalidReadingError(FleetServiceError):
    """An odometer or fuel reading is out of order or out of range."""
    pass


class InvalidTimestampError(FleetServiceError):
    """A trip timestamp is earlier than the one it must follow."""
    pass


class InvalidStateTransitionError(FleetServiceError):
    """An operation was attempted on a trip that no longer allows it."""

    def __init__(self, trip_id: str, status: str, action: str):
        self.trip_id = trip_id
        self.status = status
        self.action = action
        super().__init__(f"Cannot {action} trip {trip_id} with status {status}")


class StoreUnavailableError(FleetServiceError):
    """The entity store timed out or failed; safe for the caller to retry."""
    pass
