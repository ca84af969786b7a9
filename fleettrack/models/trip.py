"""Trip entity for the FleetTrack application."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fleettrack.models.inspection import Inspection
from fleettrack.models.timestamps import format_datetime, parse_datetime, utcnow


class TripStatus(Enum):
    """Possible statuses for a trip."""
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not TripStatus.ACTIVE


@dataclass
class Trip:
    """
    Represents a vehicle checked out for a trip.

    Attributes:
        id: Unique identifier for the trip
        vehicle_id: ID of the vehicle in use
        user_id: ID of the user who opened the trip
        driver_id: ID of the driver, when different from the user
        purpose: Purpose as entered when the trip was opened
        trip_purpose: Purpose field used by newer clients, kept as-is
        start_time: When the trip started
        end_time: When the trip was completed or cancelled
        start_odometer: Odometer reading at start
        end_odometer: Odometer reading at end
        fuel_level_start: Fuel level at start
        fuel_level_end: Fuel level at end
        calculated_distance: Derived from the odometer readings on completion
        damage_report: Damage noted by the driver
        cancellation_reason: Why the trip was cancelled
        status: Current status of the trip
        inspections: Inspections recorded for the trip, oldest first
        created_at: When the record was created
        updated_at: When the record last changed
    """
    vehicle_id: str
    user_id: str
    id: str = None
    driver_id: Optional[str] = None
    purpose: Optional[str] = None
    trip_purpose: Optional[str] = None
    start_time: datetime = None
    end_time: Optional[datetime] = None
    start_odometer: Optional[float] = None
    end_odometer: Optional[float] = None
    fuel_level_start: Optional[float] = None
    fuel_level_end: Optional[float] = None
    calculated_distance: Optional[float] = None
    damage_report: Optional[str] = None
    cancellation_reason: Optional[str] = None
    status: TripStatus = TripStatus.ACTIVE
    inspections: List[Inspection] = field(default_factory=list)
    created_at: datetime = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Initialize default values."""
        if self.id is None:
            self.id = str(uuid4())
        if self.start_time is None:
            self.start_time = utcnow()
        if self.created_at is None:
            self.created_at = self.start_time

    @property
    def is_active(self) -> bool:
        return self.status is TripStatus.ACTIVE

    @property
    def is_completed(self) -> bool:
        return self.status is TripStatus.COMPLETED

    def complete(self, end_time: datetime, end_odometer: Optional[float] = None,
                 fuel_level_end: Optional[float] = None,
                 calculated_distance: Optional[float] = None,
                 damage_report: Optional[str] = None) -> None:
        """Mark the trip completed with its closing readings."""
        self.end_time = end_time
        self.end_odometer = end_odometer
        self.fuel_level_end = fuel_level_end
        self.calculated_distance = calculated_distance
        if damage_report is not None:
            self.damage_report = damage_report
        self.status = TripStatus.COMPLETED
        self.updated_at = utcnow()

    def cancel(self, end_time: datetime, reason: Optional[str] = None) -> None:
        """Cancel the trip."""
        self.end_time = end_time
        self.cancellation_reason = reason
        self.status = TripStatus.CANCELLED
        self.updated_at = utcnow()

    def add_inspection(self, inspection: Inspection) -> None:
        self.inspections.append(inspection)
        self.updated_at = utcnow()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "vehicle_id": self.vehicle_id,
            "user_id": self.user_id,
            "driver_id": self.driver_id,
            "purpose": self.purpose,
            "trip_purpose": self.trip_purpose,
            "start_time": format_datetime(self.start_time),
            "end_time": format_datetime(self.end_time),
            "start_odometer": self.start_odometer,
            "end_odometer": self.end_odometer,
            "fuel_level_start": self.fuel_level_start,
            "fuel_level_end": self.fuel_level_end,
            "calculated_distance": self.calculated_distance,
            "damage_report": self.damage_report,
            "cancellation_reason": self.cancellation_reason,
            "status": self.status.value,
            "inspections": [inspection.to_dict() for inspection in self.inspections],
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Trip":
        """Build a trip from a store record; unknown keys are ignored."""
        return cls(
            id=data.get("id"),
            vehicle_id=data["vehicle_id"],
            user_id=data["user_id"],
            driver_id=data.get("driver_id"),
            purpose=data.get("purpose"),
            trip_purpose=data.get("trip_purpose"),
            start_time=parse_datetime(data["start_time"]),
            end_time=parse_datetime(data.get("end_time")),
            start_odometer=data.get("start_odometer"),
            end_odometer=data.get("end_odometer"),
            fuel_level_start=data.get("fuel_level_start"),
            fuel_level_end=data.get("fuel_level_end"),
            calculated_distance=data.get("calculated_distance"),
            damage_report=data.get("damage_report"),
            cancellation_reason=data.get("cancellation_reason"),
            status=TripStatus(data.get("status", TripStatus.ACTIVE.value)),
            inspections=[Inspection.from_dict(item) for item in data.get("inspections") or []],
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
        )
