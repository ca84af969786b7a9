"""Inspection entity for the FleetTrack application."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fleettrack.models.timestamps import format_datetime, parse_datetime, utcnow

# Checklist items every inspection answers
CHECKLIST_FIELDS = (
    "all_windows_good",
    "all_mirrors_good",
    "all_tires_good",
    "all_lights_good",
    "all_doors_good",
    "all_seats_good",
)


@dataclass(frozen=True)
class Inspection:
    """
    A vehicle inspection recorded against a trip.

    Attributes:
        trip_id: ID of the trip the inspection belongs to
        vehicle_id: ID of the inspected vehicle
        inspection_type: Free-form tag such as "pre_trip" or "post_trip"
        all_windows_good: Windows checked and fine
        all_mirrors_good: Mirrors checked and fine
        all_tires_good: Tires checked and fine
        all_lights_good: Lights checked and fine
        all_doors_good: Doors checked and fine
        all_seats_good: Seats checked and fine
        notes: Optional remarks from the driver
        id: Unique identifier for the inspection
        created_at: When the inspection was recorded
        needs_service: Derived, true when any checklist item failed
    """
    trip_id: str
    vehicle_id: str
    inspection_type: str
    all_windows_good: bool = False
    all_mirrors_good: bool = False
    all_tires_good: bool = False
    all_lights_good: bool = False
    all_doors_good: bool = False
    all_seats_good: bool = False
    notes: Optional[str] = None
    id: str = None
    created_at: datetime = None
    needs_service: bool = field(init=False)

    def __post_init__(self):
        # Frozen dataclass, so defaults go through object.__setattr__
        if self.id is None:
            object.__setattr__(self, "id", str(uuid4()))
        if self.created_at is None:
            object.__setattr__(self, "created_at", utcnow())
        object.__setattr__(self, "needs_service", bool(self.failed_items()))

    def failed_items(self) -> List[str]:
        """Names of checklist items that did not pass."""
        return [name for name in CHECKLIST_FIELDS if not getattr(self, name)]

    def passed_items(self) -> List[str]:
        return [name for name in CHECKLIST_FIELDS if getattr(self, name)]

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "trip_id": self.trip_id,
            "vehicle_id": self.vehicle_id,
            "inspection_type": self.inspection_type,
        }
        for name in CHECKLIST_FIELDS:
            data[name] = getattr(self, name)
        data["needs_service"] = self.needs_service
        data["notes"] = self.notes
        data["created_at"] = format_datetime(self.created_at)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Inspection":
        """Rebuild an inspection; a stored needs_service value is recomputed."""
        checklist = {name: bool(data.get(name, False)) for name in CHECKLIST_FIELDS}
        return cls(
            id=data.get("id"),
            trip_id=data["trip_id"],
            vehicle_id=data["vehicle_id"],
            inspection_type=data["inspection_type"],
            notes=data.get("notes"),
            created_at=parse_datetime(data.get("created_at")),
            **checklist,
        )
