"""Vehicle entity for the FleetTrack application."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional
from uuid import uuid4

from fleettrack.models.timestamps import (
    format_date, format_datetime, parse_date, parse_datetime, utcnow
)


class FuelType(Enum):
    """Fuel types a vehicle can run on."""
    PETROL = "petrol"
    DIESEL = "diesel"
    ELECTRIC = "electric"
    HYBRID = "hybrid"


class VehicleStatus(Enum):
    """Operational status of a vehicle."""
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"


@dataclass
class Vehicle:
    """
    Represents a vehicle in the fleet.

    Attributes:
        id: Unique identifier for the vehicle
        name: Display name used by fleet managers
        number_plate: Registration plate
        make: Vehicle manufacturer
        model: Vehicle model
        year: Model year
        fuel_type: What the vehicle runs on
        fuel_capacity: Tank (or battery) capacity, always positive
        vin: Optional vehicle identification number
        fuel_level: Last known fuel level, within [0, fuel_capacity]
        current_odometer: Last known odometer reading, never decreases
        status: Operational status
        department_id: ID of the department the vehicle belongs to
        assigned_driver_id: ID of the driver the vehicle is assigned to
        license_expiry: When the vehicle license expires
        insurance_expiry: When the insurance expires
        last_service_date: When the vehicle was last serviced
        next_service_due: When the next service is due
        created_at: When the vehicle was added
        updated_at: When the vehicle was last changed
    """
    name: str
    number_plate: str
    make: str
    model: str
    year: int
    fuel_type: FuelType
    fuel_capacity: float
    id: str = None
    vin: Optional[str] = None
    fuel_level: Optional[float] = None
    current_odometer: Optional[float] = None
    status: VehicleStatus = VehicleStatus.ACTIVE
    department_id: Optional[str] = None
    assigned_driver_id: Optional[str] = None
    license_expiry: Optional[date] = None
    insurance_expiry: Optional[date] = None
    last_service_date: Optional[date] = None
    next_service_due: Optional[date] = None
    created_at: datetime = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Initialize default values and validate readings."""
        if self.id is None:
            self.id = str(uuid4())
        if self.created_at is None:
            self.created_at = utcnow()
        if self.fuel_capacity is None or self.fuel_capacity <= 0:
            raise ValueError("fuel_capacity must be greater than 0")
        if self.current_odometer is not None and self.current_odometer < 0:
            raise ValueError("current_odometer cannot be negative")
        if self.fuel_level is not None and not self.fuel_level_in_range(self.fuel_level):
            raise ValueError(f"fuel_level must be between 0 and {self.fuel_capacity}")

    @property
    def full_name(self) -> str:
        """Year, make and model, e.g. '2021 Toyota Hilux'."""
        return f"{self.year} {self.make} {self.model}"

    @property
    def is_active(self) -> bool:
        return self.status is VehicleStatus.ACTIVE

    def fuel_level_in_range(self, level: float) -> bool:
        """Whether a fuel reading fits this vehicle's capacity."""
        return 0 <= level <= self.fuel_capacity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "number_plate": self.number_plate,
            "vin": self.vin,
            "make": self.make,
            "model": self.model,
            "year": self.year,
            "fuel_type": self.fuel_type.value,
            "fuel_capacity": self.fuel_capacity,
            "fuel_level": self.fuel_level,
            "current_odometer": self.current_odometer,
            "status": self.status.value,
            "department_id": self.department_id,
            "assigned_driver_id": self.assigned_driver_id,
            "license_expiry": format_date(self.license_expiry),
            "insurance_expiry": format_date(self.insurance_expiry),
            "last_service_date": format_date(self.last_service_date),
            "next_service_due": format_date(self.next_service_due),
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Vehicle":
        """Build a vehicle from a store record; unknown keys are ignored."""
        return cls(
            id=data.get("id"),
            name=data["name"],
            number_plate=data["number_plate"],
            vin=data.get("vin"),
            make=data["make"],
            model=data["model"],
            year=data["year"],
            fuel_type=FuelType(data["fuel_type"]),
            fuel_capacity=data["fuel_capacity"],
            fuel_level=data.get("fuel_level"),
            current_odometer=data.get("current_odometer"),
            status=VehicleStatus(data.get("status", VehicleStatus.ACTIVE.value)),
            department_id=data.get("department_id"),
            assigned_driver_id=data.get("assigned_driver_id"),
            license_expiry=parse_date(data.get("license_expiry")),
            insurance_expiry=parse_date(data.get("insurance_expiry")),
            last_service_date=parse_date(data.get("last_service_date")),
            next_service_due=parse_date(data.get("next_service_due")),
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
        )
