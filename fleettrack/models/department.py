"""Department entity for the FleetTrack application."""

from dataclasses import dataclass
from typing import Any, Dict
from uuid import uuid4


@dataclass
class Department:
    """
    An organisational unit vehicles can be attached to.

    Vehicles point at a department through ``department_id``; the department
    itself keeps no list of its vehicles.
    """
    name: str
    code: str
    id: str = None

    def __post_init__(self):
        if self.id is None:
            self.id = str(uuid4())

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "code": self.code}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Department":
        return cls(id=data.get("id"), name=data["name"], code=data["code"])
