"""Entity store backed by the FleetTrack JSON collection server."""

import logging
from typing import Any, Dict, List, Optional

import requests

from fleettrack import config
from fleettrack.models.department import Department
from fleettrack.models.trip import Trip, TripStatus
from fleettrack.models.vehicle import Vehicle
from fleettrack.services.errors import StoreUnavailableError, VehicleUnavailableError
from fleettrack.store.base import EntityStore

logger = logging.getLogger(__name__)


class JsonServerStore(EntityStore):
    """
    Talks to a JSON collection server over HTTP.

    The server exposes ``/<collection>``, ``/<collection>/<id>`` and
    ``/<collection>/query?field=value``. Every request carries a timeout;
    timeouts, connection failures and error responses are reported as
    StoreUnavailableError and never retried here. A 409 on an active trip
    write means the vehicle already has an active trip.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or config.BASE_URL).rstrip("/")
        self.timeout = config.REQUEST_TIMEOUT if timeout is None else timeout

    # Vehicles

    def get_vehicle(self, vehicle_id: str) -> Optional[Vehicle]:
        data = self._get_item("vehicles", vehicle_id)
        return Vehicle.from_dict(data) if data is not None else None

    def list_vehicles(self) -> List[Vehicle]:
        return [Vehicle.from_dict(item) for item in self._get_collection("vehicles")]

    def save_vehicle(self, vehicle: Vehicle) -> Vehicle:
        data = self._upsert("vehicles", vehicle.id, vehicle.to_dict())
        return Vehicle.from_dict(data)

    # Departments

    def get_department(self, department_id: str) -> Optional[Department]:
        data = self._get_item("departments", department_id)
        return Department.from_dict(data) if data is not None else None

    def list_departments(self) -> List[Department]:
        return [Department.from_dict(item) for item in self._get_collection("departments")]

    def save_department(self, department: Department) -> Department:
        data = self._upsert("departments", department.id, department.to_dict())
        return Department.from_dict(data)

    # Trips

    def get_trip(self, trip_id: str) -> Optional[Trip]:
        data = self._get_item("trips", trip_id)
        return Trip.from_dict(data) if data is not None else None

    def list_trips(self, vehicle_id: Optional[str] = None,
                   status: Optional[TripStatus] = None) -> List[Trip]:
        params = {}
        if vehicle_id is not None:
            params["vehicle_id"] = vehicle_id
        if status is not None:
            params["status"] = status.value

        if params:
            items = self._query("trips", params)
        else:
            items = self._get_collection("trips")
        return [Trip.from_dict(item) for item in items]

    def create_trip(self, trip: Trip) -> Trip:
        data = self._request("post", f"{self.base_url}/trips", json=trip.to_dict(),
                             conflict=_already_on_trip(trip))
        return Trip.from_dict(data) if _has_fields(data, "vehicle_id") else trip

    def save_trip(self, trip: Trip) -> Trip:
        data = self._request("put", f"{self.base_url}/trips/{trip.id}", json=trip.to_dict(),
                             conflict=_already_on_trip(trip))
        return Trip.from_dict(data) if _has_fields(data, "vehicle_id") else trip

    # HTTP plumbing

    def _get_item(self, collection: str, item_id: str) -> Optional[Dict[str, Any]]:
        return self._request("get", f"{self.base_url}/{collection}/{item_id}", missing_ok=True)

    def _get_collection(self, collection: str) -> List[Dict[str, Any]]:
        return self._request("get", f"{self.base_url}/{collection}", missing_ok=True) or []

    def _query(self, collection: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        # The server answers 404 when nothing matches
        return self._request(
            "get", f"{self.base_url}/{collection}/query", params=params, missing_ok=True) or []

    def _upsert(self, collection: str, item_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if self._get_item(collection, item_id) is None:
            data = self._request("post", f"{self.base_url}/{collection}", json=payload)
        else:
            data = self._request("put", f"{self.base_url}/{collection}/{item_id}", json=payload)
        return data if isinstance(data, dict) and data else payload

    def _request(self, method: str, url: str, missing_ok: bool = False,
                 conflict: Optional[Exception] = None, **kwargs) -> Any:
        try:
            response = requests.request(method, url, timeout=self.timeout, **kwargs)

            if missing_ok and response.status_code == 404:
                return None
            if conflict is not None and response.status_code == 409:
                logger.warning(f"Store refused {method.upper()} {url}: {response.text}")
                raise conflict

            response.raise_for_status()
            return response.json()

        except requests.Timeout as e:
            logger.error(f"Store request timed out: {method.upper()} {url}")
            raise StoreUnavailableError(f"Store request timed out: {str(e)}")
        except requests.RequestException as e:
            logger.error(f"Store request failed: {method.upper()} {url}: {e}")
            raise StoreUnavailableError(f"Store request failed: {str(e)}")
        except ValueError as e:
            logger.error(f"Store returned invalid JSON for {method.upper()} {url}")
            raise StoreUnavailableError(f"Store returned an invalid response: {str(e)}")


def _has_fields(data: Any, *names: str) -> bool:
    """Whether the server echoed back a usable record."""
    return isinstance(data, dict) and all(name in data for name in names)


def _already_on_trip(trip: Trip) -> Optional[VehicleUnavailableError]:
    """The error for a 409 on a trip write: the vehicle has another active trip."""
    if not trip.is_active:
        return None
    return VehicleUnavailableError(trip.vehicle_id, VehicleUnavailableError.ALREADY_ON_TRIP)
