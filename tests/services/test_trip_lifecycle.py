"""Tests for starting, ending and cancelling trips."""

import copy
import threading
import time
from datetime import datetime, timedelta, timezone

import pytest

from fleettrack.models.inspection import CHECKLIST_FIELDS
from fleettrack.models.trip import TripStatus
from fleettrack.models.vehicle import VehicleStatus
from fleettrack.services.errors import (
    InvalidReadingError,
    InvalidStateTransitionError,
    InvalidTimestampError,
    NotFoundError,
    StoreUnavailableError,
    VehicleUnavailableError,
)
from fleettrack.services.locks import KeyedLock
from fleettrack.services.trip_service import TripService
from fleettrack.store.memory import InMemoryStore

T1 = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
T2 = T1 + timedelta(hours=2)


@pytest.fixture
def vehicle(store, make_vehicle):
    return store.save_vehicle(make_vehicle(current_odometer=100, fuel_level=50, fuel_capacity=70))


@pytest.fixture
def service(store):
    return TripService(store, locks=KeyedLock(timeout=2))


@pytest.fixture
def active_trip(service, vehicle):
    return service.start_trip(vehicle.id, "user-1", start_odometer=100, fuel_level_start=50,
                              start_time=T1)


class TestStartTrip:
    """Opening trips."""

    def test_start_creates_active_trip(self, service, store, vehicle):
        trip = service.start_trip(vehicle.id, "user-1", driver_id="driver-7",
                                  purpose="Delivery", trip_purpose="client run",
                                  start_odometer=105, fuel_level_start=48, start_time=T1)

        assert trip.status is TripStatus.ACTIVE
        assert trip.start_time == T1
        assert trip.purpose == "Delivery"
        assert trip.trip_purpose == "client run"
        assert store.get_trip(trip.id).driver_id == "driver-7"

    def test_start_snapshots_vehicle_readings(self, service, vehicle):
        trip = service.start_trip(vehicle.id, "user-1")

        assert trip.start_odometer == 100
        assert trip.fuel_level_start == 50

    def test_start_accepts_iso_timestamp(self, service, vehicle):
        trip = service.start_trip(vehicle.id, "user-1", start_time="2024-05-01T08:00:00Z")
        assert trip.start_time == T1

    @pytest.mark.parametrize("status, reason", [
        (VehicleStatus.MAINTENANCE, "maintenance"),
        (VehicleStatus.INACTIVE, "inactive"),
    ])
    def test_ineligible_vehicle_rejected(self, service, store, make_vehicle, status, reason):
        vehicle = store.save_vehicle(make_vehicle(status=status))

        with pytest.raises(VehicleUnavailableError) as excinfo:
            service.start_trip(vehicle.id, "user-1")

        assert excinfo.value.reason == reason
        assert store.list_trips() == []

    def test_second_trip_rejected(self, service, store, active_trip):
        with pytest.raises(VehicleUnavailableError) as excinfo:
            service.start_trip(active_trip.vehicle_id, "user-2")

        assert excinfo.value.reason == "already on trip"
        assert len(store.list_trips()) == 1

    def test_unknown_vehicle(self, service, store):
        with pytest.raises(NotFoundError):
            service.start_trip("missing", "user-1")
        assert store.list_trips() == []

    def test_odometer_below_vehicle_reading_rejected(self, service, store, vehicle):
        with pytest.raises(InvalidReadingError):
            service.start_trip(vehicle.id, "user-1", start_odometer=90)
        assert store.list_trips() == []

    def test_fuel_above_capacity_rejected(self, service, store, vehicle):
        with pytest.raises(InvalidReadingError):
            service.start_trip(vehicle.id, "user-1", fuel_level_start=80)
        assert store.list_trips() == []

    def test_vehicle_free_again_after_trip_ends(self, service, active_trip):
        service.end_trip(active_trip.id, end_odometer=110, end_time=T2)
        trip = service.start_trip(active_trip.vehicle_id, "user-2")
        assert trip.is_active


class TestEndTrip:
    """Completing trips."""

    def test_end_computes_distance_and_updates_vehicle(self, service, store, active_trip):
        trip = service.end_trip(active_trip.id, end_odometer=120, fuel_level_end=40, end_time=T2)

        assert trip.status is TripStatus.COMPLETED
        assert trip.calculated_distance == 20
        assert trip.end_time == T2

        vehicle = store.get_vehicle(active_trip.vehicle_id)
        assert vehicle.current_odometer == 120
        assert vehicle.fuel_level == 40

    def test_end_without_readings_keeps_vehicle(self, service, store, active_trip):
        trip = service.end_trip(active_trip.id, end_time=T2)

        assert trip.calculated_distance is None
        vehicle = store.get_vehicle(active_trip.vehicle_id)
        assert vehicle.current_odometer == 100
        assert vehicle.fuel_level == 50

    def test_end_defaults_to_now(self, service, active_trip):
        trip = service.end_trip(active_trip.id, end_odometer=101)
        assert trip.end_time >= T1

    def test_odometer_going_backwards_leaves_trip_active(self, service, store, active_trip):
        with pytest.raises(InvalidReadingError):
            service.end_trip(active_trip.id, end_odometer=90, end_time=T2)

        trip = store.get_trip(active_trip.id)
        assert trip.status is TripStatus.ACTIVE
        assert trip.end_time is None
        assert store.get_vehicle(active_trip.vehicle_id).current_odometer == 100

    def test_end_before_start_rejected(self, service, store, active_trip):
        with pytest.raises(InvalidTimestampError):
            service.end_trip(active_trip.id, end_odometer=120, end_time=T1 - timedelta(minutes=1))
        assert store.get_trip(active_trip.id).is_active

    def test_fuel_out_of_range_rejected(self, service, store, active_trip):
        with pytest.raises(InvalidReadingError):
            service.end_trip(active_trip.id, fuel_level_end=-5, end_time=T2)
        assert store.get_trip(active_trip.id).is_active

    def test_end_records_damage_and_inspection(self, service, active_trip):
        checklist = {name: True for name in CHECKLIST_FIELDS}
        checklist["all_lights_good"] = False

        trip = service.end_trip(
            active_trip.id, end_odometer=120, end_time=T2, damage_report="Scratched bumper",
            inspection={"inspection_type": "post_trip", "notes": "Left indicator out", **checklist},
        )

        assert trip.damage_report == "Scratched bumper"
        assert len(trip.inspections) == 1
        assert trip.inspections[0].needs_service is True

    def test_unknown_trip(self, service):
        with pytest.raises(NotFoundError):
            service.end_trip("missing", end_odometer=10)


class TestCancelTrip:
    """Cancelling trips."""

    def test_cancel_leaves_vehicle_untouched(self, service, store, active_trip):
        trip = service.cancel_trip(active_trip.id, reason="Meeting moved")

        assert trip.status is TripStatus.CANCELLED
        assert trip.cancellation_reason == "Meeting moved"
        assert trip.end_time >= trip.start_time

        vehicle = store.get_vehicle(active_trip.vehicle_id)
        assert vehicle.current_odometer == 100
        assert vehicle.fuel_level == 50

    def test_cancel_frees_vehicle(self, service, active_trip):
        service.cancel_trip(active_trip.id)
        assert service.start_trip(active_trip.vehicle_id, "user-2").is_active


class TestTerminalTrips:
    """No transitions out of completed or cancelled."""

    @pytest.fixture(params=["completed", "cancelled"])
    def finished_trip(self, request, service, active_trip):
        if request.param == "completed":
            return service.end_trip(active_trip.id, end_odometer=120, end_time=T2)
        return service.cancel_trip(active_trip.id)

    def test_transitions_rejected_repeatedly(self, service, store, finished_trip):
        before = store.get_trip(finished_trip.id).to_dict()
        vehicle_before = store.get_vehicle(finished_trip.vehicle_id).to_dict()

        for _ in range(2):
            with pytest.raises(InvalidStateTransitionError):
                service.end_trip(finished_trip.id, end_odometer=200, end_time=T2)
            with pytest.raises(InvalidStateTransitionError):
                service.cancel_trip(finished_trip.id)
            with pytest.raises(InvalidStateTransitionError):
                service.record_inspection(finished_trip.id, "post_trip")

        assert store.get_trip(finished_trip.id).to_dict() == before
        assert store.get_vehicle(finished_trip.vehicle_id).to_dict() == vehicle_before


class TestInspections:
    """Inspections recorded during a trip."""

    def test_record_inspection(self, service, store, active_trip):
        checklist = {name: True for name in CHECKLIST_FIELDS}
        inspection = service.record_inspection(active_trip.id, "pre_trip", notes="All fine",
                                               **checklist)

        assert inspection.needs_service is False
        assert inspection.vehicle_id == active_trip.vehicle_id
        stored = store.get_trip(active_trip.id)
        assert [i.id for i in stored.inspections] == [inspection.id]

    def test_inspections_keep_order(self, service, store, active_trip):
        first = service.record_inspection(active_trip.id, "pre_trip")
        second = service.record_inspection(active_trip.id, "mid_trip")

        stored = store.get_trip(active_trip.id)
        assert [i.id for i in stored.inspections] == [first.id, second.id]

    def test_unknown_checklist_item(self, service, store, active_trip):
        with pytest.raises(ValueError):
            service.record_inspection(active_trip.id, "pre_trip", all_wipers_good=True)
        assert store.get_trip(active_trip.id).inspections == []


class TestQueries:
    """Listing and searching trips."""

    def test_list_newest_first(self, service, store, make_vehicle):
        first = store.save_vehicle(make_vehicle())
        second = store.save_vehicle(make_vehicle())
        older = service.start_trip(first.id, "user-1", start_time=T1)
        newer = service.start_trip(second.id, "user-1", start_time=T2)

        assert [trip.id for trip in service.list_trips()] == [newer.id, older.id]

    def test_list_by_status(self, service, active_trip):
        assert service.list_trips(status=TripStatus.COMPLETED) == []
        assert [t.id for t in service.list_trips(status=TripStatus.ACTIVE)] == [active_trip.id]

    def test_search_by_plate_and_purpose(self, service, store, make_vehicle):
        van = store.save_vehicle(make_vehicle(number_plate="KCX 555Z"))
        car = store.save_vehicle(make_vehicle(number_plate="KBB 111B"))
        van_trip = service.start_trip(van.id, "alice", purpose="Warehouse run")
        car_trip = service.start_trip(car.id, "bob", trip_purpose="Airport pickup")

        assert [t.id for t in service.search_trips("kcx")] == [van_trip.id]
        assert [t.id for t in service.search_trips("AIRPORT")] == [car_trip.id]
        assert [t.id for t in service.search_trips("bob")] == [car_trip.id]
        assert len(service.search_trips("  ")) == 2

    def test_get_unknown_trip(self, service):
        with pytest.raises(NotFoundError):
            service.get_trip("missing")


class SlowStore(InMemoryStore):
    """Widens the gap between the availability check and the insert."""

    def active_trip_for(self, vehicle_id):
        trip = super().active_trip_for(vehicle_id)
        time.sleep(0.01)
        return trip


class UnguardedStore(SlowStore):
    """Inserts trips without checking for another active trip."""

    def create_trip(self, trip):
        with self._lock:
            self._trips[trip.id] = copy.deepcopy(trip)
            return copy.deepcopy(trip)


class TestConcurrentStarts:
    """At most one active trip per vehicle under concurrent starts."""

    def _race(self, services, vehicle_id, attempts=8):
        results = []
        barrier = threading.Barrier(attempts)

        def attempt(index):
            barrier.wait()
            try:
                services[index % len(services)].start_trip(vehicle_id, f"user-{index}")
                results.append("started")
            except VehicleUnavailableError:
                results.append("rejected")

        threads = [threading.Thread(target=attempt, args=(i,)) for i in range(attempts)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        return results

    def test_service_uses_given_lock(self, store):
        locks = KeyedLock(timeout=5)
        assert len(locks) == 0
        assert TripService(store, locks=locks).locks is locks

    def test_services_sharing_a_lock_serialize_starts(self, make_vehicle):
        store = UnguardedStore()
        vehicle = store.save_vehicle(make_vehicle())
        locks = KeyedLock(timeout=5)
        services = [TripService(store, locks=locks) for _ in range(4)]

        results = self._race(services, vehicle.id)

        assert results.count("started") == 1
        assert results.count("rejected") == 7
        assert len(store.list_trips(vehicle_id=vehicle.id, status=TripStatus.ACTIVE)) == 1
        assert len(locks) == 0

    def test_one_winner_with_shared_lock(self, make_vehicle):
        store = SlowStore()
        vehicle = store.save_vehicle(make_vehicle())
        service = TripService(store, locks=KeyedLock(timeout=5))

        results = self._race([service], vehicle.id)

        assert results.count("started") == 1
        assert results.count("rejected") == 7
        assert len(store.list_trips(vehicle_id=vehicle.id, status=TripStatus.ACTIVE)) == 1

    def test_store_constraint_without_shared_lock(self, make_vehicle):
        store = SlowStore()
        vehicle = store.save_vehicle(make_vehicle())
        services = [TripService(store, locks=KeyedLock(timeout=5)) for _ in range(4)]

        results = self._race(services, vehicle.id)

        assert results.count("started") == 1
        assert len(store.list_trips(vehicle_id=vehicle.id, status=TripStatus.ACTIVE)) == 1

    def test_distinct_vehicles_start_concurrently(self, make_vehicle):
        store = InMemoryStore()
        vehicles = [store.save_vehicle(make_vehicle()) for _ in range(4)]
        service = TripService(store, locks=KeyedLock(timeout=5))

        threads = [
            threading.Thread(target=service.start_trip, args=(v.id, "user-1")) for v in vehicles
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store.list_trips(status=TripStatus.ACTIVE)) == 4


class FailingVehicleStore(InMemoryStore):
    """Accepts trip writes but times out on vehicle writes once armed."""

    fail_vehicle_writes = False

    def save_vehicle(self, vehicle):
        if self.fail_vehicle_writes:
            raise StoreUnavailableError("timed out")
        return super().save_vehicle(vehicle)


class TestStoreFailures:
    """Store failures surface unchanged and release the vehicle lock."""

    def test_store_failure_on_create(self, make_vehicle):
        class FailingStore(InMemoryStore):
            def create_trip(self, trip):
                raise StoreUnavailableError("timed out")

        store = FailingStore()
        vehicle = store.save_vehicle(make_vehicle())
        locks = KeyedLock(timeout=1)
        service = TripService(store, locks=locks)
        assert service.locks is locks

        with pytest.raises(StoreUnavailableError):
            service.start_trip(vehicle.id, "user-1")

        assert len(locks) == 0
        assert store.list_trips() == []
        with locks.hold(vehicle.id):
            assert len(locks) == 1

    def test_vehicle_write_failure_reopens_trip(self, make_vehicle):
        store = FailingVehicleStore()
        vehicle = store.save_vehicle(make_vehicle(current_odometer=100, fuel_level=50))
        locks = KeyedLock(timeout=1)
        service = TripService(store, locks=locks)
        trip = service.start_trip(vehicle.id, "user-1", start_time=T1)
        store.fail_vehicle_writes = True

        with pytest.raises(StoreUnavailableError):
            service.end_trip(trip.id, end_odometer=130, fuel_level_end=30, end_time=T2)

        stored = store.get_trip(trip.id)
        assert stored.status is TripStatus.ACTIVE
        assert stored.end_time is None
        assert stored.end_odometer is None
        assert store.get_vehicle(vehicle.id).current_odometer == 100
        assert store.get_vehicle(vehicle.id).fuel_level == 50
        assert len(locks) == 0

        store.fail_vehicle_writes = False
        ended = service.end_trip(trip.id, end_odometer=130, fuel_level_end=30, end_time=T2)
        assert ended.calculated_distance == 30
        assert store.get_vehicle(vehicle.id).current_odometer == 130
