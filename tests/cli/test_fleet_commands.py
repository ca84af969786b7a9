"""Tests for the vehicle, stats and config CLI commands."""

import pytest
from click.testing import CliRunner

from fleettrack import config
from fleettrack.cli_module.cli import cli
from fleettrack.models.vehicle import VehicleStatus


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "CONFIG_DIR", str(tmp_path / "fleettrack"))
    monkeypatch.setattr(config, "CONFIG_FILE", str(tmp_path / "fleettrack" / "config.json"))


@pytest.fixture
def fleet(store, make_vehicle, department):
    store.save_department(department)
    return [
        store.save_vehicle(make_vehicle(name="Hilux", number_plate="KDA 001A", fuel_level=50,
                                        department_id=department.id)),
        store.save_vehicle(make_vehicle(name="Ranger", number_plate="KDB 002B", fuel_level=30)),
        store.save_vehicle(make_vehicle(name="Leaf", number_plate="KDC 003C", fuel_level=None,
                                        status=VehicleStatus.MAINTENANCE)),
    ]


def invoke(runner, store, *args):
    return runner.invoke(cli, list(args), obj={"store": store})


class TestVehicleCommands:

    def test_list(self, runner, store, fleet):
        result = invoke(runner, store, "vehicle", "list")

        assert result.exit_code == 0, result.output
        for vehicle in fleet:
            assert vehicle.number_plate in result.output

    def test_list_by_status(self, runner, store, fleet):
        result = invoke(runner, store, "vehicle", "list", "--status", "maintenance")

        assert "KDC 003C" in result.output
        assert "KDA 001A" not in result.output

    def test_search_by_department(self, runner, store, fleet):
        result = invoke(runner, store, "vehicle", "list", "--search", "operations")

        assert "KDA 001A" in result.output
        assert "KDB 002B" not in result.output

    def test_show(self, runner, store, fleet):
        result = invoke(runner, store, "vehicle", "show", fleet[0].id)

        assert result.exit_code == 0
        assert "Plate: KDA 001A" in result.output
        assert "Status: active" in result.output

    def test_availability(self, runner, store, fleet):
        available = invoke(runner, store, "vehicle", "availability", fleet[0].id)
        unavailable = invoke(runner, store, "vehicle", "availability", fleet[2].id)
        missing = invoke(runner, store, "vehicle", "availability", "missing")

        assert "is available" in available.output
        assert "unavailable: maintenance" in unavailable.output
        assert missing.exit_code == 1


class TestStatsCommands:

    def test_fleet(self, runner, store, fleet):
        result = invoke(runner, store, "stats", "fleet")

        assert result.exit_code == 0, result.output
        assert "Total vehicles: 3" in result.output
        assert "Active: 2" in result.output
        assert "Maintenance: 1" in result.output
        assert "Average fuel: 40.0" in result.output

    def test_trips(self, runner, store, fleet):
        invoke(runner, store, "trip", "start", fleet[0].id, "--user", "u1")
        trip_id = store.list_trips()[0].id
        invoke(runner, store, "trip", "end", trip_id, "--odometer", "130")

        result = invoke(runner, store, "stats", "trips")

        assert result.exit_code == 0, result.output
        assert "Completed trips: 1" in result.output
        assert "Total distance: 30.0 km" in result.output

    def test_trips_with_window(self, runner, store, fleet):
        result = invoke(runner, store, "stats", "trips", "--since", "2000-01-01")
        assert "Active trips: 0" in result.output

    def test_trips_counts_cancelled(self, runner, store, fleet):
        invoke(runner, store, "trip", "start", fleet[0].id, "--user", "u1")
        invoke(runner, store, "trip", "cancel", store.list_trips()[0].id)

        result = invoke(runner, store, "stats", "trips")

        assert "Cancelled trips: 1" in result.output
        assert "Active trips: 0" in result.output

    def test_drivers(self, runner, store, fleet):
        invoke(runner, store, "trip", "start", fleet[0].id, "--user", "u1", "--driver", "d-9")
        invoke(runner, store, "trip", "end", store.list_trips()[0].id, "--odometer", "125")

        result = invoke(runner, store, "stats", "drivers")

        assert result.exit_code == 0, result.output
        assert "d-9" in result.output
        assert "25.0" in result.output

    def test_drivers_without_trips(self, runner, store, fleet):
        result = invoke(runner, store, "stats", "drivers")
        assert "No trips found." in result.output

    def test_fuel(self, runner, store, fleet):
        invoke(runner, store, "trip", "start", fleet[0].id, "--user", "u1")
        invoke(runner, store, "trip", "end", store.list_trips()[0].id, "--fuel", "42")

        result = invoke(runner, store, "stats", "fuel")

        assert result.exit_code == 0, result.output
        assert "Total fuel capacity: 210.0" in result.output
        assert "Average fuel capacity: 70.0" in result.output
        assert "Fuel used: 8.0" in result.output
        assert "diesel" in result.output

    def test_departments(self, runner, store, fleet):
        result = invoke(runner, store, "stats", "departments")

        assert result.exit_code == 0, result.output
        assert "OPS" in result.output
        assert "100%" in result.output


class TestConfigCommands:

    def test_set_and_show_user(self, runner, store):
        assert "(not set)" in invoke(runner, store, "config", "show").output

        invoke(runner, store, "config", "set-user", "user-42")
        result = invoke(runner, store, "config", "show")

        assert "User: user-42" in result.output
        assert "Store URL:" in result.output
