"""Vehicle commands for the FleetTrack CLI."""

import click
from tabulate import tabulate

from fleettrack.models.vehicle import VehicleStatus
from fleettrack.services.vehicle_service import VehicleService
from fleettrack.cli_module.utils import format_number, get_store, report_errors

STATUS_CHOICES = [status.value for status in VehicleStatus]


@click.group(name="vehicle")
def vehicle_group():
    """Vehicle lookup commands."""
    pass


@vehicle_group.command(name="list")
@click.option("--status", type=click.Choice(STATUS_CHOICES), help="Only vehicles with this status")
@click.option("--department", "department_id", help="Only vehicles in this department")
@click.option("--search", help="Match name, plate, make, model, department or driver")
@click.pass_context
@report_errors
def list_vehicles(ctx, status, department_id, search):
    """List fleet vehicles."""
    service = VehicleService(get_store(ctx))

    if search:
        vehicles = service.search_vehicles(search)
        if status:
            vehicles = [v for v in vehicles if v.status.value == status]
        if department_id:
            vehicles = [v for v in vehicles if v.department_id == department_id]
    else:
        vehicles = service.list_vehicles(
            status=VehicleStatus(status) if status else None, department_id=department_id)

    if not vehicles:
        click.echo("No vehicles found.")
        return

    rows = [
        [v.id, v.name, v.number_plate, v.full_name, v.status.value,
         format_number(v.fuel_level), format_number(v.current_odometer)]
        for v in vehicles
    ]
    click.echo(tabulate(rows, headers=["ID", "Name", "Plate", "Vehicle", "Status", "Fuel", "Odometer"]))


@vehicle_group.command()
@click.argument("vehicle_id")
@click.pass_context
@report_errors
def show(ctx, vehicle_id):
    """Show details for a vehicle."""
    vehicle = VehicleService(get_store(ctx)).get_vehicle(vehicle_id)

    click.echo(f"Vehicle ID: {vehicle.id}")
    click.echo(f"Name: {vehicle.name}")
    click.echo(f"Plate: {vehicle.number_plate}")
    click.echo(f"Vehicle: {vehicle.full_name}")
    if vehicle.vin:
        click.echo(f"VIN: {vehicle.vin}")
    click.echo(f"Status: {vehicle.status.value}")
    click.echo(f"Fuel: {format_number(vehicle.fuel_level)} / {format_number(vehicle.fuel_capacity)} "
               f"({vehicle.fuel_type.value})")
    click.echo(f"Odometer: {format_number(vehicle.current_odometer)}")
    if vehicle.department_id:
        click.echo(f"Department: {vehicle.department_id}")
    if vehicle.next_service_due:
        click.echo(f"Next service due: {vehicle.next_service_due.isoformat()}")


@vehicle_group.command()
@click.argument("vehicle_id")
@click.pass_context
@report_errors
def availability(ctx, vehicle_id):
    """Check whether a vehicle can start a trip."""
    result = VehicleService(get_store(ctx)).check_availability(vehicle_id)

    if result["available"]:
        click.echo(f"Vehicle {vehicle_id} is available.")
    else:
        click.echo(f"Vehicle {vehicle_id} is unavailable: {result['reason']}")
