"""Trip commands for the FleetTrack CLI."""

import click
from tabulate import tabulate

from fleettrack.models.inspection import CHECKLIST_FIELDS
from fleettrack.models.trip import TripStatus
from fleettrack.services import calculator
from fleettrack.services.trip_service import TripService
from fleettrack.cli_module.utils import (
    format_number, format_timestamp, get_store, get_user, report_errors
)

STATUS_CHOICES = [status.value for status in TripStatus]


def _checklist_options(f):
    """Add a --<item>/--no-<item> flag for every inspection checklist item."""
    for name in reversed(CHECKLIST_FIELDS):
        flag = name.replace("all_", "").replace("_good", "")
        f = click.option(f"--{flag}/--no-{flag}", name, default=True,
                         help=f"All {flag} in good condition")(f)
    return f


def _echo_trip(trip):
    click.echo(f"Trip ID: {trip.id}")
    click.echo(f"Vehicle: {trip.vehicle_id}")
    click.echo(f"User: {trip.user_id}")
    if trip.driver_id:
        click.echo(f"Driver: {trip.driver_id}")
    if trip.purpose:
        click.echo(f"Purpose: {trip.purpose}")
    if trip.trip_purpose:
        click.echo(f"Trip purpose: {trip.trip_purpose}")
    click.echo(f"Status: {trip.status.value}")
    click.echo(f"Started: {format_timestamp(trip.start_time)}")
    if trip.end_time:
        click.echo(f"Ended: {format_timestamp(trip.end_time)}")
    click.echo(f"Odometer: {format_number(trip.start_odometer)} -> {format_number(trip.end_odometer)}")
    click.echo(f"Fuel: {format_number(trip.fuel_level_start)} -> {format_number(trip.fuel_level_end)}")
    if trip.calculated_distance is not None:
        click.echo(f"Distance: {format_number(trip.calculated_distance)} km")
    duration = calculator.trip_duration(trip)
    if duration is not None:
        click.echo(f"Duration: {round(duration)} min")
    if trip.damage_report:
        click.echo(f"Damage report: {trip.damage_report}")
    if trip.cancellation_reason:
        click.echo(f"Cancellation reason: {trip.cancellation_reason}")
    for inspection in trip.inspections:
        state = "needs service" if inspection.needs_service else "ok"
        click.echo(f"Inspection {inspection.inspection_type} ({state})"
                   + (f": {inspection.notes}" if inspection.notes else ""))


@click.group(name="trip")
def trip_group():
    """Trip lifecycle commands."""
    pass


@trip_group.command()
@click.argument("vehicle_id")
@click.option("--user", "user_id", help="User opening the trip (defaults to the configured user)")
@click.option("--driver", "driver_id", help="Driver, if someone else drives")
@click.option("--purpose", help="Purpose of the trip")
@click.option("--trip-purpose", help="Purpose as recorded by newer clients")
@click.option("--odometer", type=float, help="Odometer reading at start")
@click.option("--fuel", type=float, help="Fuel level at start")
@click.pass_context
@report_errors
def start(ctx, vehicle_id, user_id, driver_id, purpose, trip_purpose, odometer, fuel):
    """Start a trip on a vehicle."""
    user_id = user_id or get_user()
    if not user_id:
        click.echo("No user given. Pass --user or run 'fleettrack config set-user'.", err=True)
        raise SystemExit(1)

    trip = TripService(get_store(ctx)).start_trip(
        vehicle_id, user_id, driver_id=driver_id, purpose=purpose, trip_purpose=trip_purpose,
        start_odometer=odometer, fuel_level_start=fuel,
    )
    click.echo("Trip started successfully!")
    click.echo(f"Trip ID: {trip.id}")


@trip_group.command()
@click.argument("trip_id")
@click.option("--odometer", type=float, help="Odometer reading at the end")
@click.option("--fuel", type=float, help="Fuel level at the end")
@click.option("--damage-report", help="Damage noticed during the trip")
@click.option("--inspection-type", help="Record a closing inspection of this type, e.g. post_trip")
@_checklist_options
@click.option("--notes", help="Closing inspection notes")
@click.pass_context
@report_errors
def end(ctx, trip_id, odometer, fuel, damage_report, inspection_type, notes, **checklist):
    """
    Complete an active trip.

    Checklist flags and --notes only apply together with --inspection-type.
    """
    inspection = None
    if inspection_type:
        inspection = {"inspection_type": inspection_type, "notes": notes, **checklist}

    trip = TripService(get_store(ctx)).end_trip(
        trip_id, end_odometer=odometer, fuel_level_end=fuel, damage_report=damage_report,
        inspection=inspection)
    click.echo("Trip completed.")
    if trip.calculated_distance is not None:
        click.echo(f"Distance: {format_number(trip.calculated_distance)} km")
    if inspection and trip.inspections[-1].needs_service:
        click.echo(f"Vehicle needs service: {', '.join(trip.inspections[-1].failed_items())}")


@trip_group.command()
@click.argument("trip_id")
@click.option("--reason", help="Why the trip is cancelled")
@click.pass_context
@report_errors
def cancel(ctx, trip_id, reason):
    """Cancel an active trip."""
    TripService(get_store(ctx)).cancel_trip(trip_id, reason=reason)
    click.echo(f"Trip {trip_id} cancelled.")


@trip_group.command()
@click.argument("trip_id")
@click.option("--type", "inspection_type", default="pre_trip", show_default=True,
              help="Inspection type")
@_checklist_options
@click.option("--notes", help="Inspection notes")
@click.pass_context
@report_errors
def inspect(ctx, trip_id, inspection_type, notes, **checklist):
    """Record an inspection on an active trip."""
    inspection = TripService(get_store(ctx)).record_inspection(
        trip_id, inspection_type, notes=notes, **checklist)

    click.echo(f"Inspection recorded: {inspection.id}")
    if inspection.needs_service:
        click.echo(f"Vehicle needs service: {', '.join(inspection.failed_items())}")


@trip_group.command(name="list")
@click.option("--status", type=click.Choice(STATUS_CHOICES), help="Only trips with this status")
@click.option("--vehicle", "vehicle_id", help="Only trips for this vehicle")
@click.option("--search", help="Match vehicle plate, user, driver or purpose")
@click.pass_context
@report_errors
def list_trips(ctx, status, vehicle_id, search):
    """List trips, newest first."""
    service = TripService(get_store(ctx))
    status = TripStatus(status) if status else None

    if search:
        trips = service.search_trips(search, status=status)
        if vehicle_id:
            trips = [trip for trip in trips if trip.vehicle_id == vehicle_id]
    else:
        trips = service.list_trips(status=status, vehicle_id=vehicle_id)

    if not trips:
        click.echo("No trips found.")
        return

    rows = [
        [trip.id, trip.vehicle_id, trip.user_id, trip.status.value,
         format_timestamp(trip.start_time), format_timestamp(trip.end_time),
         format_number(trip.calculated_distance)]
        for trip in trips
    ]
    click.echo(tabulate(rows, headers=["ID", "Vehicle", "User", "Status", "Started", "Ended", "Distance"]))


@trip_group.command()
@click.argument("trip_id")
@click.pass_context
@report_errors
def show(ctx, trip_id):
    """Show details for a trip."""
    _echo_trip(TripService(get_store(ctx)).get_trip(trip_id))
