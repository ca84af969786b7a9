"""Dashboard statistics commands for the FleetTrack CLI."""

import click
from tabulate import tabulate

from fleettrack.services.stats_service import StatsService
from fleettrack.cli_module.utils import format_number, get_store, report_errors


def _window(since, until):
    if since is None and until is None:
        return None
    return (since, until)


@click.group(name="stats")
def stats_group():
    """Fleet and trip statistics."""
    pass


@stats_group.command()
@click.pass_context
@report_errors
def fleet(ctx):
    """Fleet size, status counts and average fuel level."""
    stats = StatsService(get_store(ctx)).fleet()

    click.echo(f"Total vehicles: {stats.total}")
    click.echo(f"Active: {stats.active}")
    click.echo(f"Maintenance: {stats.maintenance}")
    click.echo(f"Average fuel: {format_number(float(stats.avg_fuel))}")


@stats_group.command()
@click.option("--since", type=click.DateTime(), help="Only trips started at or after this time")
@click.option("--until", type=click.DateTime(), help="Only trips started at or before this time")
@click.pass_context
@report_errors
def trips(ctx, since, until):
    """Trip counts by status, average duration and total distance."""
    service = StatsService(get_store(ctx))
    window = _window(since, until)
    stats = service.trips(window)

    click.echo(f"Active trips: {stats.active}")
    click.echo(f"Completed trips: {stats.completed}")
    click.echo(f"Cancelled trips: {service.trip_statuses(window)['cancelled']}")
    click.echo(f"Average duration: {round(stats.avg_duration)} min")
    click.echo(f"Total distance: {format_number(float(stats.total_distance))} km")


@stats_group.command()
@click.option("--since", type=click.DateTime(), help="Only trips started at or after this time")
@click.option("--until", type=click.DateTime(), help="Only trips started at or before this time")
@click.pass_context
@report_errors
def departments(ctx, since, until):
    """Vehicle and trip utilization per department."""
    results = StatsService(get_store(ctx)).departments(_window(since, until))

    if not results:
        click.echo("No departments found.")
        return

    rows = [
        [d.code, d.name, d.total_vehicles, d.active_vehicles, d.total_trips,
         d.completed_trips, f"{d.utilization_rate}%", d.avg_trips_per_vehicle]
        for d in results
    ]
    click.echo(tabulate(rows, headers=[
        "Code", "Department", "Vehicles", "Active", "Trips", "Completed", "Utilization", "Trips/Vehicle"]))


@stats_group.command()
@click.option("--since", type=click.DateTime(), help="Only trips started at or after this time")
@click.option("--until", type=click.DateTime(), help="Only trips started at or before this time")
@click.pass_context
@report_errors
def drivers(ctx, since, until):
    """Trips, distance and time on the road per driver."""
    results = StatsService(get_store(ctx)).drivers(_window(since, until))

    if not results:
        click.echo("No trips found.")
        return

    rows = [
        [d.driver_id, d.total_trips, d.completed_trips, d.cancelled_trips,
         format_number(float(d.total_distance)), round(d.total_duration),
         round(d.avg_duration)]
        for d in results
    ]
    click.echo(tabulate(rows, headers=[
        "Driver", "Trips", "Completed", "Cancelled", "Distance (km)", "Minutes", "Avg Minutes"]))


@stats_group.command()
@click.option("--since", type=click.DateTime(), help="Only trips started at or after this time")
@click.option("--until", type=click.DateTime(), help="Only trips started at or before this time")
@click.pass_context
@report_errors
def fuel(ctx, since, until):
    """Fuel capacity by fuel type and fuel used on completed trips."""
    breakdown = StatsService(get_store(ctx)).fuel(_window(since, until))

    click.echo(f"Total vehicles: {breakdown.total_vehicles}")
    click.echo(f"Total fuel capacity: {format_number(float(breakdown.total_capacity))}")
    click.echo(f"Average fuel capacity: {format_number(float(breakdown.avg_capacity))}")
    click.echo(f"Fuel used: {format_number(float(breakdown.total_consumption))}")

    if breakdown.by_fuel_type:
        rows = [
            [fuel_type, count,
             format_number(float(breakdown.consumption_by_fuel_type.get(fuel_type, 0)))]
            for fuel_type, count in sorted(breakdown.by_fuel_type.items())
        ]
        click.echo()
        click.echo(tabulate(rows, headers=["Fuel Type", "Vehicles", "Fuel Used"]))
