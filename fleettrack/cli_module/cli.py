"""Main CLI entry point for the FleetTrack application."""

import logging

import click

from fleettrack import config

# Set context settings to properly display help for all commands
CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 120,
    "show_default": True
}

from fleettrack.cli_module.commands.vehicle_commands import vehicle_group
from fleettrack.cli_module.commands.trip_commands import trip_group
from fleettrack.cli_module.commands.stats_commands import stats_group
from fleettrack.cli_module.commands.config_commands import config_group


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output")
@click.pass_context
def cli(ctx, verbose):
    """FleetTrack CLI for vehicle trips and fleet statistics."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)


# Register all command groups
cli.add_command(vehicle_group)
cli.add_command(trip_group)
cli.add_command(stats_group)
cli.add_command(config_group)


def main():
    """Entry point for the application."""
    cli()


if __name__ == '__main__':
    main()
