"""Command modules for the FleetTrack CLI."""

from fleettrack.cli_module.commands.vehicle_commands import vehicle_group
from fleettrack.cli_module.commands.trip_commands import trip_group
from fleettrack.cli_module.commands.stats_commands import stats_group
from fleettrack.cli_module.commands.config_commands import config_group

__all__ = [
    'vehicle_group',
    'trip_group',
    'stats_group',
    'config_group',
]
