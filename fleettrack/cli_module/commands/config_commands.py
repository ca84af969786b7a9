"""Local configuration commands for the FleetTrack CLI."""

import click

from fleettrack import config
from fleettrack.cli_module.utils import get_user, save_user


@click.group(name="config")
def config_group():
    """Manage local CLI settings."""
    pass


@config_group.command(name="set-user")
@click.argument("user_id")
def set_user(user_id):
    """Remember USER_ID as the user opening trips."""
    save_user(user_id)
    click.echo(f"Current user set to {user_id}")


@config_group.command()
def show():
    """Show the current settings."""
    click.echo(f"User: {get_user() or '(not set)'}")
    click.echo(f"Store URL: {config.BASE_URL}")
    click.echo(f"Request timeout: {config.REQUEST_TIMEOUT}s")
    click.echo(f"Lock timeout: {config.LOCK_TIMEOUT}s")
