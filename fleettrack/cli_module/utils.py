"""Utility functions for the CLI interface."""

from functools import wraps
import os
import json
from typing import Optional

import click

from fleettrack import config
from fleettrack.services.errors import FleetServiceError
from fleettrack.store.json_server import JsonServerStore


def save_user(user_id: str) -> None:
    """Save the current user to the config file."""
    if not os.path.exists(config.CONFIG_DIR):
        os.makedirs(config.CONFIG_DIR)

    with open(config.CONFIG_FILE, 'w') as f:
        json.dump({"user_id": user_id}, f)


def get_user() -> Optional[str]:
    """Get the current user from the config file."""
    if not os.path.exists(config.CONFIG_FILE):
        return None

    try:
        with open(config.CONFIG_FILE, 'r') as f:
            return json.load(f).get("user_id")
    except json.JSONDecodeError:
        return None


def get_store(ctx: click.Context):
    """The entity store for this invocation, created on first use."""
    obj = ctx.ensure_object(dict)
    if "store" not in obj:
        obj["store"] = JsonServerStore()
    return obj["store"]


def report_errors(f):
    """Print service errors as 'Error: ...' on stderr and exit with status 1."""
    @wraps(f)
    def wrapped(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (FleetServiceError, ValueError) as e:
            click.echo(f"Error: {str(e)}", err=True)
            raise SystemExit(1)
    return wrapped


def format_number(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:.1f}"
    return str(value)


def format_timestamp(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value is not None else "-"
