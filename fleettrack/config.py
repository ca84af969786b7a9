"""Runtime settings for FleetTrack, read from the environment."""

import os

# Base URL for the JSON collection server
BASE_URL = os.environ.get("FLEETTRACK_API_URL", "http://localhost:3000")

# Seconds before a store request is abandoned
REQUEST_TIMEOUT = float(os.environ.get("FLEETTRACK_REQUEST_TIMEOUT", "5"))

# Seconds to wait for another operation on the same vehicle to finish
LOCK_TIMEOUT = float(os.environ.get("FLEETTRACK_LOCK_TIMEOUT", "10"))

LOG_LEVEL = os.environ.get("FLEETTRACK_LOG_LEVEL", "INFO")

# Where the CLI keeps the signed-in user
CONFIG_DIR = os.path.expanduser(os.environ.get("FLEETTRACK_CONFIG_DIR", "~/.fleettrack"))
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")
