"""Entity store adapters for FleetTrack."""
from fleettrack.store.base import EntityStore
from fleettrack.store.memory import InMemoryStore
from fleettrack.store.json_server import JsonServerStore


__all__ = [
    'EntityStore',
    'InMemoryStore',
    'JsonServerStore',
]
