"""FleetTrack: trip lifecycle and fleet statistics for vehicle fleets."""

__version__ = "0.1.0"
