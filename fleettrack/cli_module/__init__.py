"""Command line interface for FleetTrack."""
