"""Services implementing the FleetTrack trip lifecycle and statistics."""
