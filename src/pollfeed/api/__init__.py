"""HTTP API for the Pollfeed service."""
