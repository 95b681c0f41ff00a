"""HTTP API for the price service."""
