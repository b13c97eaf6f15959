"""TRAILGUARD PRIME HTTP API."""
