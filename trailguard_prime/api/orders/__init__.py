"""Trailing-stop order endpoints."""
