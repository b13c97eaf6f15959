"""API service singletons."""
