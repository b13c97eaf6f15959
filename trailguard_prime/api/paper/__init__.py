"""Paper-mode price and balance endpoints."""
