# TRAILGUARD PRIME Plugins
"""
Plugin collection for TRAILGUARD PRIME.

Categories:
    feeds: Price feed adapters
    ledger: Settlement custody
"""
