# TRAILGUARD - Shared Libraries
"""
Shared core libraries for TRAILGUARD services.

Modules:
    trailguard_core: Trailing-stop pricing engine, TWAP, oracle and amount math
"""

__version__ = "1.0.0"
